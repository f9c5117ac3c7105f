from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Type, TypeVar

from remotestack.core.domain.meta import KubeObject, NamespacedName
from remotestack.exceptions import NotFoundError

T = TypeVar("T", bound=KubeObject)

# Inspects (current, desired) before an update and raises to veto it.
ApplyOption = Callable[[KubeObject, KubeObject], None]


class ObjectStoreContract(ABC):
    """
    Contract for keyed object stores with optimistic concurrency.

    Writes carrying a stale ``metadata.resource_version`` are rejected with
    ConflictError; the store, not the caller, detects staleness.
    """

    @abstractmethod
    async def get(self, kind: Type[T], key: NamespacedName) -> T:
        """Fetch one object or raise NotFoundError."""

    @abstractmethod
    async def create(self, obj: T) -> T:
        """Create an object; raise ConflictError if it already exists."""

    @abstractmethod
    async def update(self, obj: T) -> T:
        """Replace an object's spec and metadata (status is left as stored)."""

    @abstractmethod
    async def update_status(self, obj: T) -> T:
        """Persist only the status stanza of an object."""

    async def apply(self, obj: T, *options: ApplyOption) -> T:
        """
        Idempotent create-or-update.

        Every option sees the stored object before an update and may raise to
        reject it, in which case the stored object is left untouched.
        """
        try:
            current = await self.get(type(obj), obj.key)
        except NotFoundError:
            return await self.create(obj)

        for option in options:
            option(current, obj)

        desired = obj.model_copy(deep=True)
        desired.metadata.resource_version = current.metadata.resource_version
        desired.metadata.uid = current.metadata.uid
        return await self.update(desired)
