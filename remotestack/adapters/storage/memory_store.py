from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, Tuple, Type, TypeVar

from remotestack.core.contracts.object_store import ObjectStoreContract
from remotestack.core.domain.meta import KubeObject, NamespacedName
from remotestack.exceptions import ConflictError, NotFoundError

T = TypeVar("T", bound=KubeObject)

StoreKey = Tuple[str, str, str, str]


class InMemoryObjectStore(ObjectStoreContract):
    """
    Dict-backed object store with API-server write semantics.

    Objects are held as wire documents; reads return fresh model instances so
    callers never share state with the store.
    """

    def __init__(self) -> None:
        self._objects: Dict[StoreKey, Dict[str, Any]] = {}
        self._revision = 0

    @staticmethod
    def _key(api_version: str, kind: str, key: NamespacedName) -> StoreKey:
        return (api_version, kind, key.namespace, key.name)

    def _next_revision(self) -> str:
        self._revision += 1
        return str(self._revision)

    def _stored(self, obj: KubeObject) -> Dict[str, Any]:
        store_key = self._key(obj.api_version, obj.kind, obj.key)
        current = self._objects.get(store_key)
        if current is None:
            raise NotFoundError(f'{obj.kind} "{obj.key}" not found')
        expected = obj.metadata.resource_version
        actual = current.get("metadata", {}).get("resourceVersion")
        if expected and expected != actual:
            raise ConflictError(
                f'Operation cannot be fulfilled on {obj.kind} "{obj.key}": '
                "the object has been modified; please apply your changes to the latest version and try again"
            )
        return current

    async def get(self, kind: Type[T], key: NamespacedName) -> T:
        gvk = kind.gvk
        document = self._objects.get(self._key(gvk.api_version, gvk.kind, key))
        if document is None:
            raise NotFoundError(f'{gvk.kind} "{key}" not found')
        return kind.model_validate(copy.deepcopy(document))

    async def create(self, obj: T) -> T:
        store_key = self._key(obj.api_version, obj.kind, obj.key)
        if store_key in self._objects:
            raise ConflictError(f'{obj.kind} "{obj.key}" already exists')
        created = obj.model_copy(deep=True)
        created.metadata.uid = created.metadata.uid or str(uuid.uuid4())
        created.metadata.resource_version = self._next_revision()
        self._objects[store_key] = created.to_document()
        return type(obj).model_validate(copy.deepcopy(self._objects[store_key]))

    async def update(self, obj: T) -> T:
        current = self._stored(obj)
        updated = obj.to_document()
        if "status" in current:
            updated["status"] = copy.deepcopy(current["status"])
        else:
            updated.pop("status", None)
        updated.setdefault("metadata", {})
        updated["metadata"]["uid"] = current.get("metadata", {}).get("uid")
        updated["metadata"]["resourceVersion"] = self._next_revision()
        self._objects[self._key(obj.api_version, obj.kind, obj.key)] = updated
        return type(obj).model_validate(copy.deepcopy(updated))

    async def update_status(self, obj: T) -> T:
        current = self._stored(obj)
        updated = copy.deepcopy(current)
        status = obj.to_document().get("status")
        if status is None:
            updated.pop("status", None)
        else:
            updated["status"] = status
        updated["metadata"]["resourceVersion"] = self._next_revision()
        self._objects[self._key(obj.api_version, obj.kind, obj.key)] = updated
        return type(obj).model_validate(copy.deepcopy(updated))

    def snapshot(self, kind: Type[KubeObject], key: NamespacedName) -> Dict[str, Any]:
        """Raw stored document, for assertions."""
        gvk = kind.gvk
        return copy.deepcopy(self._objects[self._key(gvk.api_version, gvk.kind, key)])
