from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, Optional, Type, TypeVar

from remotestack.adapters.events import NopEventRecorder
from remotestack.core.contracts.event_recorder import Event, EventRecorderContract
from remotestack.core.contracts.object_store import ObjectStoreContract
from remotestack.core.domain.application import KubernetesApplication
from remotestack.core.domain.descriptors import Descriptor, Trait, Workload
from remotestack.core.domain.meta import NamespacedName, ObjectMeta, reconcile_error, reconcile_success
from remotestack.exceptions import NotFoundError, ReconcilerConfigError, ReconcileTimeoutError, wrap
from remotestack.logging import get_logger, log_event
from remotestack.reconciler.ownership import controllers_must_match, stamp_ownership
from remotestack.reconciler.translation import (
    Modifier,
    Packager,
    descriptor_type_of,
    generic_packager,
    merge_fragment,
    noop_modifier,
)
from remotestack.settings import ReconcilerSettings

D = TypeVar("D", bound=Descriptor)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome handed back to the scheduler: when to look again, and what failed."""

    requeue_after: Optional[timedelta] = None
    error: Optional[Exception] = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None


@dataclass(frozen=True)
class _Messages:
    get_descriptor: str
    update_status: str
    get_package: str
    transform: str
    apply: str


@dataclass(frozen=True)
class _Reasons:
    cannot_get_package: str
    cannot_transform: str
    cannot_apply: str
    succeeded: str
    success_message: str


class _WorkloadStrategy:
    """A workload originates its package and re-derives its own fragments each cycle."""

    noun = "workload"
    originates_package = True
    messages = _Messages(
        get_descriptor="cannot get workload",
        update_status="cannot update workload status",
        get_package="cannot get KubernetesApplication for workload",
        transform="cannot package workload",
        apply="cannot apply workload package",
    )
    reasons = _Reasons(
        cannot_get_package="CannotGetWorkloadPackage",
        cannot_transform="CannotPackageWorkload",
        cannot_apply="CannotApplyWorkloadPackage",
        succeeded="PackagedWorkload",
        success_message="Successfully packaged workload",
    )

    def __init__(self, packager: Packager):
        self.packager = packager

    def package_key(self, descriptor: Workload) -> NamespacedName:
        return descriptor.package_key()

    def transform(self, app: KubernetesApplication, descriptor: Workload) -> KubernetesApplication:
        produced = self.packager(KubernetesApplication(), descriptor)
        merged = app.model_copy(deep=True)
        for fragment in produced.spec.resource_templates:
            merge_fragment(merged.spec.resource_templates, fragment)
        return merged


class _TraitStrategy:
    """A trait patches the package produced by the workload it references."""

    noun = "trait"
    originates_package = False
    messages = _Messages(
        get_descriptor="cannot get trait",
        update_status="cannot update trait status",
        get_package="cannot get KubernetesApplication for workload reference in trait",
        transform="cannot apply trait modification",
        apply="cannot apply trait modification to KubernetesApplication",
    )
    reasons = _Reasons(
        cannot_get_package="CannotGetReferencedWorkloadPackage",
        cannot_transform="CannotModifyPackage",
        cannot_apply="CannotApplyModification",
        succeeded="PackageModified",
        success_message="Successfully modified workload package",
    )

    def __init__(self, modifier: Modifier):
        self.modifier = modifier

    def package_key(self, descriptor: Trait) -> NamespacedName:
        return descriptor.package_key()

    def transform(self, app: KubernetesApplication, descriptor: Trait) -> KubernetesApplication:
        return self.modifier(app, descriptor)


class Reconciler(Generic[D]):
    """
    Level-triggered reconciler for one descriptor kind.

    Each call re-reads the descriptor and its KubernetesApplication, derives
    the desired package, applies it and records a Synced condition. Nothing
    is cached between calls; the scheduler guarantees at most one in-flight
    call per identity.

    Build instances with ``for_workload`` or ``for_trait``.
    """

    def __init__(
        self,
        store: ObjectStoreContract,
        kind: Type[D],
        strategy: _WorkloadStrategy | _TraitStrategy,
        *,
        settings: Optional[ReconcilerSettings] = None,
        recorder: Optional[EventRecorderContract] = None,
        logger: Optional[logging.Logger] = None,
        controller: str = "",
    ):
        self.store = store
        self.kind = kind
        self.strategy = strategy
        self.settings = settings or ReconcilerSettings()
        self.recorder = recorder or NopEventRecorder()
        self.logger = logger or get_logger("reconciler")
        self.controller = controller or f"oam/{kind.gvk.group_kind.lower()}"

    @classmethod
    def for_workload(
        cls,
        store: ObjectStoreContract,
        kind: Type[Workload],
        *,
        packager: Packager = generic_packager,
        **options,
    ) -> "Reconciler[Workload]":
        if not (isinstance(kind, type) and issubclass(kind, Workload)):
            raise ReconcilerConfigError(f"{kind!r} is not a workload kind")
        accepted = descriptor_type_of(packager, Workload)
        if not issubclass(kind, accepted):
            raise ReconcilerConfigError(
                f"packager {getattr(packager, '__name__', packager)!r} translates {accepted.__name__}, "
                f"not {kind.__name__}"
            )
        return cls(store, kind, _WorkloadStrategy(packager), **options)

    @classmethod
    def for_trait(
        cls,
        store: ObjectStoreContract,
        kind: Type[Trait],
        *,
        modifier: Modifier = noop_modifier,
        **options,
    ) -> "Reconciler[Trait]":
        if not (isinstance(kind, type) and issubclass(kind, Trait)):
            raise ReconcilerConfigError(f"{kind!r} is not a trait kind")
        accepted = descriptor_type_of(modifier, Trait)
        if not issubclass(kind, accepted):
            raise ReconcilerConfigError(
                f"modifier {getattr(modifier, '__name__', modifier)!r} applies {accepted.__name__}, "
                f"not {kind.__name__}"
            )
        return cls(store, kind, _TraitStrategy(modifier), **options)

    async def reconcile(self, request: NamespacedName) -> ReconcileResult:
        self._log("reconciling", request=str(request))
        timeout = self.settings.reconcile_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                return await self._reconcile(request)
        except TimeoutError as exc:
            err = ReconcileTimeoutError(f"reconcile of {request} exceeded its {timeout:g}s deadline")
            err.__cause__ = exc
            self._log(
                "reconcile_deadline_exceeded",
                request=str(request),
                error=str(err),
                requeue_after_seconds=self.settings.short_wait_seconds,
            )
            return ReconcileResult(requeue_after=self.settings.short_wait, error=err)

    async def _reconcile(self, request: NamespacedName) -> ReconcileResult:
        strategy = self.strategy
        messages = strategy.messages
        reasons = strategy.reasons

        try:
            descriptor = await self.store.get(self.kind, request)
        except NotFoundError:
            self._log(f"{strategy.noun}_not_found", request=str(request))
            return ReconcileResult()
        except Exception as exc:
            self._log(f"cannot_get_{strategy.noun}", request=str(request), error=str(exc))
            return ReconcileResult(
                requeue_after=self.settings.short_wait,
                error=wrap(exc, messages.get_descriptor),
            )

        context = {
            "request": str(request),
            "uid": descriptor.metadata.uid,
            "version": descriptor.metadata.resource_version,
        }
        key = strategy.package_key(descriptor)

        try:
            app = await self.store.get(KubernetesApplication, key)
        except NotFoundError as exc:
            if not strategy.originates_package:
                return await self._fail(descriptor, exc, reasons.cannot_get_package, messages.get_package, context)
            app = KubernetesApplication(metadata=ObjectMeta(name=key.name, namespace=key.namespace))
        except Exception as exc:
            return await self._fail(descriptor, exc, reasons.cannot_get_package, messages.get_package, context)

        try:
            desired = strategy.transform(app, descriptor)
        except Exception as exc:
            return await self._fail(descriptor, exc, reasons.cannot_transform, messages.transform, context)

        stamped = stamp_ownership(desired, descriptor, key)
        try:
            await self.store.apply(stamped, controllers_must_match())
        except Exception as exc:
            return await self._fail(descriptor, exc, reasons.cannot_apply, messages.apply, context)

        self.recorder.event(descriptor, Event.normal(reasons.succeeded, reasons.success_message))
        self._log(
            "reconcile_succeeded",
            package=str(key),
            fragments=stamped.fragment_kinds(),
            requeue_after_seconds=self.settings.long_wait_seconds,
            **context,
        )
        descriptor.status.set_conditions(reconcile_success())
        return await self._update_status(descriptor, self.settings.long_wait)

    async def _fail(
        self,
        descriptor: Descriptor,
        err: Exception,
        reason: str,
        message: str,
        context: dict,
    ) -> ReconcileResult:
        wrapped = wrap(err, message)
        self._log(
            "reconcile_failed",
            reason=reason,
            error=str(wrapped),
            requeue_after_seconds=self.settings.short_wait_seconds,
            **context,
        )
        self.recorder.event(descriptor, Event.warning(reason, err))
        descriptor.status.set_conditions(reconcile_error(wrapped))
        return await self._update_status(descriptor, self.settings.short_wait)

    async def _update_status(self, descriptor: Descriptor, requeue_after: timedelta) -> ReconcileResult:
        try:
            await self.store.update_status(descriptor)
        except Exception as exc:
            return ReconcileResult(
                requeue_after=requeue_after,
                error=wrap(exc, self.strategy.messages.update_status),
            )
        return ReconcileResult(requeue_after=requeue_after)

    def _log(self, event: str, **fields) -> None:
        log_event(event, fields, level="debug", logger=self.logger, controller=self.controller)
