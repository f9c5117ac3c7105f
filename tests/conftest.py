import asyncio
from typing import Any, Dict, List, Optional, Type

import pytest

from remotestack.adapters.storage.memory_store import InMemoryObjectStore
from remotestack.core.contracts.event_recorder import Event, EventRecorderContract
from remotestack.core.domain.descriptors import ContainerizedWorkload, ManualScalerTrait
from remotestack.core.domain.meta import KubeObject, NamespacedName, OwnerReference
from remotestack.settings import ReconcilerSettings


def app_config_owner(name: str = "example-appconfig", uid: str = "appconfig-uid-1") -> OwnerReference:
    return OwnerReference(
        api_version="core.oam.dev/v1alpha2",
        kind="ApplicationConfiguration",
        name=name,
        uid=uid,
        controller=True,
        block_owner_deletion=True,
    )


class WorkloadBuilder:
    def __init__(self, name: str = "example-workload", namespace: str = "default"):
        self.data: Dict[str, Any] = {
            "metadata": {"name": name, "namespace": namespace, "uid": f"{name}-uid"},
            "spec": {"containers": []},
        }

    def with_container(self, name: str = "web", image: str = "nginx", **fields: Any):
        self.data["spec"]["containers"].append({"name": name, "image": image, **fields})
        return self

    def with_os(self, os_type: str):
        self.data["spec"]["osType"] = os_type
        return self

    def with_arch(self, arch: str):
        self.data["spec"]["arch"] = arch
        return self

    def owned_by(self, owner: OwnerReference):
        self.data["metadata"].setdefault("ownerReferences", []).append(owner.to_document())
        return self

    def build(self) -> ContainerizedWorkload:
        return ContainerizedWorkload.model_validate(self.data)


class TraitBuilder:
    def __init__(
        self,
        name: str = "example-scaler",
        namespace: str = "default",
        workload: str = "example-workload",
        replicas: int = 3,
    ):
        self.data: Dict[str, Any] = {
            "metadata": {"name": name, "namespace": namespace, "uid": f"{name}-uid"},
            "spec": {
                "replicaCount": replicas,
                "workloadRef": {
                    "apiVersion": "core.oam.dev/v1alpha2",
                    "kind": "ContainerizedWorkload",
                    "name": workload,
                },
            },
        }

    def owned_by(self, owner: OwnerReference):
        self.data["metadata"].setdefault("ownerReferences", []).append(owner.to_document())
        return self

    def build(self) -> ManualScalerTrait:
        return ManualScalerTrait.model_validate(self.data)


class CapturingRecorder(EventRecorderContract):
    def __init__(self):
        self.events: List[Event] = []

    def event(self, obj: KubeObject, event: Event) -> None:
        self.events.append(event)

    @property
    def reasons(self) -> List[str]:
        return [e.reason for e in self.events]


class FaultyObjectStore(InMemoryObjectStore):
    """In-memory store with injectable failures and call accounting."""

    def __init__(self):
        super().__init__()
        self.get_errors: Dict[Type[KubeObject], Exception] = {}
        self.status_error: Optional[Exception] = None
        self.get_delay_seconds: float = 0.0
        self.status_updates: List[KubeObject] = []
        self.applies = 0

    async def get(self, kind, key: NamespacedName):
        if self.get_delay_seconds:
            await asyncio.sleep(self.get_delay_seconds)
        if kind in self.get_errors:
            raise self.get_errors[kind]
        return await super().get(kind, key)

    async def apply(self, obj, *options):
        self.applies += 1
        return await super().apply(obj, *options)

    async def update_status(self, obj):
        self.status_updates.append(obj.model_copy(deep=True))
        if self.status_error is not None:
            raise self.status_error
        return await super().update_status(obj)


@pytest.fixture
def store() -> FaultyObjectStore:
    return FaultyObjectStore()


@pytest.fixture
def recorder() -> CapturingRecorder:
    return CapturingRecorder()


@pytest.fixture
def settings() -> ReconcilerSettings:
    return ReconcilerSettings()
