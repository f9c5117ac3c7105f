"""OAM descriptors: the workloads and traits authored by application operators."""

from __future__ import annotations

from abc import abstractmethod
from typing import ClassVar, List, Literal, Optional

from pydantic import Field

from .meta import ConditionedStatus, GroupVersionKind, KubeModel, KubeObject, NamespacedName

OAM_GROUP = "core.oam.dev"
OAM_VERSION = "v1alpha2"

CONTAINERIZED_WORKLOAD_GVK = GroupVersionKind(group=OAM_GROUP, version=OAM_VERSION, kind="ContainerizedWorkload")
MANUAL_SCALER_TRAIT_GVK = GroupVersionKind(group=OAM_GROUP, version=OAM_VERSION, kind="ManualScalerTrait")

OperatingSystem = Literal["linux", "windows"]
CPUArchitecture = Literal["i386", "amd64", "arm", "arm64"]
TransportProtocol = Literal["TCP", "UDP"]
VolumeAccessMode = Literal["RO", "RW"]
VolumeSharingPolicy = Literal["Exclusive", "Shared"]

VOLUME_ACCESS_MODE_READ_ONLY = "RO"


class Descriptor(KubeObject):
    """Common base for OAM descriptors carrying a Synced condition."""

    status: ConditionedStatus = Field(default_factory=ConditionedStatus)


class Workload(Descriptor):
    """An OAM workload: originates the KubernetesApplication it is packaged into."""

    def package_key(self) -> NamespacedName:
        return NamespacedName(namespace=self.metadata.namespace, name=self.metadata.name)


class TypedReference(KubeModel):
    api_version: str
    kind: str
    name: str
    uid: Optional[str] = None


class Trait(Descriptor):
    """An OAM trait: modifies the package of the workload it references."""

    @abstractmethod
    def get_workload_ref(self) -> TypedReference:
        """Reference to the workload whose package this trait modifies."""

    def package_key(self) -> NamespacedName:
        return NamespacedName(namespace=self.metadata.namespace, name=self.get_workload_ref().name)


# ── ContainerizedWorkload ────────────────────────────────────────────


class CPUResources(KubeModel):
    required: str


class MemoryResources(KubeModel):
    required: str


class VolumeResource(KubeModel):
    name: str
    mount_path: str
    access_mode: Optional[VolumeAccessMode] = None
    sharing_policy: Optional[VolumeSharingPolicy] = None


class ContainerResources(KubeModel):
    cpu: Optional[CPUResources] = None
    memory: Optional[MemoryResources] = None
    volumes: List[VolumeResource] = Field(default_factory=list)


class ContainerEnvVar(KubeModel):
    name: str
    value: Optional[str] = None


class ContainerPort(KubeModel):
    name: str
    port: int = Field(alias="containerPort")
    protocol: Optional[TransportProtocol] = None


class HTTPHeader(KubeModel):
    name: str
    value: str


class HTTPGetProbe(KubeModel):
    path: str
    port: int
    http_headers: List[HTTPHeader] = Field(default_factory=list)


class ExecProbe(KubeModel):
    command: List[str] = Field(default_factory=list)


class TCPSocketProbe(KubeModel):
    port: int


class ContainerHealthProbe(KubeModel):
    exec: Optional[ExecProbe] = None
    http_get: Optional[HTTPGetProbe] = None
    tcp_socket: Optional[TCPSocketProbe] = None
    initial_delay_seconds: Optional[int] = None
    period_seconds: Optional[int] = None
    timeout_seconds: Optional[int] = None
    success_threshold: Optional[int] = None
    failure_threshold: Optional[int] = None


class ContainerSpec(KubeModel):
    name: str
    image: str
    resources: Optional[ContainerResources] = None
    command: List[str] = Field(default_factory=list, alias="cmd")
    arguments: List[str] = Field(default_factory=list, alias="args")
    environment: List[ContainerEnvVar] = Field(default_factory=list, alias="env")
    ports: List[ContainerPort] = Field(default_factory=list)
    liveness_probe: Optional[ContainerHealthProbe] = None
    readiness_probe: Optional[ContainerHealthProbe] = None
    image_pull_secret: Optional[str] = None


class ContainerizedWorkloadSpec(KubeModel):
    operating_system: Optional[OperatingSystem] = Field(default=None, alias="osType")
    cpu_architecture: Optional[CPUArchitecture] = Field(default=None, alias="arch")
    containers: List[ContainerSpec] = Field(default_factory=list)


class ContainerizedWorkload(Workload):
    gvk: ClassVar[GroupVersionKind] = CONTAINERIZED_WORKLOAD_GVK
    plural: ClassVar[str] = "containerizedworkloads"

    spec: ContainerizedWorkloadSpec = Field(default_factory=ContainerizedWorkloadSpec)


# ── ManualScalerTrait ────────────────────────────────────────────────


class ManualScalerTraitSpec(KubeModel):
    replica_count: int
    workload_ref: TypedReference


class ManualScalerTrait(Trait):
    gvk: ClassVar[GroupVersionKind] = MANUAL_SCALER_TRAIT_GVK
    plural: ClassVar[str] = "manualscalertraits"

    spec: ManualScalerTraitSpec

    def get_workload_ref(self) -> TypedReference:
        return self.spec.workload_ref
