"""apps/v1 Deployment shapes used to encode and patch packaged fragments."""

from __future__ import annotations

from typing import ClassVar, Dict, List, Optional, Union

from pydantic import Field

from .meta import GroupVersionKind, KubeModel, KubeObject, ObjectMeta

DEPLOYMENT_GVK = GroupVersionKind(group="apps", version="v1", kind="Deployment")


class HTTPHeader(KubeModel):
    name: str
    value: str


class HTTPGetAction(KubeModel):
    path: Optional[str] = None
    port: Union[int, str]
    http_headers: Optional[List[HTTPHeader]] = None


class ExecAction(KubeModel):
    command: Optional[List[str]] = None


class TCPSocketAction(KubeModel):
    port: Union[int, str]


class Probe(KubeModel):
    http_get: Optional[HTTPGetAction] = None
    exec: Optional[ExecAction] = None
    tcp_socket: Optional[TCPSocketAction] = None
    initial_delay_seconds: Optional[int] = None
    timeout_seconds: Optional[int] = None
    period_seconds: Optional[int] = None
    success_threshold: Optional[int] = None
    failure_threshold: Optional[int] = None


class ContainerPort(KubeModel):
    name: Optional[str] = None
    container_port: int
    protocol: Optional[str] = None


class EnvVar(KubeModel):
    name: str
    value: Optional[str] = None


class VolumeMount(KubeModel):
    name: str
    mount_path: str
    read_only: Optional[bool] = None


class ResourceRequirements(KubeModel):
    requests: Optional[Dict[str, str]] = None
    limits: Optional[Dict[str, str]] = None


class Container(KubeModel):
    name: str
    image: Optional[str] = None
    command: Optional[List[str]] = None
    args: Optional[List[str]] = None
    ports: Optional[List[ContainerPort]] = None
    env: Optional[List[EnvVar]] = None
    resources: Optional[ResourceRequirements] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    liveness_probe: Optional[Probe] = None
    readiness_probe: Optional[Probe] = None


class LocalObjectReference(KubeModel):
    name: str


class PodSpec(KubeModel):
    containers: List[Container] = Field(default_factory=list)
    node_selector: Optional[Dict[str, str]] = None
    image_pull_secrets: Optional[List[LocalObjectReference]] = None


class PodTemplateSpec(KubeModel):
    metadata: Optional[ObjectMeta] = None
    spec: Optional[PodSpec] = None


class LabelSelector(KubeModel):
    match_labels: Optional[Dict[str, str]] = None


class DeploymentSpec(KubeModel):
    replicas: Optional[int] = None
    selector: Optional[LabelSelector] = None
    template: Optional[PodTemplateSpec] = None


class Deployment(KubeObject):
    gvk: ClassVar[GroupVersionKind] = DEPLOYMENT_GVK
    plural: ClassVar[str] = "deployments"

    spec: Optional[DeploymentSpec] = None
