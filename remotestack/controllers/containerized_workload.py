from __future__ import annotations

import logging
from typing import Dict, List, Optional

from remotestack.adapters.events import LoggingEventRecorder
from remotestack.core.contracts.event_recorder import EventRecorderContract
from remotestack.core.contracts.object_store import ObjectStoreContract
from remotestack.core.domain import deployment as k8s
from remotestack.core.domain.application import KubernetesApplication, KubernetesApplicationResourceTemplate
from remotestack.core.domain.descriptors import (
    CONTAINERIZED_WORKLOAD_GVK,
    VOLUME_ACCESS_MODE_READ_ONLY,
    ContainerHealthProbe,
    ContainerizedWorkload,
    ContainerSpec,
)
from remotestack.core.domain.meta import ObjectMeta
from remotestack.logging import get_logger
from remotestack.reconciler.engine import Reconciler
from remotestack.reconciler.translation import packager_for
from remotestack.settings import ReconcilerSettings

WORKLOAD_LABEL_KEY = "workload.oam.crossplane.io"
NODE_SELECTOR_OS = "beta.kubernetes.io/os"
NODE_SELECTOR_ARCH = "kubernetes.io/arch"


def _probe(probe: ContainerHealthProbe) -> k8s.Probe:
    out = k8s.Probe(
        initial_delay_seconds=probe.initial_delay_seconds,
        timeout_seconds=probe.timeout_seconds,
        period_seconds=probe.period_seconds,
        success_threshold=probe.success_threshold,
        failure_threshold=probe.failure_threshold,
    )

    # NOTE: Kubernetes expects exactly one handler per probe. OAM does not
    # restrict this, so every handler that is provided is set.
    if probe.http_get is not None:
        out.http_get = k8s.HTTPGetAction(
            path=probe.http_get.path,
            port=probe.http_get.port,
            http_headers=[
                k8s.HTTPHeader(name=h.name, value=h.value) for h in probe.http_get.http_headers
            ] or None,
        )
    if probe.exec is not None:
        out.exec = k8s.ExecAction(command=list(probe.exec.command))
    if probe.tcp_socket is not None:
        out.tcp_socket = k8s.TCPSocketAction(port=probe.tcp_socket.port)
    return out


def _container(container: ContainerSpec) -> k8s.Container:
    requests: Dict[str, str] = {}
    volume_mounts: List[k8s.VolumeMount] = []
    if container.resources is not None:
        if container.resources.cpu is not None:
            requests["cpu"] = container.resources.cpu.required
        if container.resources.memory is not None:
            requests["memory"] = container.resources.memory.required
        for v in container.resources.volumes:
            volume_mounts.append(
                k8s.VolumeMount(
                    name=v.name,
                    mount_path=v.mount_path,
                    read_only=True if v.access_mode == VOLUME_ACCESS_MODE_READ_ONLY else None,
                )
            )

    return k8s.Container(
        name=container.name,
        image=container.image,
        command=list(container.command) or None,
        args=list(container.arguments) or None,
        resources=k8s.ResourceRequirements(requests=requests) if requests else None,
        ports=[
            k8s.ContainerPort(name=p.name, container_port=p.port, protocol=p.protocol)
            for p in container.ports
        ] or None,
        env=[k8s.EnvVar(name=e.name, value=e.value) for e in container.environment] or None,
        liveness_probe=_probe(container.liveness_probe) if container.liveness_probe else None,
        readiness_probe=_probe(container.readiness_probe) if container.readiness_probe else None,
        volume_mounts=volume_mounts or None,
    )


def translate_containerized_workload(cw: ContainerizedWorkload) -> k8s.Deployment:
    """Map a ContainerizedWorkload onto the Deployment that runs it."""
    node_selector: Dict[str, str] = {}
    if cw.spec.operating_system is not None:
        node_selector[NODE_SELECTOR_OS] = cw.spec.operating_system
    if cw.spec.cpu_architecture is not None:
        node_selector[NODE_SELECTOR_ARCH] = cw.spec.cpu_architecture

    pull_secrets: List[k8s.LocalObjectReference] = []
    containers: List[k8s.Container] = []
    for container in cw.spec.containers:
        if container.image_pull_secret is not None:
            pull_secrets.append(k8s.LocalObjectReference(name=container.image_pull_secret))
        containers.append(_container(container))

    labels = {WORKLOAD_LABEL_KEY: cw.metadata.uid or cw.metadata.name}
    return k8s.Deployment(
        metadata=ObjectMeta(name=cw.metadata.name, namespace=cw.metadata.namespace),
        spec=k8s.DeploymentSpec(
            selector=k8s.LabelSelector(match_labels=dict(labels)),
            template=k8s.PodTemplateSpec(
                metadata=ObjectMeta(labels=dict(labels)),
                spec=k8s.PodSpec(
                    containers=containers,
                    node_selector=node_selector or None,
                    image_pull_secrets=pull_secrets or None,
                ),
            ),
        ),
    )


@packager_for(ContainerizedWorkload)
def containerized_workload_packager(
    app: KubernetesApplication,
    cw: ContainerizedWorkload,
) -> KubernetesApplication:
    """Append the workload's Deployment to a copy of the aggregate."""
    packaged = app.model_copy(deep=True)
    packaged.spec.resource_templates.append(
        KubernetesApplicationResourceTemplate.wrap(translate_containerized_workload(cw).to_document())
    )
    return packaged


def setup_containerized_workload(
    store: ObjectStoreContract,
    *,
    settings: Optional[ReconcilerSettings] = None,
    recorder: Optional[EventRecorderContract] = None,
    logger: Optional[logging.Logger] = None,
) -> Reconciler:
    """Build the reconciler that packages ContainerizedWorkloads."""
    name = "oam/" + CONTAINERIZED_WORKLOAD_GVK.group_kind.lower()
    return Reconciler.for_workload(
        store,
        ContainerizedWorkload,
        packager=containerized_workload_packager,
        settings=settings,
        recorder=recorder or LoggingEventRecorder(controller=name),
        logger=logger or get_logger("controllers"),
        controller=name,
    )
