"""Kubernetes-shaped domain models: descriptors, aggregate, target shapes."""

from .application import (
    KUBERNETES_APPLICATION_GVK,
    KubernetesApplication,
    KubernetesApplicationResourceSpec,
    KubernetesApplicationResourceTemplate,
    KubernetesApplicationSpec,
    encode_fragment,
)
from .deployment import DEPLOYMENT_GVK, Deployment, DeploymentSpec
from .descriptors import (
    CONTAINERIZED_WORKLOAD_GVK,
    MANUAL_SCALER_TRAIT_GVK,
    ContainerizedWorkload,
    Descriptor,
    ManualScalerTrait,
    Trait,
    TypedReference,
    Workload,
)
from .meta import (
    Condition,
    ConditionReason,
    ConditionStatus,
    ConditionType,
    ConditionedStatus,
    GroupVersionKind,
    KubeObject,
    NamespacedName,
    ObjectMeta,
    OwnerReference,
    controller_of,
    controller_reference,
    have_same_controller,
    reconcile_error,
    reconcile_success,
)

__all__ = [
    "KUBERNETES_APPLICATION_GVK",
    "KubernetesApplication",
    "KubernetesApplicationResourceSpec",
    "KubernetesApplicationResourceTemplate",
    "KubernetesApplicationSpec",
    "encode_fragment",
    "DEPLOYMENT_GVK",
    "Deployment",
    "DeploymentSpec",
    "CONTAINERIZED_WORKLOAD_GVK",
    "MANUAL_SCALER_TRAIT_GVK",
    "ContainerizedWorkload",
    "Descriptor",
    "ManualScalerTrait",
    "Trait",
    "TypedReference",
    "Workload",
    "Condition",
    "ConditionReason",
    "ConditionStatus",
    "ConditionType",
    "ConditionedStatus",
    "GroupVersionKind",
    "KubeObject",
    "NamespacedName",
    "ObjectMeta",
    "OwnerReference",
    "controller_of",
    "controller_reference",
    "have_same_controller",
    "reconcile_error",
    "reconcile_success",
]
