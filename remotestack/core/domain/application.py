"""KubernetesApplication: the aggregate manifest shipped to a remote cluster."""

from __future__ import annotations

import json
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import Field

from .meta import GroupVersionKind, KubeModel, KubeObject, ObjectMeta

KUBERNETES_APPLICATION_GVK = GroupVersionKind(
    group="workload.crossplane.io",
    version="v1alpha1",
    kind="KubernetesApplication",
)


class KubernetesApplicationResourceSpec(KubeModel):
    template: Dict[str, Any] = Field(default_factory=dict)


class KubernetesApplicationResourceTemplate(KubeModel):
    """One fragment of the aggregate: an opaque document discriminated by kind."""

    metadata: Optional[ObjectMeta] = None
    spec: KubernetesApplicationResourceSpec = Field(default_factory=KubernetesApplicationResourceSpec)

    @property
    def template_kind(self) -> str:
        return str(self.spec.template.get("kind") or "")

    @classmethod
    def wrap(cls, template: Dict[str, Any]) -> "KubernetesApplicationResourceTemplate":
        return cls(spec=KubernetesApplicationResourceSpec(template=template))


class KubernetesApplicationSpec(KubeModel):
    resource_selector: Optional[Dict[str, Any]] = None
    target_selector: Optional[Dict[str, Any]] = None
    resource_templates: List[KubernetesApplicationResourceTemplate] = Field(default_factory=list)


class KubernetesApplication(KubeObject):
    gvk: ClassVar[GroupVersionKind] = KUBERNETES_APPLICATION_GVK
    plural: ClassVar[str] = "kubernetesapplications"

    spec: KubernetesApplicationSpec = Field(default_factory=KubernetesApplicationSpec)
    status: Optional[Dict[str, Any]] = None

    def fragment_kinds(self) -> List[str]:
        return [t.template_kind for t in self.spec.resource_templates]


def encode_fragment(template: Dict[str, Any]) -> str:
    """Canonical, compact JSON for one fragment document."""
    return json.dumps(template, separators=(",", ":"), sort_keys=True)
