from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from remotestack.time_utils import now_utc


class KubeModel(BaseModel):
    """
    Base for every Kubernetes-shaped document.

    Field names are snake_case in Python and camelCase on the wire. Unknown
    fields are kept so a decode/encode round trip never drops data.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude_defaults=True)


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def group_kind(self) -> str:
        return f"{self.kind}.{self.group}" if self.group else self.kind

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


@dataclass(frozen=True)
class NamespacedName:
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


class OwnerReference(KubeModel):
    api_version: str
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = None


class ObjectMeta(KubeModel):
    name: str = ""
    namespace: str = ""
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    generation: Optional[int] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    owner_references: Optional[List[OwnerReference]] = None


def controller_of(meta: ObjectMeta) -> Optional[OwnerReference]:
    """Return the owner reference flagged as controller, if any."""
    for ref in meta.owner_references or []:
        if ref.controller:
            return ref
    return None


def have_same_controller(a: ObjectMeta, b: ObjectMeta) -> bool:
    """
    Two objects share a controller when their controller UIDs are equal.

    Objects that both lack a controller are treated as matching.
    """
    ac = controller_of(a)
    bc = controller_of(b)
    if ac is None or bc is None:
        return ac is None and bc is None
    return ac.uid == bc.uid


class ConditionType(str, Enum):
    SYNCED = "Synced"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ConditionReason(str, Enum):
    SUCCESS = "ReconcileSuccess"
    ERROR = "ReconcileError"


class Condition(KubeModel):
    type: str
    status: ConditionStatus = ConditionStatus.UNKNOWN
    reason: str = ""
    message: str = ""
    last_transition_time: Optional[datetime] = None

    def equal(self, other: "Condition") -> bool:
        """Equal ignoring the transition time."""
        return (
            self.type == other.type
            and self.status == other.status
            and self.reason == other.reason
            and self.message == other.message
        )


def reconcile_success() -> Condition:
    return Condition(
        type=ConditionType.SYNCED.value,
        status=ConditionStatus.TRUE,
        reason=ConditionReason.SUCCESS.value,
        last_transition_time=now_utc(),
    )


def reconcile_error(err: BaseException) -> Condition:
    return Condition(
        type=ConditionType.SYNCED.value,
        status=ConditionStatus.FALSE,
        reason=ConditionReason.ERROR.value,
        message=str(err),
        last_transition_time=now_utc(),
    )


class ConditionedStatus(KubeModel):
    conditions: List[Condition] = Field(default_factory=list)

    def get_condition(self, condition_type: str) -> Condition:
        for c in self.conditions:
            if c.type == condition_type:
                return c
        return Condition(type=condition_type, status=ConditionStatus.UNKNOWN)

    def set_conditions(self, *conditions: Condition) -> None:
        """
        Replace existing conditions of the same type.

        A condition equal to the existing one (ignoring time) keeps the
        existing transition time.
        """
        for new in conditions:
            for i, existing in enumerate(self.conditions):
                if existing.type != new.type:
                    continue
                if not existing.equal(new):
                    self.conditions[i] = new
                break
            else:
                self.conditions.append(new)


class KubeObject(KubeModel):
    """A top level object with identity, addressable in an object store."""

    gvk: ClassVar[GroupVersionKind]
    plural: ClassVar[str] = ""

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)

    def model_post_init(self, __context: Any) -> None:
        gvk = getattr(type(self), "gvk", None)
        if gvk is not None:
            if not self.api_version:
                self.api_version = gvk.api_version
            if not self.kind:
                self.kind = gvk.kind

    @property
    def key(self) -> NamespacedName:
        return NamespacedName(namespace=self.metadata.namespace, name=self.metadata.name)


def controller_reference(obj: KubeObject) -> OwnerReference:
    """Build a controlling owner reference pointing at ``obj``."""
    return OwnerReference(
        api_version=obj.api_version,
        kind=obj.kind,
        name=obj.metadata.name,
        uid=obj.metadata.uid or "",
        controller=True,
        block_owner_deletion=True,
    )
