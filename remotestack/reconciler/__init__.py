"""Level-triggered reconciliation of OAM descriptors into KubernetesApplications."""

from .engine import ReconcileResult, Reconciler
from .ownership import controllers_must_match, stamp_ownership
from .translation import (
    Modifier,
    Packager,
    generic_packager,
    merge_fragment,
    modifier_for,
    noop_modifier,
    packager_for,
)

__all__ = [
    "Modifier",
    "Packager",
    "ReconcileResult",
    "Reconciler",
    "controllers_must_match",
    "generic_packager",
    "merge_fragment",
    "modifier_for",
    "noop_modifier",
    "packager_for",
    "stamp_ownership",
]
