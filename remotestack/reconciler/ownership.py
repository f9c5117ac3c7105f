from __future__ import annotations

from remotestack.core.contracts.object_store import ApplyOption
from remotestack.core.domain.application import KubernetesApplication
from remotestack.core.domain.descriptors import Descriptor
from remotestack.core.domain.meta import KubeObject, NamespacedName, controller_of, have_same_controller
from remotestack.exceptions import OwnerMismatchError


def stamp_ownership(
    app: KubernetesApplication,
    descriptor: Descriptor,
    key: NamespacedName,
) -> KubernetesApplication:
    """
    Return a copy of ``app`` addressed at ``key`` and owned like ``descriptor``.

    The input aggregate is not modified.
    """
    stamped = app.model_copy(deep=True)
    stamped.metadata.name = key.name
    stamped.metadata.namespace = key.namespace
    stamped.metadata.owner_references = [
        ref.model_copy(deep=True) for ref in descriptor.metadata.owner_references or []
    ] or None
    return stamped


def controllers_must_match() -> ApplyOption:
    """Reject an update when the stored object has a different controller."""

    def _check(current: KubeObject, desired: KubeObject) -> None:
        if have_same_controller(current.metadata, desired.metadata):
            return
        existing = controller_of(current.metadata)
        owner = f"{existing.kind}/{existing.name}" if existing else "no controller"
        raise OwnerMismatchError(f"existing object has a different (or no) controller: {owner}")

    return _check
