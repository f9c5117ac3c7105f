from __future__ import annotations

import logging
from typing import List, Optional

from remotestack.adapters.events import LoggingEventRecorder
from remotestack.core.contracts.event_recorder import EventRecorderContract
from remotestack.core.contracts.object_store import ObjectStoreContract
from remotestack.core.domain.application import KubernetesApplication, KubernetesApplicationResourceTemplate
from remotestack.core.domain.deployment import DEPLOYMENT_GVK, Deployment, DeploymentSpec
from remotestack.core.domain.descriptors import MANUAL_SCALER_TRAIT_GVK, ManualScalerTrait
from remotestack.logging import get_logger
from remotestack.reconciler.engine import Reconciler
from remotestack.reconciler.translation import modifier_for
from remotestack.settings import ReconcilerSettings


def find_first_fragment(templates: List[KubernetesApplicationResourceTemplate], kind: str) -> Optional[int]:
    """Index of the first template of ``kind``, or None."""
    for i, template in enumerate(templates):
        if template.template_kind == kind:
            return i
    return None


@modifier_for(ManualScalerTrait)
def manual_scaler_modifier(app: KubernetesApplication, trait: ManualScalerTrait) -> KubernetesApplication:
    """
    Set the replica count of the first packaged Deployment.

    Other fragments, and their order, are untouched. Without a Deployment the
    aggregate is returned as is: the workload has not been packaged yet.
    """
    index = find_first_fragment(app.spec.resource_templates, DEPLOYMENT_GVK.kind)
    if index is None:
        return app

    deployment = Deployment.model_validate(app.spec.resource_templates[index].spec.template)
    if deployment.spec is None:
        deployment.spec = DeploymentSpec()
    deployment.spec.replicas = trait.spec.replica_count

    patched = app.model_copy(deep=True)
    patched.spec.resource_templates[index].spec.template = deployment.model_dump(
        mode="json", by_alias=True, exclude_unset=True
    )
    return patched


def setup_manual_scaler_trait(
    store: ObjectStoreContract,
    *,
    settings: Optional[ReconcilerSettings] = None,
    recorder: Optional[EventRecorderContract] = None,
    logger: Optional[logging.Logger] = None,
) -> Reconciler:
    """Build the reconciler for ManualScalerTraits that reference a packaged workload."""
    name = "oam/" + MANUAL_SCALER_TRAIT_GVK.group_kind.lower()
    return Reconciler.for_trait(
        store,
        ManualScalerTrait,
        modifier=manual_scaler_modifier,
        settings=settings,
        recorder=recorder or LoggingEventRecorder(controller=name),
        logger=logger or get_logger("controllers"),
        controller=name,
    )
