from __future__ import annotations

from datetime import UTC, datetime

import pytest

from remotestack.core.domain.application import KubernetesApplication
from remotestack.core.domain.descriptors import ContainerizedWorkload, ManualScalerTrait, Trait
from remotestack.core.domain.meta import (
    Condition,
    ConditionReason,
    ConditionStatus,
    ConditionedStatus,
    ObjectMeta,
    OwnerReference,
    controller_of,
    controller_reference,
    have_same_controller,
    reconcile_error,
    reconcile_success,
)


def _owner(uid: str, controller: bool = True) -> OwnerReference:
    return OwnerReference(api_version="v1", kind="Thing", name=f"thing-{uid}", uid=uid, controller=controller)


def test_kube_objects_default_api_version_and_kind() -> None:
    app = KubernetesApplication()
    assert app.api_version == "workload.crossplane.io/v1alpha1"
    assert app.kind == "KubernetesApplication"
    assert ContainerizedWorkload().api_version == "core.oam.dev/v1alpha2"


def test_descriptor_documents_use_wire_field_names() -> None:
    cw = ContainerizedWorkload.model_validate(
        {
            "metadata": {"name": "wl", "namespace": "ns"},
            "spec": {
                "osType": "linux",
                "containers": [
                    {
                        "name": "web",
                        "image": "nginx",
                        "cmd": ["nginx"],
                        "args": ["-g", "daemon off;"],
                        "ports": [{"name": "http", "containerPort": 80}],
                    }
                ],
            },
        }
    )
    container = cw.spec.containers[0]
    assert cw.spec.operating_system == "linux"
    assert container.command == ["nginx"]
    assert container.arguments == ["-g", "daemon off;"]
    assert container.ports[0].port == 80
    assert container.ports[0].protocol is None

    document = cw.to_document()
    assert document["spec"]["containers"][0]["cmd"] == ["nginx"]
    assert document["spec"]["containers"][0]["ports"][0]["containerPort"] == 80


def test_trait_package_key_follows_workload_reference() -> None:
    trait = ManualScalerTrait.model_validate(
        {
            "metadata": {"name": "scaler", "namespace": "team-a"},
            "spec": {
                "replicaCount": 2,
                "workloadRef": {"apiVersion": "core.oam.dev/v1alpha2", "kind": "ContainerizedWorkload", "name": "wl"},
            },
        }
    )
    key = trait.package_key()
    assert key.namespace == "team-a"
    assert key.name == "wl"


def test_set_conditions_replaces_condition_of_same_type() -> None:
    status = ConditionedStatus()
    status.set_conditions(reconcile_error(RuntimeError("boom")))
    status.set_conditions(reconcile_success())

    assert len(status.conditions) == 1
    synced = status.get_condition("Synced")
    assert synced.reason == ConditionReason.SUCCESS.value
    assert synced.status == ConditionStatus.TRUE
    assert synced.message == ""


def test_set_conditions_keeps_transition_time_when_unchanged() -> None:
    earlier = datetime(2026, 1, 1, tzinfo=UTC)
    status = ConditionedStatus(
        conditions=[
            Condition(
                type="Synced",
                status=ConditionStatus.TRUE,
                reason=ConditionReason.SUCCESS.value,
                last_transition_time=earlier,
            )
        ]
    )
    status.set_conditions(reconcile_success())
    assert status.get_condition("Synced").last_transition_time == earlier


def test_get_condition_reports_unknown_when_missing() -> None:
    assert ConditionedStatus().get_condition("Synced").status == ConditionStatus.UNKNOWN


def test_controller_helpers() -> None:
    meta = ObjectMeta(owner_references=[_owner("a", controller=False), _owner("b")])
    assert controller_of(meta).uid == "b"

    assert have_same_controller(meta, ObjectMeta(owner_references=[_owner("b")]))
    assert not have_same_controller(meta, ObjectMeta(owner_references=[_owner("c")]))
    assert not have_same_controller(meta, ObjectMeta())
    assert have_same_controller(ObjectMeta(), ObjectMeta())


def test_controller_reference_points_at_object() -> None:
    cw = ContainerizedWorkload(metadata=ObjectMeta(name="wl", namespace="ns", uid="uid-1"))
    ref = controller_reference(cw)
    assert ref.kind == "ContainerizedWorkload"
    assert ref.uid == "uid-1"
    assert ref.controller is True


def test_trait_base_requires_a_workload_reference() -> None:
    with pytest.raises(TypeError):
        Trait()
