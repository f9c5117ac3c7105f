import pytest

from remotestack.adapters.storage import InMemoryObjectStore
from remotestack.core.domain.application import KubernetesApplication
from remotestack.core.domain.descriptors import ContainerizedWorkload
from remotestack.core.domain.meta import NamespacedName, ObjectMeta, reconcile_success
from remotestack.exceptions import ConflictError, NotFoundError
from tests.conftest import WorkloadBuilder

KEY = NamespacedName(namespace="default", name="example-workload")


@pytest.mark.asyncio
async def test_get_missing_raises_not_found():
    store = InMemoryObjectStore()
    with pytest.raises(NotFoundError, match="default/example-workload"):
        await store.get(ContainerizedWorkload, KEY)


@pytest.mark.asyncio
async def test_create_assigns_identity_and_rejects_duplicates():
    store = InMemoryObjectStore()
    app = KubernetesApplication(metadata=ObjectMeta(name="pkg", namespace="default"))

    created = await store.create(app)

    assert created.metadata.uid
    assert created.metadata.resource_version == "1"
    assert app.metadata.uid is None
    with pytest.raises(ConflictError):
        await store.create(app)


@pytest.mark.asyncio
async def test_reads_are_isolated_from_stored_state():
    store = InMemoryObjectStore()
    await store.create(WorkloadBuilder().with_container().build())

    first = await store.get(ContainerizedWorkload, KEY)
    first.spec.containers[0].image = "mutated"
    second = await store.get(ContainerizedWorkload, KEY)

    assert second.spec.containers[0].image == "nginx"


@pytest.mark.asyncio
async def test_stale_update_is_a_conflict():
    store = InMemoryObjectStore()
    created = await store.create(KubernetesApplication(metadata=ObjectMeta(name="pkg", namespace="default")))
    await store.update(created)

    with pytest.raises(ConflictError, match="has been modified"):
        await store.update(created)


@pytest.mark.asyncio
async def test_update_keeps_status_and_update_status_keeps_spec():
    store = InMemoryObjectStore()
    workload = await store.create(WorkloadBuilder().with_container().build())

    workload.status.set_conditions(reconcile_success())
    workload = await store.update_status(workload)
    workload.spec.containers[0].image = "httpd"
    workload.status.conditions = []
    updated = await store.update(workload)

    assert updated.spec.containers[0].image == "httpd"
    assert updated.status.get_condition("Synced").reason == "ReconcileSuccess"

    updated.spec.containers[0].image = "ignored"
    await store.update_status(updated)
    snapshot = store.snapshot(ContainerizedWorkload, KEY)
    assert snapshot["spec"]["containers"][0]["image"] == "httpd"


@pytest.mark.asyncio
async def test_apply_creates_then_updates_in_place():
    store = InMemoryObjectStore()
    app = KubernetesApplication(metadata=ObjectMeta(name="pkg", namespace="default"))

    created = await store.apply(app)
    app.spec.target_selector = {"matchLabels": {"cluster": "remote"}}
    updated = await store.apply(app)

    assert updated.metadata.uid == created.metadata.uid
    assert updated.spec.target_selector == {"matchLabels": {"cluster": "remote"}}


@pytest.mark.asyncio
async def test_apply_option_veto_leaves_store_untouched():
    store = InMemoryObjectStore()
    app = KubernetesApplication(metadata=ObjectMeta(name="pkg", namespace="default"))
    await store.apply(app)
    before = store.snapshot(KubernetesApplication, app.key)
    seen = []

    def veto(current, desired):
        seen.append((current.metadata.resource_version, desired.metadata.name))
        raise ConflictError("vetoed")

    app.spec.target_selector = {"matchLabels": {"cluster": "remote"}}
    with pytest.raises(ConflictError, match="vetoed"):
        await store.apply(app, veto)

    assert seen == [("1", "pkg")]
    assert store.snapshot(KubernetesApplication, app.key) == before
