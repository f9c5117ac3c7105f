import json

import httpx
import pytest

from remotestack.adapters.storage import KubeApiObjectStore
from remotestack.core.domain.application import KubernetesApplication
from remotestack.core.domain.deployment import Deployment
from remotestack.core.domain.descriptors import ContainerizedWorkload
from remotestack.core.domain.meta import NamespacedName, ObjectMeta
from remotestack.exceptions import (
    ConflictError,
    NotFoundError,
    StoreAuthError,
    StoreError,
    StoreNetworkError,
    StoreRateLimitError,
    StoreTimeoutError,
)
from tests.conftest import WorkloadBuilder

KEY = NamespacedName(namespace="default", name="example-workload")


def _store(handler, token="secret"):
    return KubeApiObjectStore(
        base_url="https://cluster.local/",
        token=token,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_addresses_named_group_collection():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=WorkloadBuilder().with_container().build().to_document())

    workload = await _store(handler).get(ContainerizedWorkload, KEY)

    assert captured["method"] == "GET"
    assert captured["url"] == (
        "https://cluster.local/apis/core.oam.dev/v1alpha2/namespaces/default/containerizedworkloads/example-workload"
    )
    assert captured["auth"] == "Bearer secret"
    assert workload.spec.containers[0].image == "nginx"


@pytest.mark.asyncio
async def test_core_group_and_no_token():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"apiVersion": "apps/v1", "kind": "Deployment"})

    await _store(handler, token=None).get(Deployment, NamespacedName(namespace="", name="web"))

    assert captured["path"] == "/apis/apps/v1/deployments/web"
    assert captured["auth"] is None
    assert KubeApiObjectStore._group_path("v1") == "/api/v1"


@pytest.mark.asyncio
async def test_create_posts_to_collection_without_resource_version():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        body = dict(captured["body"])
        body["metadata"] = {**body["metadata"], "uid": "u-1", "resourceVersion": "7"}
        return httpx.Response(201, json=body)

    app = KubernetesApplication(metadata=ObjectMeta(name="pkg", namespace="default", resource_version="3"))
    created = await _store(handler).create(app)

    assert captured["method"] == "POST"
    assert captured["path"] == "/apis/workload.crossplane.io/v1alpha1/namespaces/default/kubernetesapplications"
    assert "resourceVersion" not in captured["body"]["metadata"]
    assert created.metadata.uid == "u-1"
    assert created.metadata.resource_version == "7"


@pytest.mark.asyncio
async def test_update_and_update_status_put_to_their_paths():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        calls.append((request.method, request.url.path, body["metadata"].get("resourceVersion")))
        return httpx.Response(200, json=body)

    store = _store(handler)
    app = KubernetesApplication(metadata=ObjectMeta(name="pkg", namespace="default", resource_version="3"))
    await store.update(app)
    await store.update_status(app)

    base = "/apis/workload.crossplane.io/v1alpha1/namespaces/default/kubernetesapplications/pkg"
    assert calls == [("PUT", base, "3"), ("PUT", f"{base}/status", "3")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, error",
    [
        (404, NotFoundError),
        (409, ConflictError),
        (401, StoreAuthError),
        (403, StoreAuthError),
        (429, StoreRateLimitError),
        (500, StoreError),
    ],
)
async def test_http_errors_are_classified(status_code, error):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"kind": "Status"})

    with pytest.raises(error):
        await _store(handler).get(ContainerizedWorkload, KEY)


@pytest.mark.asyncio
async def test_transport_failures_are_classified():
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StoreTimeoutError):
        await _store(slow).get(ContainerizedWorkload, KEY)
    with pytest.raises(StoreNetworkError):
        await _store(refused).get(ContainerizedWorkload, KEY)


@pytest.mark.asyncio
async def test_failures_are_logged_except_not_found(caplog):
    def missing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    caplog.set_level("WARNING", logger="remotestack.kube_api_store")

    with pytest.raises(NotFoundError):
        await _store(missing).get(ContainerizedWorkload, KEY)
    assert caplog.records == []

    def conflict(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409)

    with pytest.raises(ConflictError):
        await _store(conflict).get(ContainerizedWorkload, KEY)
    record = json.loads(caplog.records[-1].getMessage())
    assert record["event"] == "kube_api_store_failure"
    assert record["failure_class"] == "http_status"
    assert record["status_code"] == 409


@pytest.mark.asyncio
async def test_non_object_response_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[1, 2])

    with pytest.raises(StoreError, match="not a JSON object"):
        await _store(handler).get(ContainerizedWorkload, KEY)
