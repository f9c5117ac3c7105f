from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx

from remotestack.core.contracts.object_store import ObjectStoreContract
from remotestack.core.domain.meta import KubeObject, NamespacedName
from remotestack.exceptions import (
    ConflictError,
    NotFoundError,
    StoreAuthError,
    StoreError,
    StoreNetworkError,
    StoreRateLimitError,
    StoreTimeoutError,
)

logger = logging.getLogger("remotestack.kube_api_store")

T = TypeVar("T", bound=KubeObject)


class KubeApiObjectStore(ObjectStoreContract):
    """
    Object store backed by a Kubernetes-style API server.

    Optimistic concurrency is delegated to the server: writes carry
    ``metadata.resourceVersion`` and a 409 surfaces as ConflictError.
    Requests are not retried; the reconcile requeue is the retry.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        timeout_seconds: float = 20.0,
        verify: bool | str = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.verify = verify
        self.transport = transport
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    @staticmethod
    def _group_path(api_version: str) -> str:
        # The core group lives under /api, named groups under /apis.
        if "/" in api_version:
            return f"/apis/{api_version}"
        return f"/api/{api_version}"

    def _collection_path(self, kind: Type[KubeObject], namespace: str) -> str:
        base = self._group_path(kind.gvk.api_version)
        if namespace:
            return f"{base}/namespaces/{namespace}/{kind.plural}"
        return f"{base}/{kind.plural}"

    def _object_path(self, kind: Type[KubeObject], key: NamespacedName) -> str:
        return f"{self._collection_path(kind, key.namespace)}/{key.name}"

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                verify=self.verify,
                transport=self.transport,
            ) as client:
                response = await client.request(method, url, headers=self.headers, json=payload)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            self._log_failure("timeout", operation=f"{method} {path}", error=str(exc))
            raise StoreTimeoutError(str(exc)) from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            err = self._classify_http_error(status_code=status_code, exc=exc)
            if not isinstance(err, NotFoundError):
                self._log_failure(
                    "http_status",
                    operation=f"{method} {path}",
                    status_code=status_code,
                    error=str(exc),
                )
            raise err from exc
        except httpx.RequestError as exc:
            self._log_failure("network", operation=f"{method} {path}", error=str(exc))
            raise StoreNetworkError(str(exc)) from exc
        if not response.text.strip():
            return None
        return response.json()

    def _decode(self, kind: Type[T], payload: Any, *, operation: str) -> T:
        if not isinstance(payload, dict):
            raise StoreError(f"{operation}: response is not a JSON object")
        return kind.model_validate(payload)

    async def get(self, kind: Type[T], key: NamespacedName) -> T:
        payload = await self._request_json("GET", self._object_path(kind, key))
        return self._decode(kind, payload, operation=f"get {kind.gvk.kind} {key}")

    async def create(self, obj: T) -> T:
        kind = type(obj)
        document = obj.to_document()
        document.get("metadata", {}).pop("resourceVersion", None)
        payload = await self._request_json(
            "POST",
            self._collection_path(kind, obj.metadata.namespace),
            payload=document,
        )
        return self._decode(kind, payload, operation=f"create {obj.kind} {obj.key}")

    async def update(self, obj: T) -> T:
        kind = type(obj)
        payload = await self._request_json("PUT", self._object_path(kind, obj.key), payload=obj.to_document())
        return self._decode(kind, payload, operation=f"update {obj.kind} {obj.key}")

    async def update_status(self, obj: T) -> T:
        kind = type(obj)
        payload = await self._request_json(
            "PUT",
            f"{self._object_path(kind, obj.key)}/status",
            payload=obj.to_document(),
        )
        return self._decode(kind, payload, operation=f"update status {obj.kind} {obj.key}")

    @staticmethod
    def _classify_http_error(*, status_code: Optional[int], exc: Exception) -> StoreError:
        if status_code == 404:
            return NotFoundError(str(exc))
        if status_code == 429:
            return StoreRateLimitError(str(exc))
        if status_code in {401, 403}:
            return StoreAuthError(str(exc))
        if status_code in {409, 412}:
            return ConflictError(str(exc))
        return StoreError(str(exc))

    def _log_failure(self, failure_class: str, **fields: Any) -> None:
        record = {
            "event": "kube_api_store_failure",
            "backend": "kube_api",
            "failure_class": failure_class,
            **fields,
        }
        logger.warning(json.dumps(record, ensure_ascii=False))
