"""Object store adapters."""

from .kube_api_store import KubeApiObjectStore
from .memory_store import InMemoryObjectStore

__all__ = ["InMemoryObjectStore", "KubeApiObjectStore"]
