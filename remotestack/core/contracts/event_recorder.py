from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field

from remotestack.core.domain.meta import KubeObject


class EventType(str, Enum):
    NORMAL = "Normal"
    WARNING = "Warning"


class Event(BaseModel):
    type: EventType
    reason: str
    message: str
    annotations: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def normal(cls, reason: str, message: str) -> "Event":
        return cls(type=EventType.NORMAL, reason=reason, message=message)

    @classmethod
    def warning(cls, reason: str, err: BaseException) -> "Event":
        return cls(type=EventType.WARNING, reason=reason, message=str(err))


class EventRecorderContract(ABC):
    """Observability sink; nothing in a reconcile depends on delivery."""

    @abstractmethod
    def event(self, obj: KubeObject, event: Event) -> None:
        """Record an event about ``obj``."""
