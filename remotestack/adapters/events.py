from __future__ import annotations

import logging
from typing import Optional

from remotestack.core.contracts.event_recorder import Event, EventRecorderContract, EventType
from remotestack.core.domain.meta import KubeObject
from remotestack.logging import get_logger, log_event


class NopEventRecorder(EventRecorderContract):
    def event(self, obj: KubeObject, event: Event) -> None:
        return None


class LoggingEventRecorder(EventRecorderContract):
    """Records events as structured log lines on the remotestack logger."""

    def __init__(self, controller: str = "", logger: Optional[logging.Logger] = None):
        self.controller = controller
        self.logger = logger or get_logger("events")

    def event(self, obj: KubeObject, event: Event) -> None:
        log_event(
            "object_event",
            {
                "type": event.type.value,
                "reason": event.reason,
                "message": event.message,
                "object_kind": obj.kind,
                "object": str(obj.key),
                "uid": obj.metadata.uid,
                **event.annotations,
            },
            level="warning" if event.type == EventType.WARNING else "info",
            logger=self.logger,
            controller=self.controller,
        )
