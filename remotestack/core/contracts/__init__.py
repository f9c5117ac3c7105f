"""Core contracts/ports."""

from .event_recorder import Event, EventRecorderContract, EventType
from .object_store import ApplyOption, ObjectStoreContract

__all__ = [
    "ApplyOption",
    "Event",
    "EventRecorderContract",
    "EventType",
    "ObjectStoreContract",
]
