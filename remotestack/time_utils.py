from __future__ import annotations

from datetime import UTC, datetime


def now_utc() -> datetime:
    # Kubernetes condition timestamps carry second precision.
    return datetime.now(UTC).replace(microsecond=0)
