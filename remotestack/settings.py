from __future__ import annotations

import json
import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "REMOTESTACK_"
SETTINGS_FILE_ENV = f"{ENV_PREFIX}SETTINGS_FILE"


class ReconcilerSettings(BaseModel):
    """Deadline and requeue tiers for one reconciler instance."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    reconcile_timeout_seconds: float = Field(default=60.0, gt=0)
    short_wait_seconds: float = Field(default=30.0, ge=0)
    long_wait_seconds: float = Field(default=60.0, ge=0)

    @property
    def reconcile_timeout(self) -> timedelta:
        return timedelta(seconds=self.reconcile_timeout_seconds)

    @property
    def short_wait(self) -> timedelta:
        return timedelta(seconds=self.short_wait_seconds)

    @property
    def long_wait(self) -> timedelta:
        return timedelta(seconds=self.long_wait_seconds)


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            return payload
    except (json.JSONDecodeError, OSError):
        return {}
    return {}


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for field_name in ReconcilerSettings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None and raw.strip():
            overrides[field_name] = raw.strip()
    return overrides


def load_reconciler_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ReconcilerSettings:
    """
    Resolve settings with precedence: environment > JSON file > defaults.

    The file location defaults to ``$REMOTESTACK_SETTINGS_FILE`` when ``path``
    is not given. Unreadable or non-object files are ignored.
    """
    env = os.environ if environ is None else environ
    if path is None and env.get(SETTINGS_FILE_ENV):
        path = Path(env[SETTINGS_FILE_ENV])

    merged: Dict[str, Any] = {}
    if path is not None:
        file_payload = _read_json(Path(path))
        merged.update({k: v for k, v in file_payload.items() if k in ReconcilerSettings.model_fields})
    merged.update(_env_overrides(env))
    return ReconcilerSettings.model_validate(merged)
