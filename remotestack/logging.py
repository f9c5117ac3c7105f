import json
import logging
import logging.handlers
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from remotestack.time_utils import now_utc

# Initialize package logger
_logger = logging.getLogger("remotestack")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def get_logger(name: str = "") -> logging.Logger:
    """Return the package logger, or a child of it for ``name``."""
    return _logger.getChild(name) if name else _logger


def setup_logging(log_dir: Path, level: int = logging.INFO) -> Path:
    """Configures a rotating JSON-lines file handler under ``log_dir``."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "remotestack.log"
    _logger.setLevel(level)

    if any(
        isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == str(log_file.resolve())
        for h in _logger.handlers
    ):
        return log_file

    # Rotating handler: 10MB per file, keep 5 backups
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    # Records are already JSON
    handler.setFormatter(logging.Formatter("%(message)s"))
    _logger.addHandler(handler)
    return log_file


# Subscribers receive every record emitted through log_event
_subscribers: List[Callable[[Dict[str, Any]], None]] = []


def subscribe_to_events(callback: Callable[[Dict[str, Any]], None]) -> None:
    _subscribers.append(callback)


def unsubscribe_from_events(callback: Callable[[Dict[str, Any]], None]) -> None:
    if callback in _subscribers:
        _subscribers.remove(callback)


def log_event(
    event: str,
    data: Optional[Dict[str, Any]] = None,
    *,
    level: str = "info",
    logger: Optional[logging.Logger] = None,
    controller: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """
    Emit one structured record as a JSON line.

    Extra keyword arguments are merged into ``data``. The record is returned so
    callers and tests can inspect exactly what was logged.
    """
    full_data = {**(data or {}), **kwargs}
    record = {
        "timestamp": now_utc().isoformat(),
        "event": str(event or "").strip(),
        "controller": controller or "",
        "data": full_data,
    }
    target = logger or _logger
    target.log(_LEVELS.get(level, logging.INFO), json.dumps(record, ensure_ascii=False, default=str))

    for subscriber in list(_subscribers):
        try:
            subscriber(record)
        except (RuntimeError, ValueError, TypeError, OSError) as e:
            failure_record = {
                "timestamp": now_utc().isoformat(),
                "event": "logging_subscriber_failed",
                "controller": controller or "",
                "data": {"error": str(e)},
            }
            _logger.error(json.dumps(failure_record, ensure_ascii=False))
    return record
