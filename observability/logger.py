"""Pipeline event log.

Each event is printed to stdout as one ``key=value`` line and, when file logs
are enabled, appended as a JSON object to a rotating file. A log file that
cannot be opened disables the file sink; emitting an event does not raise.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/feedback.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

SUMMARY_KEYS = ("stage", "outcome", "reason", "feedback_id", "user_id", "total_score")

_logger = logging.getLogger("interview_feedback")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False
_configured = False


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _open_file_sink(path: str) -> Optional[logging.Handler]:  # None when the file cannot be opened
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        logging.getLogger(__name__).warning("Event file log disabled, cannot open %s: %s", path, exc)
        return None
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(_is_json)
    return handler


def _ensure_handlers() -> None:
    global _configured
    if _configured:
        return
    _configured = True

    console = logging.StreamHandler(stream=sys.stdout)
    console.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s :: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    console.addFilter(lambda record: not _is_json(record))
    _logger.addHandler(console)

    if ENABLE_FILE_LOGS:
        sink = _open_file_sink(LOG_FILE)
        if sink is not None:
            _logger.addHandler(sink)


def _summary(event: dict[str, Any]) -> str:
    parts = [f"kind={event['kind']}", f"subject={event['subject_id']}"]
    parts.extend(f"{key}={event[key]}" for key in SUMMARY_KEYS if key in event)
    stages = event.get("stages")
    if stages:
        parts.append("stages=" + ",".join(f"{item['span']}:{item['ms']}ms" for item in stages))
    return " ".join(parts)


def log_event(kind: str, subject_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Record a pipeline event as a console summary and a JSON line."""
    _ensure_handlers()
    event: dict[str, Any] = {
        "ts": time.time(),
        "trace": uuid.uuid4().hex,
        "kind": kind,
        "subject_id": subject_id,
        **fields,
    }
    _logger.log(level, _summary(event), extra={"is_json": False})
    _logger.log(level, json.dumps(event, ensure_ascii=False, default=str), extra={"is_json": True})


__all__ = ["log_event"]
