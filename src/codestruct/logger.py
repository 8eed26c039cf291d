"""Structured JSON logger for reasoning-service dispatch tracking."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from codestruct.constants import ERROR_TRUNCATION_CHARS
from codestruct.logging_config import LOG_DATEFMT, LOG_FORMAT

__all__ = ["DispatchLogger", "LOG_FORMAT", "LOG_DATEFMT"]


class DispatchLogger:
    """Structured JSON-lines logger with request_id correlation."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger("codestruct.dispatch")
        self._logger.setLevel(getattr(logging, level.upper()))

        if not self._logger.handlers:
            handler = logging.FileHandler(log_dir / "dispatch.log")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    def log_attempt(
        self,
        request_id: str,
        kind: str,
        model: str,
        ok: bool,
        duration_ms: float,
        error: str | None = None,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "attempt",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "kind": kind,
                "model": model,
                "ok": ok,
                "duration_ms": duration_ms,
                "error": (
                    error[:ERROR_TRUNCATION_CHARS] if error else None
                ),
            })
        )

    def log_error(
        self,
        request_id: str,
        component: str,
        error: str,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "error",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "component": component,
                "error": error[:ERROR_TRUNCATION_CHARS],
            })
        )
