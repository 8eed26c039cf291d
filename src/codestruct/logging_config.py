"""Process-wide logging for the CodeStruct server and CLI.

Set up in two phases around the litellm import:

* ``setup_logging`` runs first. litellm reads ``LITELLM_LOG`` when it
  is imported, and ``Settings`` is not loaded yet, so the level comes
  from the argument or the ``LOG_LEVEL`` environment variable.
* ``cleanup_third_party_handlers`` runs after every import and strips
  the handlers litellm attaches to its own loggers.

``add_file_handler`` mirrors root output into ``<log_dir>/codestruct.log``
once the server knows its log directory. Every step is idempotent.
"""

import logging
import os
from pathlib import Path

# Messages are already ``event=name key=value``; keep the prefix short
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
APP_LOG_FILENAME = "codestruct.log"

_LITELLM_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy")

# Chatty at INFO/DEBUG: litellm, the HTTP stack, Bedrock, DB driver, uploads
_SUPPRESSED_LOGGERS = (
    *_LITELLM_LOGGERS,
    "openai._base_client",
    "httpx",
    "httpcore",
    "botocore",
    "aiosqlite",
    "python_multipart",
    "multipart",
)

_phase1_done = False
_phase2_done = False


def resolve_level(level: str | None = None) -> int:
    """Map a level name (or ``$LOG_LEVEL``) to a logging level.

    Unknown names map to INFO.
    """
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | None = None) -> None:
    """Phase 1: configure the root logger before litellm is imported."""
    global _phase1_done  # noqa: PLW0603
    if _phase1_done:
        return
    _phase1_done = True

    os.environ.setdefault("LITELLM_LOG", "WARNING")

    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def cleanup_third_party_handlers() -> None:
    """Phase 2: let litellm's loggers propagate to root only.

    litellm adds a StreamHandler per logger at import time, which
    prints every message twice next to the root handler.
    """
    global _phase2_done  # noqa: PLW0603
    if _phase2_done:
        return
    _phase2_done = True

    for name in _LITELLM_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True


def add_file_handler(log_dir: Path) -> Path:
    """Also write root log records to ``<log_dir>/codestruct.log``.

    Returns the log file path. A second call for the same file adds
    nothing.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    path = (log_dir / APP_LOG_FILENAME).resolve()
    root = logging.getLogger()
    for handler in root.handlers:
        if (
            isinstance(handler, logging.FileHandler)
            and Path(handler.baseFilename) == path
        ):
            return path

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    root.addHandler(handler)
    return path
