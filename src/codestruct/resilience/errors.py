"""Error classification for reasoning-service failures.

Classifies exceptions by category to enable:
- Structured logging (which errors are transient vs permanent)
- Informative attempt summaries (timeout vs auth vs server)

Classification never triggers a retry: each backend in the model
chain is attempted at most once per call.
"""

from __future__ import annotations

from enum import Enum


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors
    SERVER = "server"  # 500, 502, 503
    TIMEOUT = "timeout"  # deadline exceeded
    CLIENT = "client"  # 400, 401, 403: bad request or credentials
    UNKNOWN = "unknown"  # unclassified


def classify_error(error: Exception) -> ErrorClass:
    """Classify an error by category.

    Checks structured attributes first (status_code), falls back
    to string matching for untyped exceptions.
    """
    # Structured status_code attribute (httpx, openai, litellm)
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    if isinstance(error, TimeoutError):
        return ErrorClass.TIMEOUT

    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg or "rate_limit" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "econnrefused" in msg or "connection" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("400", "401", "403", "404")):
        return ErrorClass.CLIENT

    return ErrorClass.UNKNOWN

