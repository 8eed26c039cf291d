"""Shared constants: single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, SQL,
API payloads) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class SubscriptionTier(StrEnum):
    """Usage tier of a user account."""

    TRIAL = "trial"
    PRO = "pro"


class IssueSeverity(StrEnum):
    """Severity labels attached to issues found by the reasoning service."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ChangeType(StrEnum):
    """Kind of edit described in a documentation/improvement result."""

    ADDITION = "addition"
    MODIFICATION = "modification"
    REMOVAL = "removal"


class CallKind(StrEnum):
    """Which dispatcher operation issued a reasoning-service call."""

    CODEBASE_ANALYSIS = "codebase_analysis"
    DOCUMENTATION = "documentation"
    IMPROVEMENT = "improvement"
    FILE_REVIEW = "file_review"


# ── Language Tags ────────────────────────────────────────

# Tag for files whose extension is not in EXTENSION_MAP
DEFAULT_LANGUAGE = "text"

# ── Fallback Analysis ────────────────────────────────────

FALLBACK_LANGUAGE = "unknown"
FALLBACK_ARCHITECTURE = (
    "Analysis unavailable: the reasoning service did not return a"
    " usable response. Re-run the analysis to try again."
)

# ── LLM Output ───────────────────────────────────────────

LLM_MAX_OUTPUT_TOKENS = 4000

# ── Misc ─────────────────────────────────────────────────

BINARY_DETECTION_BUFFER = 8192
ERROR_TRUNCATION_CHARS = 200

# ── ID Generation ───────────────────────────────────────

ID_HEX_LENGTH = 12
SHORT_ID_HEX_LENGTH = 8
