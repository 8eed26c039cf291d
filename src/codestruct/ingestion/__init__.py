"""Source file collection: walk a tree into ordered file records."""

from pathlib import PurePosixPath

from codestruct.config import EXTENSION_MAP
from codestruct.constants import BINARY_DETECTION_BUFFER, DEFAULT_LANGUAGE
from codestruct.ingestion.schemas import CollectedFiles, FileRecord

__all__ = [
    "CollectedFiles",
    "FileRecord",
    "count_lines",
    "is_binary",
    "language_for",
]


def language_for(path: str) -> str:
    """Map a file path to its language tag.

    Total: unknown or missing extensions map to ``"text"``.
    """
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return EXTENSION_MAP.get(suffix, DEFAULT_LANGUAGE)


def count_lines(content: str) -> int:
    """Count lines the way an editor numbers them (``"a\\nb"`` is 2)."""
    if not content:
        return 0
    return content.count("\n") + 1


def is_binary(data: bytes) -> bool:
    """Return True if the bytes look binary (null byte in the first N bytes)."""
    return b"\x00" in data[:BINARY_DETECTION_BUFFER]
