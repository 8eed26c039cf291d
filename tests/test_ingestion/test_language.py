"""Tests for language tagging, line counting and binary sniffing."""

from __future__ import annotations

import pytest

from codestruct.ingestion import count_lines, is_binary, language_for


@pytest.mark.parametrize(
    ("path", "language"),
    [
        ("a.py", "python"),
        ("src/App.TSX", "typescript"),
        ("lib\\util.js", "javascript"),
        ("Main.cs", "csharp"),
        ("styles/site.scss", "scss"),
        ("pom.xml", "xml"),
        ("Makefile", "text"),
        ("archive.tar.gz", "text"),
        (".env", "text"),
    ],
)
def test_language_for(path: str, language: str) -> None:
    assert language_for(path) == language


@pytest.mark.parametrize(
    ("content", "lines"),
    [("", 0), ("one", 1), ("a\nb", 2), ("a\nb\n", 3)],
)
def test_count_lines(content: str, lines: int) -> None:
    assert count_lines(content) == lines


def test_is_binary() -> None:
    assert is_binary(b"abc\x00def")
    assert not is_binary("plain text".encode())
    # Null bytes past the sniffing window are ignored
    assert not is_binary(b"a" * 9000 + b"\x00")
