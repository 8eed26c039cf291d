"""Walk a directory tree into an ordered, capped list of file records."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator
from pathlib import Path

import pathspec

from codestruct.config import Settings
from codestruct.ingestion import count_lines, is_binary, language_for
from codestruct.ingestion.schemas import CollectedFiles, FileRecord

logger = logging.getLogger(__name__)


def iter_files(
    root: Path,
    *,
    extensions: Collection[str] | None = None,
    skip_directories: Collection[str] = (),
    max_files: int | None = None,
    max_file_bytes: int | None = None,
    skipped: list[str] | None = None,
) -> Iterator[FileRecord]:
    """Yield :class:`FileRecord` objects depth-first under ``root``.

    * Entries of a directory are visited in lexicographic order.
    * Hidden directories, directories named in ``skip_directories``
      and paths matched by the root ``.gitignore`` are skipped.
    * Only files whose lowercased extension is in ``extensions`` are
      read (``None`` accepts every extension).
    * Unreadable, undecodable, binary or oversized files are skipped
      with a warning and their relative path appended to ``skipped``.
    * Traversal stops as soon as ``max_files`` records were yielded.
    """
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(str(root))
    if max_files is not None and max_files <= 0:
        return

    allowed = (
        {e.lower() for e in extensions} if extensions is not None else None
    )
    skip_dirs = set(skip_directories)
    gitignore_spec = _load_gitignore(root)
    resolved_root = root.resolve()

    yielded = 0
    for file_path in _walk(
        root, root, skip_dirs, gitignore_spec, resolved_root
    ):
        if allowed is not None and file_path.suffix.lower() not in allowed:
            continue
        rel = file_path.relative_to(root).as_posix()
        record = _read_record(file_path, rel, max_file_bytes)
        if record is None:
            if skipped is not None:
                skipped.append(rel)
            continue
        yield record
        yielded += 1
        if max_files is not None and yielded >= max_files:
            return


def collect_files(
    root: Path,
    settings: Settings | None = None,
    *,
    max_files: int | None = None,
) -> CollectedFiles:
    """Collect ``root`` eagerly using the settings' filters.

    ``max_files`` overrides ``settings.trial_max_files``. The result's
    ``truncated`` flag is set when the cap cut the scan short.
    """
    if settings is None:
        settings = Settings()
    cap = max_files if max_files is not None else settings.trial_max_files

    skipped: list[str] = []
    records = iter_files(
        root,
        extensions=settings.source_extensions,
        skip_directories=settings.skip_directories,
        max_files=cap + 1,
        max_file_bytes=settings.max_file_bytes,
        skipped=skipped,
    )
    files: list[FileRecord] = []
    truncated = False
    for record in records:
        if len(files) >= cap:
            # One record past the cap proves more files exist
            truncated = True
            break
        files.append(record)
    records.close()

    if truncated:
        logger.info(
            "event=collect_truncated root=%s max_files=%d", root, cap
        )
    return CollectedFiles(
        files=files,
        skipped=skipped,
        truncated=truncated,
        total_lines=sum(count_lines(f.content) for f in files),
    )


def _walk(
    current: Path,
    root: Path,
    skip_dirs: set[str],
    gitignore_spec: pathspec.PathSpec,
    resolved_root: Path,
) -> Iterator[Path]:
    """Recursive depth-first walk with symlink protection."""
    try:
        entries = sorted(current.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.warning(
            "event=directory_unreadable path=%s error=%s", current, exc
        )
        return
    for item in entries:
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name.startswith(".") or item.name in skip_dirs:
                continue
            if gitignore_spec.match_file(rel + "/"):
                continue
            yield from _walk(
                item, root, skip_dirs, gitignore_spec, resolved_root
            )
        elif item.is_file():
            if not gitignore_spec.match_file(rel):
                yield item


def _read_record(
    path: Path, rel: str, max_file_bytes: int | None
) -> FileRecord | None:
    """Read one file as UTF-8 text, or ``None`` if it must be skipped."""
    try:
        size = path.stat().st_size
        if max_file_bytes is not None and size > max_file_bytes:
            logger.warning(
                "event=file_skipped reason=too_large path=%s size=%d",
                rel,
                size,
            )
            return None
        data = path.read_bytes()
    except OSError as exc:
        logger.warning(
            "event=file_skipped reason=unreadable path=%s error=%s",
            rel,
            exc,
        )
        return None
    if is_binary(data):
        logger.warning("event=file_skipped reason=binary path=%s", rel)
        return None
    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("event=file_skipped reason=encoding path=%s", rel)
        return None
    return FileRecord(
        path=rel,
        content=content,
        language=language_for(rel),
        size=len(data),
    )


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore patterns using pathspec."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return pathspec.GitIgnoreSpec.from_lines([])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.GitIgnoreSpec.from_lines(f)
    except OSError:
        return pathspec.GitIgnoreSpec.from_lines([])
