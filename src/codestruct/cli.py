"""CLI entry point: ``collect``, ``analyze``, ``upload`` and ``serve``."""

from __future__ import annotations

# Phase 1: singleton logging, before any transitive litellm imports
from codestruct.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import json  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

import httpx  # noqa: E402

from codestruct import __version__  # noqa: E402
from codestruct.config import Settings  # noqa: E402
from codestruct.ingestion.collector import collect_files  # noqa: E402
from codestruct.ingestion.schemas import CollectedFiles  # noqa: E402
from codestruct.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)

# Phase 2: Clear litellm's duplicate handlers after all imports
cleanup_third_party_handlers()

DEFAULT_API_URL = "http://localhost:8000"
UPLOAD_TIMEOUT_SECONDS = 120.0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"codestruct {__version__}")
        return 0

    if args.command == "collect":
        return _run_collect(args)
    if args.command == "analyze":
        return _run_analyze(args)
    if args.command == "upload":
        return _run_upload(args)
    if args.command == "serve":
        return _run_serve(args)
    parser.print_help()
    return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="codestruct",
        description=(
            "Collect a codebase and send it for AI analysis."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    collect = sub.add_parser(
        "collect",
        help="List the files that would be uploaded",
    )
    collect.add_argument("path", type=str, help="Directory to collect")
    collect.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="File cap (default: TRIAL_MAX_FILES)",
    )
    collect.add_argument(
        "--json",
        action="store_true",
        help="Print the collected records as JSON",
    )

    analyze = sub.add_parser(
        "analyze",
        help="Collect a directory and analyze it locally",
    )
    analyze.add_argument("path", type=str, help="Directory to analyze")
    analyze.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="File cap (default: TRIAL_MAX_FILES)",
    )

    upload = sub.add_parser(
        "upload",
        help="Collect a directory and upload it to a server project",
    )
    upload.add_argument("path", type=str, help="Directory to upload")
    upload.add_argument(
        "--project",
        "-p",
        required=True,
        help="Target project ID",
    )
    upload.add_argument(
        "--url",
        default=DEFAULT_API_URL,
        help=f"Server base URL (default: {DEFAULT_API_URL})",
    )
    upload.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="File cap (default: TRIAL_MAX_FILES)",
    )

    serve = sub.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address (default: 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port (default: 8000)",
    )

    return parser


def _collect(args: argparse.Namespace) -> CollectedFiles | None:
    root = Path(args.path).expanduser().resolve()
    if not root.is_dir():
        print(f"Error: {root} is not a directory", file=sys.stderr)
        return None
    return collect_files(root, Settings(), max_files=args.max_files)


def _run_collect(args: argparse.Namespace) -> int:
    """Execute the collect command."""
    collected = _collect(args)
    if collected is None:
        return 1

    if args.json:
        print(collected.model_dump_json(indent=2))
        return 0

    for record in collected.files:
        print(f"  {record.path} ({record.language}, {record.size} bytes)")
    print(
        f"\n{len(collected.files)} files, {collected.total_lines} lines"
        f" ({len(collected.skipped)} skipped)"
    )
    if collected.truncated:
        print("Stopped at the file cap; more files were not collected.")
    return 0


def _run_analyze(args: argparse.Namespace) -> int:
    """Execute the analyze command."""
    from codestruct.analysis.dispatcher import AnalysisDispatcher
    from codestruct.analysis.llm import ReasoningClient
    from codestruct.logger import DispatchLogger

    collected = _collect(args)
    if collected is None:
        return 1
    if not collected.files:
        print("Error: no source files found", file=sys.stderr)
        return 1

    settings = Settings()
    client = ReasoningClient.from_settings(
        settings,
        DispatchLogger(log_dir=settings.log_dir, level=settings.log_level),
    )
    dispatcher = AnalysisDispatcher(client, settings)

    print(f"Analyzing {len(collected.files)} files...", file=sys.stderr)
    result = asyncio.run(dispatcher.analyze_codebase(collected.files))
    print(json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2))
    if result.is_fallback:
        print(
            "Warning: the reasoning service was unavailable;"
            " this is the fallback result.",
            file=sys.stderr,
        )
    return 0


def _run_upload(args: argparse.Namespace) -> int:
    """Execute the upload command."""
    collected = _collect(args)
    if collected is None:
        return 1
    if not collected.files:
        print("Error: no source files found", file=sys.stderr)
        return 1

    url = f"{args.url.rstrip('/')}/api/projects/{args.project}/upload"
    files = [
        ("files", (r.path, r.content.encode("utf-8"), "text/plain"))
        for r in collected.files
    ]
    try:
        response = httpx.post(url, files=files, timeout=UPLOAD_TIMEOUT_SECONDS)
    except httpx.HTTPError as exc:
        print(f"Error: upload failed: {exc}", file=sys.stderr)
        return 1

    try:
        body = response.json()
    except ValueError:
        print(
            f"Error: server answered HTTP {response.status_code}",
            file=sys.stderr,
        )
        return 1
    if not body.get("success"):
        print(f"Error: {body.get('error')}", file=sys.stderr)
        return 1
    project = body["data"]["project"]
    print(
        f"Uploaded {project['fileCount']} files"
        f" ({project['languageCount']} languages,"
        f" {project['linesProcessed']} lines) to project {project['id']}"
    )
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    """Launch the FastAPI app with uvicorn."""
    import uvicorn

    settings = Settings()
    print(f"CodeStruct API at http://{args.host}:{args.port}/api/docs")
    uvicorn.run(
        "codestruct.main:app",
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug_mode,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
