"""Environment-based configuration and application constants."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # Reasoning service credentials (read by litellm from the environment)
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    aws_region: str = "us-east-1"

    # Model chain (first = primary, rest = fallbacks tried in order)
    litellm_model_chain: Annotated[list[str], NoDecode] = [
        "bedrock/amazon.nova-lite-v1:0",
        "bedrock/anthropic.claude-3-5-sonnet-20241022-v2:0",
        "openai/gpt-3.5-turbo",
    ]
    llm_timeout_seconds: int = 60
    llm_temperature: float = 0.1

    # Database
    database_url: str = "sqlite:///data/codestruct.db"

    # Directories
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")

    # Logging
    log_level: str = "INFO"
    debug_mode: bool = False

    # API
    cors_origins: str = "http://localhost:3000"
    browse_root: str = ""  # empty = Path.home(); set for production

    # Demo user
    demo_username: str = "demo"
    demo_email: str = "demo@codestruct.ai"

    # Trial tier
    trial_days: int = 30
    trial_max_files: int = 100

    # File collection
    source_extensions: Annotated[list[str], NoDecode] = [
        ".js",
        ".ts",
        ".jsx",
        ".tsx",
        ".py",
        ".java",
        ".cpp",
        ".c",
        ".cs",
        ".go",
        ".php",
        ".rb",
        ".rs",
    ]
    skip_directories: list[str] = [
        "node_modules",
        "vendor",
        ".venv",
        "__pycache__",
        "build",
        "dist",
        "target",
        ".git",
        ".svn",
        ".hg",
        ".next",
    ]
    max_file_bytes: int = 1_000_000

    # Codebase analysis batch policy
    analysis_max_listed_files: int = 200
    analysis_sample_files: int = 5
    analysis_content_chars: int = 1000

    @field_validator("litellm_model_chain", "source_extensions", mode="before")
    @classmethod
    def _parse_csv(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("litellm_model_chain")
    @classmethod
    def _validate_chain(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError(
                "litellm_model_chain must contain at least one model"
            )
        seen: set[str] = set()
        dupes: list[str] = []
        for m in v:
            if m in seen:
                dupes.append(m)
            seen.add(m)
        if dupes:
            logger.warning(
                "Duplicate models in LITELLM_MODEL_CHAIN: %s",
                ", ".join(dupes),
            )
        return v

    @field_validator("source_extensions")
    @classmethod
    def _normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase and dot-prefix every extension."""
        return [
            (e if e.startswith(".") else f".{e}").lower() for e in v
        ]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }


# File extension → language name mapping
EXTENSION_MAP: dict[str, str] = {
    # Python
    ".py": "python",
    ".pyi": "python",
    ".pyw": "python",
    # JavaScript
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    # TypeScript
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    # Java
    ".java": "java",
    # Go
    ".go": "go",
    # Rust
    ".rs": "rust",
    # C
    ".c": "c",
    ".h": "c",
    # C++
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".hh": "cpp",
    # C#
    ".cs": "csharp",
    # Ruby
    ".rb": "ruby",
    ".rake": "ruby",
    # PHP
    ".php": "php",
    # Swift
    ".swift": "swift",
    # Kotlin
    ".kt": "kotlin",
    ".kts": "kotlin",
    # Scala
    ".scala": "scala",
    # Shell
    ".sh": "bash",
    ".bash": "bash",
    ".zsh": "bash",
    # HTML
    ".html": "html",
    ".htm": "html",
    # Stylesheets
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    # Data / config
    ".json": "json",
    ".xml": "xml",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
    # Markdown
    ".md": "markdown",
    ".mdx": "markdown",
    # SQL
    ".sql": "sql",
}


def create_app_engine(
    url: str, *, echo: bool = False
) -> AsyncEngine:
    """Create async SQLite engine with WAL journal mode.

    Handles URL conversion (sqlite:/// → sqlite+aiosqlite:///)
    and sets WAL mode plus foreign key enforcement via a
    pool-connect event listener so it fires once per raw DBAPI
    connection, not per ORM session. In-memory databases share a
    single connection so every session sees the same tables.
    """
    if url.startswith("sqlite:///"):
        db_url = "sqlite+aiosqlite:///" + url[len("sqlite:///"):]
    else:
        db_url = url
    if db_url.endswith(":memory:"):
        engine = create_async_engine(
            db_url, echo=echo, poolclass=StaticPool
        )
    else:
        engine = create_async_engine(db_url, echo=echo)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragmas(
        dbapi_conn: object,
        _connection_record: object,
    ) -> None:
        cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
        cursor.execute("PRAGMA journal_mode=WAL")  # pyright: ignore[reportUnknownMemberType]
        cursor.execute("PRAGMA foreign_keys=ON")  # pyright: ignore[reportUnknownMemberType]
        cursor.close()  # pyright: ignore[reportUnknownMemberType]

    return engine
