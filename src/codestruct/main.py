"""FastAPI application with lifespan startup."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

# Phase 1: singleton logging, MUST be before any codestruct imports
# (they transitively import litellm which reads LITELLM_LOG at import time)
from codestruct.logging_config import setup_logging

setup_logging()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from codestruct import __version__  # noqa: E402
from codestruct.analysis.dispatcher import AnalysisDispatcher  # noqa: E402
from codestruct.analysis.llm import ReasoningClient  # noqa: E402
from codestruct.api.app_state import AppState  # noqa: E402
from codestruct.api.errors import register_exception_handlers  # noqa: E402
from codestruct.api.routes import (  # noqa: E402
    extension,
    files,
    health,
    projects,
    users,
)
from codestruct.config import Settings, create_app_engine  # noqa: E402
from codestruct.logger import DispatchLogger  # noqa: E402
from codestruct.logging_config import (  # noqa: E402
    add_file_handler,
    cleanup_third_party_handlers,
)
from codestruct.models.base import Base  # noqa: E402
from codestruct.repositories.user_repo import SqlUserRepository  # noqa: E402
from codestruct.resilience.locks import KeyedLock  # noqa: E402
from codestruct.services.user_service import UserService  # noqa: E402

# Phase 2: Now that all imports (including litellm) are done,
# clear litellm's duplicate handlers.
cleanup_third_party_handlers()

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # 1. Use module-level settings (single source of truth)
    settings = _settings
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    log_path = add_file_handler(settings.log_dir)

    # 2. Create async SQLite engine (WAL set via pool-connect listener)
    engine = create_app_engine(
        settings.database_url, echo=settings.debug_mode
    )

    # 3. Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 4. Create session factory
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    # 5. Initialize dispatch logger and reasoning client
    dispatch_logger = DispatchLogger(
        log_dir=settings.log_dir, level=settings.log_level
    )
    client = ReasoningClient.from_settings(settings, dispatch_logger)
    dispatcher = AnalysisDispatcher(client, settings)

    # 6. Ensure the demo user exists
    async with session_factory() as session:
        demo = await UserService(
            SqlUserRepository(session),
            commit=session.commit,
            settings=settings,
        ).get_or_create_demo_user()

    # 7. Store in app.state
    app.state.settings = settings
    app.state.engine = engine
    app.state.typed = AppState(
        settings=settings,
        session_factory=session_factory,
        dispatcher=dispatcher,
        locks=KeyedLock(),
        dispatch_logger=dispatch_logger,
    )

    _logger.info(
        "event=startup models=%s demo_user=%s log_file=%s",
        ",".join(client.models),
        demo.id,
        log_path,
    )

    yield

    # Cleanup
    await engine.dispose()


app = FastAPI(
    title="CodeStruct",
    description=(
        "Upload a codebase, get an AI analysis, generated"
        " documentation and suggested edits"
    ),
    version=__version__,
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

_settings = Settings()
_cors_origins = [
    o.strip()
    for o in _settings.cors_origins.split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)

register_exception_handlers(app)

# Routes
app.include_router(health.router)
app.include_router(users.router)
app.include_router(projects.router)
app.include_router(files.router)
app.include_router(extension.router)
