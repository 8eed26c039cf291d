"""Typed application state: replaces untyped getattr() access."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.config import Settings
from codestruct.logger import DispatchLogger
from codestruct.resilience.locks import KeyedLock


@dataclass
class AppState:
    """Typed container for app.state attributes.

    ``session_factory`` is ``None`` only in tests that override
    the repository dependency.
    """

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession] | None
    dispatcher: AnalysisDispatcher
    locks: KeyedLock
    dispatch_logger: DispatchLogger | None = None
