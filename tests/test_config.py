"""Tests for Settings validators and the engine factory."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from sqlalchemy import text

from codestruct.config import EXTENSION_MAP, Settings, create_app_engine


def _settings(**kwargs: object) -> Settings:
    return Settings(_env_file=None, **kwargs)  # type: ignore[arg-type]


class TestModelChain:
    def test_default_chain_order(self) -> None:
        s = _settings()
        assert s.litellm_model_chain[0].startswith("bedrock/")
        assert s.litellm_model_chain[-1] == "openai/gpt-3.5-turbo"

    def test_comma_separated_string(self) -> None:
        s = _settings(litellm_model_chain="model-a , model-b")
        assert s.litellm_model_chain == ["model-a", "model-b"]

    def test_list_passthrough(self) -> None:
        s = _settings(litellm_model_chain=["model-a"])
        assert s.litellm_model_chain == ["model-a"]

    def test_from_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LITELLM_MODEL_CHAIN", "env-a,env-b")
        assert _settings().litellm_model_chain == ["env-a", "env-b"]

    def test_empty_chain_raises(self) -> None:
        with pytest.raises(ValueError, match="at least one model"):
            _settings(litellm_model_chain="")

    def test_duplicates_warn_but_are_kept(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="codestruct.config"):
            s = _settings(litellm_model_chain=["m", "m", "n"])
        assert "Duplicate models in LITELLM_MODEL_CHAIN" in caplog.text
        assert s.litellm_model_chain == ["m", "m", "n"]


class TestSourceExtensions:
    def test_normalized_to_dotted_lowercase(self) -> None:
        s = _settings(source_extensions="PY, .Ts,go")
        assert s.source_extensions == [".py", ".ts", ".go"]

    def test_defaults_map_to_languages(self) -> None:
        for ext in _settings().source_extensions:
            assert ext in EXTENSION_MAP, ext


class TestCreateAppEngine:
    async def test_url_conversion(self) -> None:
        engine = create_app_engine("sqlite:///data/test.db")
        assert engine.url.drivername == "sqlite+aiosqlite"
        await engine.dispose()

    async def test_wal_and_foreign_keys(self, tmp_path: Path) -> None:
        engine = create_app_engine(f"sqlite:///{tmp_path / 'cs.db'}")
        async with engine.connect() as conn:
            mode = (await conn.execute(text("PRAGMA journal_mode"))).scalar()
            fks = (await conn.execute(text("PRAGMA foreign_keys"))).scalar()
        await engine.dispose()
        assert mode == "wal"
        assert fks == 1

    async def test_memory_database_shared_between_connections(
        self,
    ) -> None:
        engine = create_app_engine("sqlite:///:memory:")
        async with engine.begin() as conn:
            await conn.execute(text("CREATE TABLE t (x INTEGER)"))
            await conn.execute(text("INSERT INTO t VALUES (1)"))
        async with engine.connect() as conn:
            count = (
                await conn.execute(text("SELECT COUNT(*) FROM t"))
            ).scalar()
        await engine.dispose()
        assert count == 1
