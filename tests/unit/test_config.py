"""Unit tests for Settings validation and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ragdesk.config.loader import load_config
from ragdesk.config.settings import Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.chat_model == "deepseek-r1"
        assert settings.embedding_model == "nomic-embed-text"
        assert settings.chunk_size == 500
        assert settings.chunk_overlap == 100
        assert settings.rag_top_k == 5
        assert settings.rag_min_similarity == 0.3
        assert settings.history_limit == 20

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHAT_MODEL", "llama3.2")
        monkeypatch.setenv("RAG_TOP_K", "8")

        settings = Settings(_env_file=None)

        assert settings.chat_model == "llama3.2"
        assert settings.rag_top_k == 8

    def test_overlap_must_be_smaller_than_chunk_size(self) -> None:
        with pytest.raises(ValidationError, match="chunk_overlap"):
            Settings(_env_file=None, chunk_size=100, chunk_overlap=100)


class TestLoadConfig:
    def test_settings_override_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "retrieval:\n  top_k: 3\n  extra_key: kept\n"
            "cors:\n  allowed_origins: ['http://localhost:5173']\n",
            encoding="utf-8",
        )

        config = load_config(str(path), settings=Settings(_env_file=None, rag_top_k=7))

        assert config["retrieval"]["top_k"] == 7
        assert config["retrieval"]["extra_key"] == "kept"
        assert config["cors"]["allowed_origins"] == ["http://localhost:5173"]
        assert config["ollama"]["chat_model"] == "deepseek-r1"

    def test_missing_file_uses_settings_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=Settings(_env_file=None))

        assert config["app"]["port"] == 8000
        assert "cors" not in config
