"""Unit tests for the plugin registry and the built-in tools."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from ragdesk.interfaces.web_search_provider import WebSearchResult
from ragdesk.plugins.local_file_reader import LocalFileReaderPlugin
from ragdesk.plugins.registry import PluginRegistry
from ragdesk.plugins.web_search import WebSearchPlugin
from ragdesk.utils.errors import NotFoundError, PluginError


def _search_provider(results: list[WebSearchResult]) -> MagicMock:
    provider = MagicMock()
    provider.search = AsyncMock(return_value=results)
    return provider


class TestPluginRegistry:
    def test_definitions_use_function_calling_format(self, tmp_path: Path) -> None:
        registry = PluginRegistry()
        registry.register(LocalFileReaderPlugin(tmp_path))

        definitions = registry.get_tool_definitions()

        assert definitions == [
            {
                "type": "function",
                "function": {
                    "name": "local_file_reader",
                    "description": "Read the contents of a local text file.",
                    "parameters": LocalFileReaderPlugin(tmp_path).get_parameters(),
                },
            }
        ]

    def test_register_replaces_same_name(self, tmp_path: Path) -> None:
        registry = PluginRegistry()
        first = LocalFileReaderPlugin(tmp_path)
        second = LocalFileReaderPlugin(tmp_path)
        registry.register(first)
        registry.register(second)

        assert registry.names() == ["local_file_reader"]
        assert registry.get("local_file_reader") is second

    @pytest.mark.asyncio
    async def test_execute_unknown_plugin(self) -> None:
        with pytest.raises(NotFoundError, match="Plugin not found: missing"):
            await PluginRegistry().execute_plugin("missing", {})

    @pytest.mark.asyncio
    async def test_execute_dispatches_by_name(self) -> None:
        registry = PluginRegistry()
        registry.register(WebSearchPlugin(_search_provider([])))

        result = await registry.execute_plugin("web_search", {"query": "ollama"})

        assert result == "No results found for: ollama"


class TestLocalFileReader:
    @pytest.mark.asyncio
    async def test_reads_relative_path(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("hello file", encoding="utf-8")
        plugin = LocalFileReaderPlugin(tmp_path)

        assert await plugin.execute({"filePath": "notes.txt"}) == "hello file"

    @pytest.mark.asyncio
    async def test_accepts_snake_case_argument(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("x", encoding="utf-8")
        assert await LocalFileReaderPlugin(tmp_path).execute({"file_path": "a.txt"}) == "x"

    @pytest.mark.asyncio
    async def test_rejects_escape_from_root(self, tmp_path: Path) -> None:
        root = tmp_path / "root"
        root.mkdir()
        (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")

        with pytest.raises(PluginError, match="not allowed"):
            await LocalFileReaderPlugin(root).execute({"filePath": "../secret.txt"})

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PluginError, match="File not found"):
            await LocalFileReaderPlugin(tmp_path).execute({"filePath": "ghost.txt"})

    @pytest.mark.asyncio
    async def test_missing_argument(self, tmp_path: Path) -> None:
        with pytest.raises(PluginError, match="filePath is required"):
            await LocalFileReaderPlugin(tmp_path).execute({})

    @pytest.mark.asyncio
    async def test_long_file_is_truncated(self, tmp_path: Path) -> None:
        (tmp_path / "big.txt").write_text("a" * 50, encoding="utf-8")

        result = await LocalFileReaderPlugin(tmp_path, max_chars=10).execute({"filePath": "big.txt"})

        assert result == "a" * 10 + "\n\n[truncated]"


class TestWebSearch:
    @pytest.mark.asyncio
    async def test_formats_numbered_results(self) -> None:
        provider = _search_provider(
            [
                WebSearchResult(title="Ollama", url="https://ollama.com", snippet="Run models locally."),
                WebSearchResult(title="Docs", url="https://docs.example"),
            ]
        )
        plugin = WebSearchPlugin(provider, num_results=2)

        result = await plugin.execute({"query": "ollama"})

        assert result == (
            "1. Ollama\n   https://ollama.com\n   Run models locally.\n"
            "2. Docs\n   https://docs.example"
        )
        provider.search.assert_awaited_once_with("ollama", num_results=2)

    @pytest.mark.asyncio
    async def test_requires_query(self) -> None:
        with pytest.raises(PluginError):
            await WebSearchPlugin(_search_provider([])).execute({"query": ""})
