"""``local_file_reader`` tool: reads a UTF-8 text file below a sandbox root.

Paths are resolved relative to the configured root directory; anything
that resolves outside it (``..`` segments, absolute paths elsewhere,
symlinks pointing out) is rejected.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog

from ragdesk.interfaces.agent_plugin import IAgentPlugin
from ragdesk.utils.errors import PluginError

logger = structlog.get_logger(logger_name=__name__)

MAX_CHARS = 20_000


class LocalFileReaderPlugin(IAgentPlugin):
    name = "local_file_reader"
    description = "Read the contents of a local text file."

    def __init__(self, root_dir: str | Path, max_chars: int = MAX_CHARS) -> None:
        self._root = Path(root_dir).resolve()
        self._max_chars = max_chars

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "filePath": {
                    "type": "string",
                    "description": "Path of the file to read, relative to the shared files folder.",
                },
            },
            "required": ["filePath"],
        }

    async def execute(self, args: dict[str, Any]) -> str:
        raw_path = args.get("filePath") or args.get("file_path")
        if not raw_path or not isinstance(raw_path, str):
            raise PluginError(message="filePath is required", provider_name=self.name)

        path = self._resolve(raw_path)
        try:
            text = await asyncio.to_thread(path.read_text, "utf-8")
        except FileNotFoundError as exc:
            raise PluginError(message=f"File not found: {raw_path}", provider_name=self.name) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise PluginError(message=f"Could not read {raw_path}: {exc}", provider_name=self.name) from exc

        logger.info("local_file_read", path=str(path), characters=len(text))
        if len(text) > self._max_chars:
            return text[: self._max_chars] + "\n\n[truncated]"
        return text

    def _resolve(self, raw_path: str) -> Path:
        candidate = Path(raw_path)
        if not candidate.is_absolute():
            candidate = self._root / candidate
        resolved = candidate.resolve()
        if not resolved.is_relative_to(self._root):
            raise PluginError(
                message=f"Access outside {self._root} is not allowed",
                provider_name=self.name,
            )
        return resolved
