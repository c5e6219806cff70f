"""Tools the chat model can call when tool use is enabled."""

from ragdesk.plugins.local_file_reader import LocalFileReaderPlugin
from ragdesk.plugins.registry import PluginRegistry
from ragdesk.plugins.web_search import WebSearchPlugin

__all__ = ["LocalFileReaderPlugin", "PluginRegistry", "WebSearchPlugin"]
