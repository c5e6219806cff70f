"""Web search adapters used by the ``web_search`` tool plugin."""

from ragdesk.providers.search.duckduckgo_provider import DuckDuckGoSearchProvider

__all__ = ["DuckDuckGoSearchProvider"]
