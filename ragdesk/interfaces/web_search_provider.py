"""Abstract base class for web-search service providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class WebSearchResult:
    """A single web-search result."""

    title: str
    url: str
    snippet: str | None = None


# Concrete implementation: DuckDuckGoSearchProvider (ragdesk/providers/search/)
class IWebSearchProvider(ABC):
    """Contract for the search backend behind the ``web_search`` tool."""

    @abstractmethod
    async def search(self, query: str, num_results: int = 5) -> list[WebSearchResult]:
        """Execute a web search and return the top results.

        Providers that hit rate limits return an empty list rather than raising.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider identifier."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider can be used."""
