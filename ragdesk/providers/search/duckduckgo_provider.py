"""DuckDuckGo web-search provider implementing IWebSearchProvider.

Uses the ``duckduckgo_search`` library for keyless web searches.  The
synchronous ``DDGS`` client runs in a worker thread.  Rate-limit and
network failures are logged and produce an empty result list.
"""

from __future__ import annotations

import asyncio

import structlog
from duckduckgo_search import DDGS

from ragdesk.interfaces.web_search_provider import IWebSearchProvider, WebSearchResult

logger = structlog.get_logger(logger_name=__name__)


class DuckDuckGoSearchProvider(IWebSearchProvider):
    """DuckDuckGo web-search provider (no API key required)."""

    async def search(self, query: str, num_results: int = 5) -> list[WebSearchResult]:
        try:
            raw_results = await asyncio.to_thread(self._sync_search, query, num_results)
        except Exception as exc:  # noqa: BLE001 -- DDG may rate-limit or fail
            logger.warning("duckduckgo_search_failed", query=query, error=str(exc))
            return []

        results = [
            WebSearchResult(
                title=item.get("title", ""),
                url=item.get("href", item.get("url", "")),
                snippet=item.get("body"),
            )
            for item in raw_results or []
        ]
        logger.debug("duckduckgo_search_complete", query=query, result_count=len(results))
        return results

    @staticmethod
    def _sync_search(query: str, max_results: int) -> list[dict]:
        with DDGS() as ddgs:
            return list(ddgs.text(query, max_results=max_results))

    def get_provider_name(self) -> str:
        return "duckduckgo"

    def is_available(self) -> bool:
        return True
