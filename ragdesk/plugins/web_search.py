"""``web_search`` tool: runs a web search and returns a plain-text digest."""

from __future__ import annotations

from typing import Any

from ragdesk.interfaces.agent_plugin import IAgentPlugin
from ragdesk.interfaces.web_search_provider import IWebSearchProvider
from ragdesk.utils.errors import PluginError


class WebSearchPlugin(IAgentPlugin):
    name = "web_search"
    description = "Search the web for real-time information."

    def __init__(self, search_provider: IWebSearchProvider, num_results: int = 5) -> None:
        self._search_provider = search_provider
        self._num_results = num_results

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query."},
            },
            "required": ["query"],
        }

    async def execute(self, args: dict[str, Any]) -> str:
        query = args.get("query")
        if not query or not isinstance(query, str):
            raise PluginError(message="query is required", provider_name=self.name)

        results = await self._search_provider.search(query, num_results=self._num_results)
        if not results:
            return f"No results found for: {query}"

        lines = []
        for rank, result in enumerate(results, start=1):
            lines.append(f"{rank}. {result.title}\n   {result.url}")
            if result.snippet:
                lines.append(f"   {result.snippet}")
        return "\n".join(lines)
