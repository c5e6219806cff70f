"""Abstract base class for tools the chat model may call."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# Concrete implementations: LocalFileReaderPlugin, WebSearchPlugin (ragdesk/plugins/)
class IAgentPlugin(ABC):
    """A named tool exposed to the model in function-calling format."""

    name: str
    description: str

    @abstractmethod
    def get_parameters(self) -> dict[str, Any]:
        """Return the JSON schema of the tool's arguments."""

    @abstractmethod
    async def execute(self, args: dict[str, Any]) -> Any:
        """Run the tool.

        Raises
        ------
        ragdesk.utils.errors.PluginError
            If the arguments are invalid or the tool fails.
        """

    def get_definition(self) -> dict[str, Any]:
        """Return the tool definition sent with chat requests."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.get_parameters(),
            },
        }
