"""Registry of tool plugins, keyed by tool name."""

from __future__ import annotations

from typing import Any

import structlog

from ragdesk.interfaces.agent_plugin import IAgentPlugin
from ragdesk.utils.errors import NotFoundError

logger = structlog.get_logger(logger_name=__name__)


class PluginRegistry:
    """Holds the tool plugins offered to the chat model.

    Registering a plugin under an existing name replaces the earlier one.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, IAgentPlugin] = {}

    def register(self, plugin: IAgentPlugin) -> None:
        self._plugins[plugin.name] = plugin
        logger.info("plugin_registered", plugin=plugin.name)

    def get(self, name: str) -> IAgentPlugin | None:
        return self._plugins.get(name)

    def names(self) -> list[str]:
        return list(self._plugins)

    def get_tool_definitions(self) -> list[dict[str, Any]]:
        """Return every plugin's definition in function-calling format."""
        return [plugin.get_definition() for plugin in self._plugins.values()]

    async def execute_plugin(self, name: str, args: dict[str, Any]) -> Any:
        """Run the plugin registered as *name*.

        Raises
        ------
        NotFoundError
            If no plugin has that name.
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            raise NotFoundError(message=f"Plugin not found: {name}")
        logger.info("plugin_executing", plugin=name)
        return await plugin.execute(args)
