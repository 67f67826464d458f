"""Core MCP server implementation for catalog-backed API tools.

This module provides the DynamicMCPServer class which serves as the main
MCP server that handles tool listing and execution using an EndpointManager,
and `build_server` which wires settings, catalog, router and manager together.
"""

import json
import logging

from mcp import types as mcp_types
from mcp.server.lowlevel import Server

from ..config import Settings
from .catalog import load_catalog
from .endpoint_manager import EndpointManager
from .models import InvocationResult
from .router import RequestRouter


def to_call_tool_result(result: InvocationResult) -> mcp_types.CallToolResult:
    """Convert an InvocationResult into the MCP wire result"""
    return mcp_types.CallToolResult(
        content=[mcp_types.TextContent(type="text", text=item["text"]) for item in result.content],
        isError=result.is_error,
        _meta=result.metadata,
    )


class DynamicMCPServer:
    """Pure MCP Server that serves tools from an EndpointManager

    This server focuses solely on MCP protocol handling (list_tools, call_tool)
    and delegates validation and upstream calls to an EndpointManager instance.

    Args:
        server_name: Name for the MCP server instance
        endpoint_manager: EndpointManager instance to get tools from
    """

    def __init__(self, server_name: str, endpoint_manager: EndpointManager):
        self.server_name = server_name
        self.server = Server(server_name)
        self.endpoint_manager = endpoint_manager
        self._setup_server()
        logging.info(f"[DynamicMCP] Initialized MCP server '{server_name}'")

    def list_mcp_tools(self) -> list[mcp_types.Tool]:
        tool_list = []
        for tool in self.endpoint_manager.tools.values():
            tool_list.append(mcp_types.Tool(
                name=tool.name,
                title=tool.label,
                description=tool.description,
                inputSchema=tool.input_schema or {"type": "object"},
            ))
        return tool_list

    def _setup_server(self) -> None:
        """Setup the MCP server with list_tools and call_tool handlers"""

        @self.server.list_tools()
        async def list_tools():
            tool_list = self.list_mcp_tools()
            logging.info(f"[DynamicMCP] Returning {len(tool_list)} tools to MCP client")
            return tool_list

        # arguments are checked by the endpoint manager's own validators
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict):
            logging.info(f"[DynamicMCP] Tool call: {name} with args: {json.dumps(arguments, default=str)}")
            try:
                result = await self.endpoint_manager.call_tool(name, arguments)
            except Exception as e:
                logging.exception(f"[DynamicMCP] Error executing tool '{name}': {e}")
                result = InvocationResult.failure(f"Error executing tool: {e}")
            return to_call_tool_result(result)

    def get_server(self) -> Server:
        """Get the configured MCP server instance

        Returns:
            The underlying MCP Server instance
        """
        return self.server

    def get_endpoint_manager(self) -> EndpointManager:
        """Get the endpoint manager instance

        Returns:
            The EndpointManager instance
        """
        return self.endpoint_manager


def build_server(settings: Settings) -> DynamicMCPServer:
    """Load the catalog and build a ready-to-run server

    Args:
        settings: Runtime settings

    Returns:
        DynamicMCPServer with every catalog tool registered
    """
    catalog = load_catalog(settings.catalog_path)
    router = RequestRouter(settings.resolve_base_url(catalog.base_url))
    endpoint_manager = EndpointManager(router)
    for tool in catalog.tools:
        endpoint_manager.add_tool(tool)
    return DynamicMCPServer(settings.server_name, endpoint_manager)


__all__ = [
    "DynamicMCPServer",
    "build_server",
    "to_call_tool_result",
]
