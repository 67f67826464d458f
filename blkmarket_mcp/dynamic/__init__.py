"""Catalog-driven MCP server package.

This package turns the endpoints declared in the catalog into MCP tools:
arguments are checked by validators built from each tool's input schema and
then routed to the upstream REST API as path, query and body fields.
"""

from .catalog import Catalog, CatalogError, load_catalog, tool_from_config
from .core import DynamicMCPServer, build_server
from .endpoint_manager import EndpointManager
from .models import (
    EndpointSpec,
    HTTPMethod,
    InvocationResult,
    ParameterDescriptor,
    ParameterLocation,
    SchemaKind,
    SchemaNode,
    ToolDefinition,
)
from .router import RequestRouter
from .schema import ValidationError, build_validator, parse_schema

__all__ = [
    "DynamicMCPServer",
    "build_server",
    "EndpointManager",
    "RequestRouter",
    "Catalog",
    "CatalogError",
    "load_catalog",
    "tool_from_config",
    "EndpointSpec",
    "HTTPMethod",
    "InvocationResult",
    "ParameterDescriptor",
    "ParameterLocation",
    "SchemaKind",
    "SchemaNode",
    "ToolDefinition",
    "ValidationError",
    "build_validator",
    "parse_schema",
]
