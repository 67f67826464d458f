"""Endpoint management for catalog-backed MCP tools.

This module provides the EndpointManager class which handles adding, removing,
and calling tools, validating arguments against each tool's input schema
before the call is routed to the upstream API.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from .models import InvocationResult, ParameterDescriptor, ToolDefinition
from .router import RequestRouter
from .schema import ValidationError, Validator, build_validator, compile_schema, describe


class EndpointManager:
    """Manages tool definitions and dispatches tool calls

    Each tool's input validator is compiled once when the tool is added, so
    calls only pay for validation and the single upstream request.

    Args:
        router: RequestRouter bound to the upstream base URL
    """

    def __init__(self, router: RequestRouter):
        self.router = router
        self.tools: Dict[str, ToolDefinition] = {}
        self.validators: Dict[str, Validator] = {}
        self.parameter_validators: Dict[str, List[Tuple[ParameterDescriptor, Validator]]] = {}
        logging.info(f"[EndpointManager] Initialized endpoint manager for {router.base_url}")

    def add_tool(self, tool: ToolDefinition) -> None:
        """Register a tool and compile its input validator

        Args:
            tool: ToolDefinition to add

        Raises:
            ValueError: If a tool with the same name already exists
        """
        if tool.name in self.tools:
            raise ValueError(f"Tool '{tool.name}' already exists")
        self.validators[tool.name] = compile_schema(tool.input_schema)
        self.parameter_validators[tool.name] = [
            (param, build_validator(param.schema)) for param in tool.endpoint.path_and_query_params
        ]
        self.tools[tool.name] = tool
        logging.info(
            f"[EndpointManager] Added tool '{tool.name}' "
            f"({tool.endpoint.method.value} {tool.endpoint.path_template})"
        )

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self.tools.get(name)

    def validate_arguments(self, name: str, arguments: Optional[Mapping]) -> Dict[str, Any]:
        """Validate raw arguments for a tool

        Path and query parameters are checked against their own descriptors
        as well, so a required path parameter can never be left out of the URL.

        Returns:
            The validated arguments, with defaults filled in

        Raises:
            KeyError: If the tool is unknown
            ValidationError: If the arguments do not match the input schema
        """
        validator = self.validators[name]
        arguments = {} if arguments is None else arguments
        if not isinstance(arguments, Mapping):
            raise ValidationError("", "object")
        params = dict(validator(dict(arguments)))

        for param, param_validator in self.parameter_validators[name]:
            if param.name not in params:
                if param.required:
                    raise ValidationError(param.name, f"required {describe(param.schema)}")
                continue
            params[param.name] = param_validator(params[param.name], param.name)
        return params

    async def call_tool(self, name: str, arguments: Optional[Mapping]) -> InvocationResult:
        """Validate arguments and forward the call to the upstream API

        Args:
            name: Name of the tool to call
            arguments: Raw tool arguments

        Returns:
            InvocationResult; unknown tools and invalid arguments produce an
            error envelope without any network activity
        """
        tool = self.tools.get(name)
        if tool is None:
            logging.error(f"[EndpointManager] Tool '{name}' not found")
            return InvocationResult.failure(f"Tool '{name}' not found")

        try:
            params = self.validate_arguments(name, arguments)
        except ValidationError as e:
            logging.warning(f"[EndpointManager] Rejected arguments for '{name}': {e}")
            return InvocationResult.failure(f"Invalid arguments for tool '{name}': {e}")

        result = await self.router.invoke(tool.endpoint, params)
        if result.is_error:
            logging.warning(f"[EndpointManager] Tool '{name}' failed: {result.metadata['errorMessage']}")
        else:
            logging.info(f"[EndpointManager] Tool '{name}' returned {result.metadata['status']}")
        return result

    def remove_tool(self, name: str) -> bool:
        """Remove a tool

        Returns:
            True if the tool was removed, False if it didn't exist
        """
        if name not in self.tools:
            logging.warning(f"[EndpointManager] Tool '{name}' not found for removal")
            return False
        del self.tools[name]
        self.validators.pop(name, None)
        self.parameter_validators.pop(name, None)
        logging.info(f"[EndpointManager] Removed tool '{name}'")
        return True

    def list_tools(self) -> List[dict]:
        """List all configured tools as JSON-friendly dictionaries"""
        result = []
        for tool in self.tools.values():
            endpoint = tool.endpoint
            result.append({
                "name": tool.name,
                "label": tool.label,
                "description": tool.description,
                "method": endpoint.method.value,
                "path": endpoint.path_template,
                "body": list(endpoint.body_field_names),
                "parameters": [
                    {"name": param.name, "in": param.location.value, "required": param.required}
                    for param in endpoint.path_and_query_params
                ],
                "inputSchema": tool.input_schema,
            })
        return result


__all__ = [
    "EndpointManager",
]
