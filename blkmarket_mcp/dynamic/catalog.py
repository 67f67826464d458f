"""Endpoint catalog loading.

The catalog is static configuration: a base URL plus one entry per tool with
its name, label, description, HTTP method, path template, input schema and
the list of fields sent in the path or query string. It is read once at
startup and turned into immutable ToolDefinitions.

Example entry::

    - name: getProduct
      label: Get product
      description: Fetch a single product
      method: GET
      path: /api/products/{productId}
      input_schema:
        type: object
        properties:
          productId: {type: string}
        required: [productId]
      parameters:
        - {name: productId, in: path, required: true}
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .models import (
    EndpointSpec,
    HTTPMethod,
    ParameterDescriptor,
    ParameterLocation,
    ToolDefinition,
)
from .schema import parse_schema

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "endpoints.yaml"


class CatalogError(ValueError):
    """Raised when the endpoint catalog is malformed"""


@dataclass(frozen=True)
class Catalog:
    base_url: Optional[str]
    tools: Tuple[ToolDefinition, ...]


def _parameter_from_config(config: Dict[str, Any], input_schema: Dict[str, Any]) -> ParameterDescriptor:
    name = config["name"]
    try:
        location = ParameterLocation(config.get("in", config.get("location", "query")))
    except ValueError:
        raise CatalogError(f"Parameter '{name}' has invalid location {config.get('in')!r}") from None

    raw_schema = config.get("schema")
    if raw_schema is None and config.get("type"):
        raw_schema = {"type": config["type"]}
    if raw_schema is None:
        raw_schema = (input_schema.get("properties") or {}).get(name)

    required = bool(config.get("required", location is ParameterLocation.PATH))
    return ParameterDescriptor(
        name=name,
        location=location,
        required=required,
        schema=parse_schema(raw_schema, optional=not required),
    )


def _schema_from_parameters(parameters: List[Dict[str, Any]]) -> Dict[str, Any]:
    properties = {}
    required = []
    for param in parameters:
        schema = dict(param.get("schema") or {"type": param.get("type", "string")})
        if param.get("description"):
            schema.setdefault("description", param["description"])
        properties[param["name"]] = schema
        if param.get("required", param.get("in") == "path"):
            required.append(param["name"])
    return {"type": "object", "properties": properties, "required": required}


def tool_from_config(config: Dict[str, Any]) -> ToolDefinition:
    """Create a ToolDefinition from a configuration dictionary

    Args:
        config: Dictionary containing the tool configuration

    Returns:
        ToolDefinition instance

    Raises:
        CatalogError: If required keys are missing or values are invalid
    """
    if not isinstance(config, dict):
        raise CatalogError(f"Tool configuration must be a mapping, got {type(config).__name__}")
    for key in ("name", "method", "path"):
        if not config.get(key):
            raise CatalogError(f"Tool configuration is missing '{key}': {config.get('name', config)}")

    name = config["name"]
    try:
        method = HTTPMethod(str(config["method"]).upper())
    except ValueError:
        raise CatalogError(f"Tool '{name}' has unsupported method {config['method']!r}") from None

    raw_parameters = config.get("parameters") or []
    for param in raw_parameters:
        if not isinstance(param, dict) or not param.get("name"):
            raise CatalogError(f"Tool '{name}' has a parameter without a name: {param}")

    input_schema = config.get("input_schema") or config.get("inputSchema")
    if input_schema is None:
        input_schema = _schema_from_parameters(raw_parameters)
    if not isinstance(input_schema, dict):
        raise CatalogError(f"Tool '{name}' input schema must be a mapping")

    try:
        # parse eagerly so schema errors surface at startup
        parse_schema(input_schema)
        parameters = tuple(_parameter_from_config(param, input_schema) for param in raw_parameters)
    except CatalogError:
        raise
    except ValueError as e:
        raise CatalogError(f"Tool '{name}' has an invalid schema: {e}") from e

    declared_required = list(input_schema.get("required") or ())
    missing = [param.name for param in parameters if param.required and param.name not in declared_required]
    if missing:
        input_schema = {**input_schema, "required": declared_required + missing}

    routed = {param.name for param in parameters}
    if "body" in config:
        body_fields = tuple(config.get("body") or ())
    elif method.allows_body:
        body_fields = tuple(
            field_name for field_name in (input_schema.get("properties") or {})
            if field_name not in routed
        )
    else:
        body_fields = ()

    for param in parameters:
        if param.location is ParameterLocation.PATH and f"{{{param.name}}}" not in config["path"]:
            logging.warning(f"[Catalog] Tool '{name}' declares path parameter '{param.name}' missing from {config['path']}")

    return ToolDefinition(
        name=name,
        label=config.get("label") or config.get("title") or name,
        description=config.get("description", ""),
        input_schema=input_schema,
        endpoint=EndpointSpec(
            path_template=config["path"],
            method=method,
            body_field_names=body_fields,
            path_and_query_params=parameters,
        ),
    )


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Load the endpoint catalog from a YAML file

    Args:
        path: Catalog file; defaults to the packaged endpoints.yaml

    Returns:
        Catalog with the configured base URL (if any) and tool definitions

    Raises:
        CatalogError: If the file is malformed or declares a tool twice
    """
    path = Path(path) if path else DEFAULT_CATALOG_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise CatalogError(f"Catalog {path} must be a mapping with an 'endpoints' list")

    tools = []
    seen = set()
    for entry in data.get("endpoints") or []:
        tool = tool_from_config(entry)
        if tool.name in seen:
            raise CatalogError(f"Tool '{tool.name}' is declared more than once in {path}")
        seen.add(tool.name)
        tools.append(tool)

    logging.info(f"[Catalog] Loaded {len(tools)} tools from {path}")
    return Catalog(base_url=data.get("base_url"), tools=tuple(tools))


__all__ = [
    "DEFAULT_CATALOG_PATH",
    "Catalog",
    "CatalogError",
    "tool_from_config",
    "load_catalog",
]
