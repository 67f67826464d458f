"""Data models for dynamic API endpoints, their input schemas and call results.

This module contains the immutable structures built once at startup from the
endpoint catalog (schema nodes, parameter descriptors, endpoint specs, tool
definitions) and the per-call result envelope returned to MCP clients.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class HTTPMethod(Enum):
    """Supported HTTP methods for API endpoints"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @property
    def allows_body(self) -> bool:
        return self in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)


class SchemaKind(Enum):
    """Value shapes understood by the schema translator"""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"


@dataclass(frozen=True)
class SchemaNode:
    """Declarative description of one value's shape

    Args:
        kind: Value kind
        items: Element schema, only for arrays (None means "array of strings")
        properties: Ordered (name, schema) pairs, only for objects. None on an
            object means any string-keyed mapping is accepted.
        nullable: Whether an explicit None is accepted
        optional: Whether the enclosing object may omit this field
        enum_values: Allowed literal values, regardless of kind
        default: Value filled in by the enclosing object when the field is absent
        any_of: Alternative shapes; a value matching any one is accepted
        description: Free-form field documentation
    """
    kind: SchemaKind = SchemaKind.ANY
    items: Optional["SchemaNode"] = None
    properties: Optional[Tuple[Tuple[str, "SchemaNode"], ...]] = None
    nullable: bool = False
    optional: bool = False
    enum_values: Optional[Tuple[Any, ...]] = None
    default: Any = None
    has_default: bool = False
    any_of: Optional[Tuple["SchemaNode", ...]] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.items is not None and self.kind is not SchemaKind.ARRAY:
            raise ValueError(f"'items' is only valid for array schemas, not {self.kind.value}")
        if self.properties is not None and self.kind is not SchemaKind.OBJECT:
            raise ValueError(f"'properties' is only valid for object schemas, not {self.kind.value}")


class ParameterLocation(Enum):
    """Where a declared parameter travels in the outgoing request"""
    PATH = "path"
    QUERY = "query"


@dataclass(frozen=True)
class ParameterDescriptor:
    """Declaration that a field is sent in the URL path or query string

    Args:
        name: Field name as supplied by the caller
        location: PATH or QUERY
        required: Whether the upstream API requires it
        schema: Shape of the value
    """
    name: str
    location: ParameterLocation
    required: bool = False
    schema: SchemaNode = field(default_factory=SchemaNode)


@dataclass(frozen=True)
class EndpointSpec:
    """Static description of one upstream HTTP operation

    Args:
        path_template: Path relative to the base URL, with {name} placeholders
        method: HTTP method to use
        body_field_names: Fields sent as members of the JSON body
        path_and_query_params: Declared path and query parameters
    """
    path_template: str
    method: HTTPMethod
    body_field_names: Tuple[str, ...] = ()
    path_and_query_params: Tuple[ParameterDescriptor, ...] = ()

    def parameter(self, name: str, location: ParameterLocation) -> Optional[ParameterDescriptor]:
        for param in self.path_and_query_params:
            if param.name == name and param.location is location:
                return param
        return None

    def is_path_param(self, name: str) -> bool:
        return self.parameter(name, ParameterLocation.PATH) is not None

    def is_query_param(self, name: str) -> bool:
        return self.parameter(name, ParameterLocation.QUERY) is not None

    def is_body_field(self, name: str) -> bool:
        return name in self.body_field_names


@dataclass(frozen=True)
class ToolDefinition:
    """Configuration for one MCP tool backed by an upstream endpoint

    Args:
        name: Unique tool name
        label: Human-readable title shown by MCP clients
        description: Tool documentation
        input_schema: JSON-Schema-like dictionary describing the arguments
        endpoint: Upstream operation the tool forwards to
    """
    name: str
    label: str
    description: str
    input_schema: Dict[str, Any]
    endpoint: EndpointSpec


@dataclass
class InvocationResult:
    """Uniform success/error envelope for one tool call"""
    content: List[Dict[str, str]]
    metadata: Dict[str, Any]

    @classmethod
    def success(cls, text: str, status: int, status_text: str, headers: Dict[str, str]) -> "InvocationResult":
        return cls(
            content=[{"type": "text", "text": text}],
            metadata={"status": status, "statusText": status_text, "headers": headers},
        )

    @classmethod
    def failure(cls, message: Optional[str]) -> "InvocationResult":
        message = message or "Unknown error"
        return cls(
            content=[{"type": "text", "text": message}],
            metadata={"error": True, "errorMessage": message},
        )

    @property
    def is_error(self) -> bool:
        return bool(self.metadata.get("error"))

    @property
    def text(self) -> str:
        return self.content[0]["text"] if self.content else ""

    def to_dict(self) -> Dict[str, Any]:
        return {"content": [dict(item) for item in self.content], "metadata": dict(self.metadata)}


__all__ = [
    "HTTPMethod",
    "SchemaKind",
    "SchemaNode",
    "ParameterLocation",
    "ParameterDescriptor",
    "EndpointSpec",
    "ToolDefinition",
    "InvocationResult",
]
