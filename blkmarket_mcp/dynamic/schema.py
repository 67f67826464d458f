"""Translation of JSON-Schema-like field descriptions into runtime validators.

Tool input schemas arrive from the endpoint catalog as plain dictionaries.
`parse_schema` turns such a dictionary into an immutable `SchemaNode` tree and
`build_validator` turns a `SchemaNode` into a callable that either returns the
accepted (possibly coerced) value or raises `ValidationError`.
"""

import copy
import math
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from .models import SchemaKind, SchemaNode

Validator = Callable[..., Any]

_KIND_NAMES = {kind.value: kind for kind in SchemaKind}


class ValidationError(ValueError):
    """Raised when a value does not match its schema

    Args:
        path: Dotted location of the offending value (empty for the root)
        expected: Human-readable description of the expected shape
    """

    def __init__(self, path: str, expected: str):
        self.path = path
        self.expected = expected
        where = f"'{path}'" if path else "root"
        super().__init__(f"Invalid value at {where}: expected {expected}")


def parse_schema(raw: Optional[Dict[str, Any]], optional: bool = False) -> SchemaNode:
    """Parse a JSON-Schema-like dictionary into a SchemaNode

    Args:
        raw: Schema dictionary; None or {} means "any value"
        optional: Whether the enclosing object may omit this field

    Returns:
        The parsed SchemaNode

    Raises:
        ValueError: If the schema is not a mapping
    """
    if not raw:
        return SchemaNode(optional=optional)
    if not isinstance(raw, Mapping):
        raise ValueError(f"Schema must be a mapping, got {type(raw).__name__}")

    nullable = bool(raw.get("nullable", False))
    optional = optional or bool(raw.get("optional", False))
    raw_type = raw.get("type")
    alternatives = []

    if isinstance(raw_type, (list, tuple)):
        type_names = [name for name in raw_type if name != "null"]
        nullable = nullable or len(type_names) != len(raw_type)
        if len(type_names) > 1:
            alternatives.extend(parse_schema({"type": name}) for name in type_names)
            raw_type = None
        else:
            raw_type = type_names[0] if type_names else None

    for alternative in raw.get("anyOf") or raw.get("oneOf") or ():
        if isinstance(alternative, Mapping) and alternative.get("type") == "null":
            nullable = True
        else:
            alternatives.append(parse_schema(alternative))

    kind = _parse_kind(raw_type, raw)

    items = None
    if kind is SchemaKind.ARRAY and raw.get("items"):
        items = parse_schema(raw["items"])

    properties = None
    if kind is SchemaKind.OBJECT and isinstance(raw.get("properties"), Mapping):
        required = set(raw.get("required") or ())
        properties = tuple(
            (name, parse_schema(child, optional=name not in required))
            for name, child in raw["properties"].items()
        )

    enum_values = tuple(raw["enum"]) if raw.get("enum") is not None else None

    return SchemaNode(
        kind=kind,
        items=items,
        properties=properties,
        nullable=nullable,
        optional=optional,
        enum_values=enum_values,
        default=raw.get("default"),
        has_default="default" in raw,
        any_of=tuple(alternatives) or None,
        description=raw.get("description"),
    )


def _parse_kind(raw_type: Any, raw: Mapping) -> SchemaKind:
    if raw_type is None:
        if "properties" in raw:
            return SchemaKind.OBJECT
        if "items" in raw:
            return SchemaKind.ARRAY
        return SchemaKind.ANY
    if not isinstance(raw_type, str):
        raise ValueError(f"Schema type must be a string or a list of strings, got {raw_type!r}")
    # unrecognised kinds fall back to plain strings
    return _KIND_NAMES.get(raw_type, SchemaKind.STRING)


def describe(node: Optional[SchemaNode]) -> str:
    """Render the expected shape of a node for error messages"""
    if node is None:
        return "any"
    if node.enum_values is not None:
        text = "one of " + ", ".join(repr(value) for value in node.enum_values)
    elif node.any_of and node.kind is SchemaKind.ANY:
        text = " | ".join(describe(alternative) for alternative in node.any_of)
    elif node.kind is SchemaKind.ARRAY:
        text = f"array of {describe(node.items) if node.items else 'string'}"
    else:
        text = node.kind.value
    if node.nullable:
        text += " or null"
    return text


def build_validator(node: Optional[SchemaNode] = None) -> Validator:
    """Build a validator for a SchemaNode

    The returned callable has the signature ``validator(value, path="")`` and
    returns the accepted value or raises ValidationError. A missing node
    validates anything.
    """
    if node is None:
        node = SchemaNode()

    if node.enum_values is not None:
        validator = _build_enum(node)
    else:
        validator = _BUILDERS.get(node.kind, _build_string)(node)

    if node.any_of:
        validator = _chain(validator, _build_any_of(node))
    if node.nullable:
        validator = _allow_null(validator)
    return validator


def compile_schema(raw: Optional[Dict[str, Any]]) -> Validator:
    """Parse a schema dictionary and build its validator in one step"""
    return build_validator(parse_schema(raw))


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and all(isinstance(key, str) for key in value)


def _build_any(node: SchemaNode) -> Validator:
    def validate_any(value, path=""):
        return value
    return validate_any


def _build_string(node: SchemaNode) -> Validator:
    def validate_string(value, path=""):
        if not isinstance(value, str):
            raise ValidationError(path, "string")
        return value
    return validate_string


def _build_integer(node: SchemaNode) -> Validator:
    def validate_integer(value, path=""):
        if isinstance(value, bool):
            raise ValidationError(path, "integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            return int(value)
        raise ValidationError(path, "integer")
    return validate_integer


def _build_number(node: SchemaNode) -> Validator:
    def validate_number(value, path=""):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(path, "number")
        if not math.isfinite(value):
            raise ValidationError(path, "finite number")
        return value
    return validate_number


def _build_boolean(node: SchemaNode) -> Validator:
    def validate_boolean(value, path=""):
        if not isinstance(value, bool):
            raise ValidationError(path, "boolean")
        return value
    return validate_boolean


def _build_array(node: SchemaNode) -> Validator:
    item_validator = build_validator(node.items) if node.items else _build_string(node)
    expected = describe(node)

    def validate_array(value, path=""):
        if not isinstance(value, (list, tuple)):
            raise ValidationError(path, expected)
        return [item_validator(item, f"{path}[{index}]") for index, item in enumerate(value)]
    return validate_array


def _build_object(node: SchemaNode) -> Validator:
    if node.properties is None:
        def validate_record(value, path=""):
            if not _is_mapping(value):
                raise ValidationError(path, "object")
            return dict(value)
        return validate_record

    fields = [(name, child, build_validator(child)) for name, child in node.properties]

    def validate_object(value, path=""):
        if not _is_mapping(value):
            raise ValidationError(path, "object")
        result = dict(value)
        for name, child, validator in fields:
            field_path = _join(path, name)
            if name not in value:
                if child.has_default:
                    result[name] = copy.deepcopy(child.default)
                elif not child.optional:
                    raise ValidationError(field_path, f"required {describe(child)}")
                continue
            result[name] = validator(value[name], field_path)
        return result
    return validate_object


def _literal_equal(left: Any, right: Any) -> bool:
    # True == 1 in Python, enum literals compare type-strictly
    return type(left) is type(right) and left == right


def _build_enum(node: SchemaNode) -> Validator:
    allowed = node.enum_values
    expected = describe(SchemaNode(enum_values=allowed))

    def validate_enum(value, path=""):
        if any(_literal_equal(value, literal) for literal in allowed):
            return value
        raise ValidationError(path, expected)
    return validate_enum


def _build_any_of(node: SchemaNode) -> Validator:
    validators = [build_validator(alternative) for alternative in node.any_of]
    expected = " | ".join(describe(alternative) for alternative in node.any_of)

    def validate_alternatives(value, path=""):
        for validator in validators:
            try:
                return validator(value, path)
            except ValidationError:
                continue
        raise ValidationError(path, expected)
    return validate_alternatives


def _chain(first: Validator, second: Validator) -> Validator:
    def validate_both(value, path=""):
        return second(first(value, path), path)
    return validate_both


def _allow_null(validator: Validator) -> Validator:
    def validate_nullable(value, path=""):
        if value is None:
            return None
        return validator(value, path)
    return validate_nullable


_BUILDERS: Dict[SchemaKind, Callable[[SchemaNode], Validator]] = {
    SchemaKind.ANY: _build_any,
    SchemaKind.STRING: _build_string,
    SchemaKind.INTEGER: _build_integer,
    SchemaKind.NUMBER: _build_number,
    SchemaKind.BOOLEAN: _build_boolean,
    SchemaKind.ARRAY: _build_array,
    SchemaKind.OBJECT: _build_object,
}


__all__ = [
    "ValidationError",
    "Validator",
    "parse_schema",
    "build_validator",
    "compile_schema",
    "describe",
]
