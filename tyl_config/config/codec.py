"""
Value codec for configuration fields.

Converts individual field values between their in-memory Python form, the
flat textual form used in environment variables, and the JSON-schema
fragments used to check YAML nodes.

Supported field types are ``str``, ``int``, ``float``, ``bool`` and
``Optional`` of any of these.
"""

import math
import re
import types
from typing import Any, Dict, Optional, Tuple, Union, get_args, get_origin

from .errors import EnvParseError

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")

TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0")

SUPPORTED_TYPES = (str, int, float, bool)

_JSON_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}

_EXPECTED = {
    str: "a string",
    int: "a base-10 integer",
    float: "a decimal number",
    bool: "one of true/false/1/0",
}


def unwrap_optional(annotation: Any) -> Tuple[type, bool]:
    """
    Split a field annotation into its primitive type and nullability.

    Args:
        annotation: Resolved type annotation of a dataclass field

    Returns:
        Tuple of (primitive type, whether None is allowed)

    Raises:
        TypeError: If the annotation is not a supported field type

    Example:
        >>> unwrap_optional(Optional[str])
        (<class 'str'>, True)
    """
    origin = get_origin(annotation)
    union_types = (Union, getattr(types, "UnionType", Union))
    if origin in union_types:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        nullable = len(args) != len(get_args(annotation))
        if len(args) == 1 and args[0] in SUPPORTED_TYPES:
            return args[0], nullable
        raise TypeError(f"Unsupported configuration field type: {annotation!r}")

    if annotation in SUPPORTED_TYPES:
        return annotation, False

    raise TypeError(f"Unsupported configuration field type: {annotation!r}")


def parse_env_value(field: str, key: str, raw: str, field_type: type) -> Any:
    """
    Parse the textual value of an environment variable for one field.

    Args:
        field: Field name, used for error attribution
        key: Environment variable the value was read from
        raw: Raw environment value
        field_type: Primitive type of the field

    Returns:
        The parsed value

    Raises:
        EnvParseError: If the value does not parse as the field's type

    Example:
        >>> parse_env_value("port", "TYL_POSTGRES_PORT", "5555", int)
        5555
    """
    if field_type is str:
        return raw

    text = raw.strip()

    if field_type is bool:
        lowered = text.lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    elif field_type is int:
        if _INT_PATTERN.match(text):
            return int(text, 10)
    elif field_type is float:
        if _FLOAT_PATTERN.match(text):
            value = float(text)
            # overflowing exponents such as 1e999 parse to inf
            if math.isfinite(value):
                return value

    raise EnvParseError(field, key, raw, _EXPECTED[field_type])


def format_env_value(value: Any) -> str:
    """
    Render a field value in the textual form accepted by parse_env_value.

    Example:
        >>> format_env_value(True)
        'true'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def json_schema_for(field_type: type, nullable: bool = False) -> Dict[str, Any]:
    """Build the JSON-schema fragment a YAML value for this field must satisfy."""
    json_type = _JSON_TYPES[field_type]
    if nullable:
        return {"type": [json_type, "null"]}
    return {"type": json_type}


def normalize_yaml_value(value: Any, field_type: type) -> Optional[Any]:
    """Convert an already schema-checked YAML scalar to the field's Python type."""
    if value is None:
        return None
    if field_type is float:
        return float(value)
    if field_type is int and isinstance(value, float):
        # 5432.0 satisfies the draft-7 integer type
        return int(value)
    return value


def env_key(prefix: str, suffix: str) -> str:
    """
    Build the prefixed environment variable name for a field.

    Example:
        >>> env_key("TYL_POSTGRES", "pool_size")
        'TYL_POSTGRES_POOL_SIZE'
    """
    return f"{prefix}_{suffix.upper()}"
