"""
JSON Schema management for section YAML nodes.

This module derives a JSON schema from each section's declared fields and
validates YAML nodes against it before a section is constructed, turning
schema violations into DeserializationError with a readable location.
"""

from typing import Any, Dict, Type

import jsonschema
from jsonschema import Draft7Validator

from .errors import DeserializationError
from ..utils.logger import get_logger


class SchemaManager:
    """
    Builds, caches and applies JSON schemas for configuration sections.

    Schemas are keyed by section class. A section class may supply its own
    schema by overriding ``yaml_schema``; otherwise one is derived from its
    field declarations.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._schema_cache: Dict[type, Dict[str, Any]] = {}

    def load_schema(self, section_cls: Type[Any]) -> Dict[str, Any]:
        """
        Get the JSON schema of a section class with caching.

        Args:
            section_cls: Section class exposing a ``yaml_schema`` classmethod

        Returns:
            JSON schema as dictionary

        Raises:
            jsonschema.SchemaError: If the section supplies an invalid schema

        Example:
            >>> manager = SchemaManager()
            >>> schema = manager.load_schema(PostgresConfig)
            >>> schema["properties"]["port"]
            {'type': 'integer'}
        """
        if section_cls in self._schema_cache:
            return self._schema_cache[section_cls]

        schema = section_cls.yaml_schema()

        try:
            Draft7Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise jsonschema.SchemaError(f"Invalid JSON schema for {section_cls.__name__}: {e.message}")

        self._schema_cache[section_cls] = schema
        self.logger.debug(f"Loaded schema: {section_cls.__name__}")

        return schema

    def validate_against_schema(self, data: Any, schema: Dict[str, Any], section: str) -> None:
        """
        Validate a YAML node against a JSON schema.

        Args:
            data: YAML node to validate
            schema: JSON schema to validate against
            section: Section name used for error attribution

        Raises:
            DeserializationError: If data doesn't match schema

        Example:
            >>> manager = SchemaManager()
            >>> schema = manager.load_schema(PostgresConfig)
            >>> manager.validate_against_schema({"port": "x"}, schema, "postgres")
            Traceback (most recent call last):
            ...
            DeserializationError: [postgres] Value at 'port' ...
        """
        try:
            validator = Draft7Validator(schema)
            validator.validate(data)

        except jsonschema.ValidationError as e:
            # Create more user-friendly error message
            path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"

            error_msg = f"Validation failed at '{path}': {e.message}"

            if e.validator == "required":
                error_msg = f"Missing required fields at '{path}': {e.message}"
            elif e.validator == "type":
                error_msg = f"Value at '{path}' must be of type {e.validator_value}, got {data_repr(e.instance)}"
            elif e.validator == "enum":
                error_msg = f"Value at '{path}' must be one of: {e.validator_value}"

            raise DeserializationError(error_msg, section=section, path=path) from e

    def validate_section_node(self, section_cls: Type[Any], node: Any, section: str) -> None:
        """
        Validate a section's YAML node against that section's schema.

        Args:
            section_cls: Section class the node belongs to
            node: YAML node
            section: Section name used for error attribution

        Raises:
            DeserializationError: If validation fails
        """
        schema = self.load_schema(section_cls)
        self.validate_against_schema(node, schema, section)
        self.logger.debug(f"Section '{section}' YAML node validation passed")


def data_repr(value: Any) -> str:
    """Short description of a YAML value for error messages."""
    return f"{type(value).__name__} {value!r}"


schema_manager = SchemaManager()
