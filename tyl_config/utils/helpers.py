"""
Helper utility functions for configuration management.

This module provides the file-facing helpers used around the configuration
core: YAML file and text loading, file validation and secret masking.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml


def load_yaml_text(text: str, source: str = "<string>") -> Dict[str, Any]:
    """
    Parse YAML text into a top-level mapping.

    An empty document yields an empty dictionary.

    Args:
        text: YAML document text
        source: Human-readable origin used in error messages

    Returns:
        Parsed YAML content as dictionary

    Raises:
        yaml.YAMLError: If the text is not valid YAML
        ValueError: If the document is not a mapping

    Example:
        >>> load_yaml_text("postgres:\\n  port: 5433\\n")
        {'postgres': {'port': 5433}}
    """
    try:
        content = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in {source}: {str(e)}")

    if content is None:
        return {}

    if not isinstance(content, dict):
        raise ValueError(f"YAML document must contain a dictionary, got {type(content).__name__}: {source}")

    return content


def safe_load_yaml(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Safely load YAML file with proper error handling.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML content as dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If file contains invalid YAML
        ValueError: If file content is not a dictionary
    """
    file_path = Path(file_path)
    validate_file_exists(file_path, "YAML file")

    with open(file_path, 'r', encoding='utf-8') as file:
        return load_yaml_text(file.read(), str(file_path))


def validate_file_exists(file_path: Path, description: str) -> None:
    """
    Validate that a file exists and provide helpful error message.

    Args:
        file_path: Path to validate
        description: Human-readable description for error message

    Raises:
        FileNotFoundError: If file doesn't exist with descriptive message
    """
    if not file_path.exists():
        raise FileNotFoundError(
            f"{description} not found at '{file_path}'. "
            f"Please check the path and ensure the file exists."
        )

    if not file_path.is_file():
        raise FileNotFoundError(
            f"Expected a file but found directory at '{file_path}'. "
            f"Please check the path."
        )


def write_text_file(file_path: Union[str, Path], content: str) -> Path:
    """
    Write text to a file, creating parent directories as needed.

    Args:
        file_path: Destination path
        content: Text to write

    Returns:
        The resolved destination path

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        raise OSError(f"Failed to write config file {path}: {str(e)}")
    return path


def mask_secret(value: Any) -> str:
    """Render a secret value for display without revealing it."""
    if value is None:
        return "None"
    return "********" if str(value) else ""
