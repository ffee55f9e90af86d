"""
Utility functions module.

Provides helper functions for YAML loading, file handling and logging.
"""

from .helpers import load_yaml_text, mask_secret, safe_load_yaml, validate_file_exists, write_text_file
from .logger import get_logger, setup_logging, log_config_operation, log_config_error

__all__ = [
    "load_yaml_text",
    "mask_secret",
    "safe_load_yaml",
    "validate_file_exists",
    "write_text_file",
    "get_logger",
    "setup_logging",
    "log_config_operation",
    "log_config_error"
]
