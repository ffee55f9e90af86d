"""
Configuration management module.

Provides the section plugin contract, the precedence merger and the
configuration manager that assembles sections from defaults, YAML and the
environment.
"""

from .errors import (
    ConfigException, DeserializationError, DuplicateSectionError, EnvParseError, ExitCode, ValidationError
)
from .environment import EnvironmentSnapshot
from .plugin import (
    ConfigPlugin, ConfigSource, SectionConfig, available_sections, register_section, setting, unregister_section
)
from .merger import MISSING, PrecedenceMerger, load_from_env_or_default
from .schema import SchemaManager
from .manager import ConfigManager, ConfigManagerBuilder

__all__ = [
    "ConfigException",
    "DeserializationError",
    "DuplicateSectionError",
    "EnvParseError",
    "ExitCode",
    "ValidationError",
    "EnvironmentSnapshot",
    "ConfigPlugin",
    "ConfigSource",
    "SectionConfig",
    "available_sections",
    "register_section",
    "setting",
    "unregister_section",
    "MISSING",
    "PrecedenceMerger",
    "load_from_env_or_default",
    "SchemaManager",
    "ConfigManager",
    "ConfigManagerBuilder",
]
