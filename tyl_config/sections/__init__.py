"""
Built-in configuration sections.

Importing this package registers the sections for template generation.
"""

from .postgres import PostgresConfig
from .redis import RedisConfig

__all__ = ["PostgresConfig", "RedisConfig"]
