"""
PostgreSQL connection section.

Environment precedence per field: ``TYL_POSTGRES_*`` first, then the
standard libpq variables (``PGHOST``, ``PGPORT``, ...). A full connection
URL may be given instead of the individual components.
"""

from dataclasses import dataclass
from typing import Optional

from ..config.errors import ValidationError
from ..config.plugin import SectionConfig, register_section, setting


@register_section
@dataclass
class PostgresConfig(SectionConfig):
    """PostgreSQL configuration with sensible development defaults."""

    name = "postgres"
    env_prefix = "TYL_POSTGRES"

    url: Optional[str] = setting(None, fallbacks=("TYL_DATABASE_URL", "DATABASE_URL", "POSTGRES_URL"),
                                 secret=True)
    host: str = setting("localhost", fallbacks=("PGHOST",))
    port: int = setting(5432, fallbacks=("PGPORT",))
    database: str = setting("app_dev", fallbacks=("PGDATABASE",))
    username: str = setting("postgres", fallbacks=("TYL_POSTGRES_USER", "PGUSER"))
    password: str = setting("password", fallbacks=("PGPASSWORD",), secret=True)
    pool_size: int = 10
    timeout_seconds: int = 30

    def connection_url(self) -> str:
        """Connection URL, preferring an explicit URL over the components."""
        if self.url:
            return self.url
        return (
            f"postgresql://{self.username}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    def validate(self) -> None:
        if not 1 <= self.port <= 65535:
            raise ValidationError("port", f"must be between 1 and 65535, got {self.port}", self.name)
        if self.pool_size <= 0:
            raise ValidationError("pool_size", "must be greater than 0", self.name)
        if self.timeout_seconds < 0:
            raise ValidationError("timeout_seconds", "cannot be negative", self.name)

        # A connection URL makes the individual components optional
        if self.url:
            return

        if not self.host:
            raise ValidationError("host", "cannot be empty", self.name)
        if not self.database:
            raise ValidationError("database", "cannot be empty", self.name)
        if not self.username:
            raise ValidationError("username", "cannot be empty", self.name)
        if not self.password:
            raise ValidationError("password", "cannot be empty (required when not using DATABASE_URL)", self.name)
