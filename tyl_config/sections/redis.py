"""Redis connection section."""

from dataclasses import dataclass
from typing import Optional

from ..config.errors import ValidationError
from ..config.plugin import SectionConfig, register_section, setting


@register_section
@dataclass
class RedisConfig(SectionConfig):
    """Redis configuration; ``TYL_REDIS_*`` wins over ``REDIS_*``."""

    name = "redis"
    env_prefix = "TYL_REDIS"

    url: Optional[str] = setting(None, fallbacks=("REDIS_URL",), secret=True)
    host: str = setting("localhost", fallbacks=("REDIS_HOST",))
    port: int = setting(6379, fallbacks=("REDIS_PORT",))
    password: Optional[str] = setting(None, fallbacks=("REDIS_PASSWORD",), secret=True)
    database: int = setting(0, fallbacks=("REDIS_DATABASE",))
    pool_size: int = 5
    timeout_seconds: int = 10

    def connection_url(self) -> str:
        if self.url:
            return self.url
        if self.password is not None:
            return f"redis://default:{self.password}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"

    def validate(self) -> None:
        if not self.host:
            raise ValidationError("host", "cannot be empty", self.name)
        if not 1 <= self.port <= 65535:
            raise ValidationError("port", f"must be between 1 and 65535, got {self.port}", self.name)
        if self.database < 0:
            raise ValidationError("database", "cannot be negative", self.name)
        if self.pool_size <= 0:
            raise ValidationError("pool_size", "must be greater than 0", self.name)
        if self.timeout_seconds < 0:
            raise ValidationError("timeout_seconds", "cannot be negative", self.name)
