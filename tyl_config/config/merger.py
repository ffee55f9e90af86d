"""
Precedence merger for configuration sections.

Produces the final value of one section from its default instance, an
optional YAML node and an environment snapshot, applying

    environment > YAML > default

per field, then validating the result. Each stage fails fast with an
error attributed to the section.
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar

from .environment import EnvironmentSnapshot
from .errors import ConfigException, DeserializationError, EnvParseError, ValidationError
from .plugin import ConfigPlugin
from ..utils.logger import get_logger, log_config_error, log_config_operation

MISSING = object()

T = TypeVar("T", bound=ConfigPlugin)


class PrecedenceMerger:
    """
    Merges sections against one environment snapshot.

    The snapshot is fixed at construction so every section merged by the
    same merger sees the same environment.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        """
        Initialize the merger.

        Args:
            env: Environment mapping; an empty environment when omitted
        """
        self.env = env if isinstance(env, EnvironmentSnapshot) else EnvironmentSnapshot(env)
        self.logger = get_logger(__name__)

    def merge(self, default: ConfigPlugin, yaml_node: Any = MISSING) -> ConfigPlugin:
        """
        Produce the fully merged and validated value of one section.

        Args:
            default: Registered default/initial instance; never mutated
            yaml_node: The section's YAML node, or MISSING when the document
                has no entry for the section

        Returns:
            A new section instance holding the merged values

        Raises:
            DeserializationError: If the YAML node does not fit the section
            EnvParseError: If an environment value cannot be parsed
            ValidationError: If the merged values break a domain rule

        Example:
            >>> merger = PrecedenceMerger({"TYL_POSTGRES_PORT": "5555"})
            >>> merger.merge(PostgresConfig(), {"port": 5433}).port
            5555
        """
        name = default.name

        if yaml_node is not MISSING:
            section = self._run_stage(
                "DESERIALIZE", name, DeserializationError,
                lambda: type(default).from_yaml(yaml_node)
            )
        else:
            section = default.clone()

        self._run_stage("MERGE_ENV", name, EnvParseError, lambda: section.merge_env(self.env))
        self._run_stage("VALIDATE", name, ValidationError, section.validate)

        log_config_operation(
            self.logger, "MERGE",
            f"section='{name}', yaml={'yes' if yaml_node is not MISSING else 'no'}, "
            f"prefixed_env_vars={len(self.env.with_prefix(default.env_prefix))}",
            level=logging.DEBUG
        )
        return section

    def _run_stage(self, operation: str, section: str, error_type: type, action) -> Any:
        try:
            return action()
        except ConfigException as e:
            e.attribute_to(section)
            log_config_error(self.logger, operation, e, f"section='{section}'")
            raise
        except Exception as e:
            # Foreign exceptions from user plugins become the stage's error type
            wrapped = self._wrap(error_type, section, e)
            log_config_error(self.logger, operation, wrapped, f"section='{section}'")
            raise wrapped from e

    @staticmethod
    def _wrap(error_type: type, section: str, error: Exception) -> ConfigException:
        message = f"{type(error).__name__}: {error}"
        if error_type is ValidationError:
            return ValidationError("section", f"failed validation ({message})", section)
        if error_type is EnvParseError:
            return EnvParseError(None, None, None, None, section,
                                 message=f"environment merge failed ({message})")
        return DeserializationError(message, section=section)


def load_from_env_or_default(section_cls: Type[T], env: Optional[Mapping[str, str]] = None) -> T:
    """
    Build one section from its defaults and the environment, validated.

    Args:
        section_cls: Section class to build
        env: Environment mapping; an empty environment when omitted

    Raises:
        EnvParseError: If an environment value cannot be parsed
        ValidationError: If the result breaks a domain rule
    """
    return PrecedenceMerger(env).merge(section_cls.defaults())
