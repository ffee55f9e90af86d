"""
Error types for the configuration manager.

Every error raised while assembling a configuration carries the name of the
section it originated from, so a failure in a multi-section build can be
traced back to its source.
"""

from typing import Optional


class ExitCode:
    """Standard exit codes for CLI and pipeline integration."""
    SUCCESS = 0
    VALIDATION_FAILED = 1
    ENV_PARSE_ERROR = 2
    DESERIALIZATION_ERROR = 3
    CONFIGURATION_ERROR = 4
    UNKNOWN_ERROR = 99


class ConfigException(Exception):
    """Base exception for configuration errors."""

    def __init__(self, message: str, section: Optional[str] = None):
        self.section = section
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        if self.section:
            return f"[{self.section}] {self.message}"
        return self.message

    def attribute_to(self, section: str) -> "ConfigException":
        """Attach a section name to an error raised without one."""
        if self.section is None:
            self.section = section
            self.args = (self._format(),)
        return self


class DuplicateSectionError(ConfigException):
    """A second section was registered under an already-used name."""

    def __init__(self, section: str):
        super().__init__("section is already registered", section)


class DeserializationError(ConfigException):
    """A YAML node does not match the section's expected shape."""

    def __init__(self, message: str, section: Optional[str] = None, path: str = ""):
        self.path = path
        super().__init__(message, section)


class EnvParseError(ConfigException):
    """An environment value failed its field's textual parse."""

    def __init__(self, field: Optional[str], key: Optional[str], raw_value: Optional[str],
                 expected: Optional[str], section: Optional[str] = None,
                 message: Optional[str] = None):
        self.field = field
        self.key = key
        self.raw_value = raw_value
        self.expected = expected
        super().__init__(
            message or f"cannot parse {key}={raw_value!r} for field '{field}': expected {expected}",
            section
        )


class ValidationError(ConfigException):
    """A merged section violates one of its domain rules."""

    def __init__(self, field: str, reason: str, section: Optional[str] = None):
        self.field = field
        self.reason = reason
        super().__init__(f"{field} {reason}", section)
