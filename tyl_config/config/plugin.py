"""
Configuration section plugin contract.

A configuration section is one independently validated unit of settings
(database connection, cache connection, a service's own options). Every
section implements ``ConfigPlugin`` so the manager can load, override,
validate and emit it without knowing its concrete type.

Most sections are plain dataclasses deriving from ``SectionConfig``, which
implements environment merging and YAML (de)serialization from the field
declarations:

    @register_section
    @dataclass
    class ApiConfig(SectionConfig):
        name = "api"
        env_prefix = "TYL_API"

        api_key: str = setting("dev-key", secret=True)
        timeout_ms: int = 5000

        def validate(self) -> None:
            if not self.api_key:
                raise ValidationError("api_key", "cannot be empty", self.name)

Field values come from three sources, highest precedence first: the
environment (``TYL_API_TIMEOUT_MS``), the section's YAML node, and the
dataclass defaults.
"""

import copy
import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, get_type_hints

from .codec import env_key, format_env_value, json_schema_for, normalize_yaml_value, parse_env_value, unwrap_optional
from .errors import DeserializationError, DuplicateSectionError, EnvParseError
from .schema import schema_manager

T = TypeVar("T", bound="ConfigPlugin")

_FROZEN_FLAG = "_frozen"
_SOURCES_ATTR = "_field_sources"
_SPECS_ATTR = "_field_specs"


class ConfigSource(Enum):
    """Origin of a field's final value; ENVIRONMENT overrides YAML, which overrides DEFAULT."""
    DEFAULT = "default"
    YAML = "yaml"
    ENVIRONMENT = "environment"


class ConfigPlugin(ABC):
    """
    Capability set every configuration section implements.

    Subclasses set the ``name`` and ``env_prefix`` class attributes. Names
    key the manager's registry and attribute errors; prefixes namespace the
    section's environment variables and must be unique per section.
    """

    name: ClassVar[str] = ""
    env_prefix: ClassVar[str] = ""

    def __setattr__(self, key: str, value: Any) -> None:
        if self.__dict__.get(_FROZEN_FLAG):
            raise dataclasses.FrozenInstanceError(
                f"cannot assign to field '{key}' of frozen section '{self.name}'"
            )
        super().__setattr__(key, value)

    @abstractmethod
    def validate(self) -> None:
        """
        Check domain invariants of the merged values.

        Raises:
            ValidationError: If a rule is violated
        """

    @abstractmethod
    def merge_env(self, env: Mapping[str, str]) -> None:
        """
        Overwrite, in place, every field whose environment key is present.

        Fields without a matching key keep their current value. Running it
        twice against the same environment gives the same result.

        Raises:
            EnvParseError: If a present value cannot be parsed
        """

    @abstractmethod
    def to_yaml_value(self) -> Any:
        """Return the YAML representation of the current field values."""

    @classmethod
    @abstractmethod
    def from_yaml(cls: Type[T], node: Any) -> T:
        """
        Construct a section from its YAML node.

        Raises:
            DeserializationError: If required fields are missing or mistyped
        """

    @classmethod
    def defaults(cls: Type[T]) -> T:
        """Build the section from its compiled-in defaults."""
        return cls()

    @classmethod
    def defaultable(cls) -> bool:
        """Whether ``defaults()`` can build the section without any input."""
        return True

    @classmethod
    def template_node(cls) -> Any:
        """YAML node documenting the section in a generated template."""
        return cls.defaults().to_yaml_value()

    @classmethod
    def load_from_env(cls: Type[T], env: Mapping[str, str]) -> T:
        """Build the section from its defaults overridden by the environment."""
        config = cls.defaults()
        config.merge_env(env)
        return config

    def clone(self: T) -> T:
        """Return an independent, unfrozen copy of this section."""
        duplicate = copy.deepcopy(self)
        duplicate.__dict__.pop(_FROZEN_FLAG, None)
        return duplicate

    def freeze(self) -> None:
        """Reject any further assignment to this section's attributes."""
        self.__dict__[_FROZEN_FLAG] = True

    @property
    def frozen(self) -> bool:
        return bool(self.__dict__.get(_FROZEN_FLAG))

    @property
    def field_sources(self) -> Dict[str, ConfigSource]:
        """Source of each field's value, where the section tracks it."""
        return dict(self.__dict__.get(_SOURCES_ATTR, {}))

    @classmethod
    def env_keys(cls) -> Dict[str, Tuple[str, ...]]:
        """Environment variables each field reads, highest precedence first."""
        return {}

    def _mark_source(self, field: str, source: ConfigSource) -> None:
        self.__dict__.setdefault(_SOURCES_ATTR, {})[field] = source


@dataclass(frozen=True)
class FieldSpec:
    """Declaration of one section field as seen by the codec."""
    name: str
    type: type
    nullable: bool
    env_suffix: str
    fallbacks: Tuple[str, ...]
    secret: bool
    required: bool
    default: Any

    def keys(self, prefix: str) -> Tuple[str, ...]:
        """Environment keys for this field, prefixed key first."""
        return (env_key(prefix, self.env_suffix),) + self.fallbacks


def setting(default: Any = dataclasses.MISSING, *, env: Optional[str] = None,
            fallbacks: Tuple[str, ...] = (), secret: bool = False) -> Any:
    """
    Declare a section field with environment metadata.

    Args:
        default: Default value; omit to make the field required in YAML
        env: Environment suffix, defaults to the upper-cased field name
        fallbacks: Unprefixed keys consulted when the prefixed key is absent,
            highest precedence first
        secret: Hide the value in repr and CLI output

    Returns:
        A dataclasses.field carrying the metadata

    Example:
        >>> host: str = setting("localhost", fallbacks=("PGHOST",))
    """
    metadata = {"env": env, "fallbacks": tuple(fallbacks), "secret": secret}
    return dataclasses.field(default=default, metadata=metadata, repr=not secret)


class SectionConfig(ConfigPlugin):
    """
    Dataclass-driven section base.

    Implements ``merge_env``, ``to_yaml_value`` and ``from_yaml`` from the
    subclass's dataclass fields; subclasses only add ``validate``.
    """

    @classmethod
    def field_specs(cls) -> Tuple[FieldSpec, ...]:
        if _SPECS_ATTR in cls.__dict__:
            return cls.__dict__[_SPECS_ATTR]

        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass to derive from SectionConfig")

        hints = get_type_hints(cls)
        specs = []
        for f in dataclasses.fields(cls):
            field_type, nullable = unwrap_optional(hints[f.name])
            required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            default = None if f.default is dataclasses.MISSING else f.default
            specs.append(FieldSpec(
                name=f.name,
                type=field_type,
                nullable=nullable,
                env_suffix=f.metadata.get("env") or f.name,
                fallbacks=tuple(f.metadata.get("fallbacks", ())),
                secret=bool(f.metadata.get("secret", False)),
                required=required,
                default=default,
            ))

        result = tuple(specs)
        setattr(cls, _SPECS_ATTR, result)
        return result

    @classmethod
    def yaml_schema(cls) -> Dict[str, Any]:
        """JSON schema a YAML node for this section must satisfy."""
        specs = cls.field_specs()
        schema: Dict[str, Any] = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "properties": {spec.name: json_schema_for(spec.type, spec.nullable) for spec in specs},
        }
        required = [spec.name for spec in specs if spec.required]
        if required:
            schema["required"] = required
        return schema

    @classmethod
    def defaultable(cls) -> bool:
        if cls.defaults.__func__ is not ConfigPlugin.defaults.__func__:
            return True
        return not any(spec.required for spec in cls.field_specs())

    @classmethod
    def template_node(cls) -> Dict[str, Any]:
        """
        YAML node documenting the section in a generated template.

        Sections that cannot be built from defaults get a placeholder node:
        the declared defaults plus ``null`` for every required field.
        """
        if cls.defaultable():
            return cls.defaults().to_yaml_value()

        node = {}
        for spec in cls.field_specs():
            if spec.required:
                node[spec.name] = None
            elif spec.default is not None:
                node[spec.name] = spec.default
        return node

    @classmethod
    def from_yaml(cls, node: Any) -> "SectionConfig":
        if node is None:
            node = {}

        schema_manager.validate_section_node(cls, node, cls.name)

        values = {
            spec.name: normalize_yaml_value(node[spec.name], spec.type)
            for spec in cls.field_specs()
            if spec.name in node
        }
        try:
            section = cls(**values)
        except (TypeError, ValueError) as e:
            raise DeserializationError(str(e), section=cls.name) from e

        for field_name in values:
            section._mark_source(field_name, ConfigSource.YAML)
        return section

    def to_yaml_value(self) -> Dict[str, Any]:
        node = {}
        for spec in self.field_specs():
            value = getattr(self, spec.name)
            if value is None and spec.default is None:
                continue
            node[spec.name] = value
        return node

    def merge_env(self, env: Mapping[str, str]) -> None:
        for spec in self.field_specs():
            for key in spec.keys(self.env_prefix):
                if key not in env:
                    continue
                try:
                    value = parse_env_value(spec.name, key, env[key], spec.type)
                except EnvParseError as e:
                    raise e.attribute_to(self.name)
                setattr(self, spec.name, value)
                self._mark_source(spec.name, ConfigSource.ENVIRONMENT)
                break

    def to_env(self) -> Dict[str, str]:
        """
        Flat environment representation of the current values.

        Example:
            >>> PostgresConfig().to_env()["TYL_POSTGRES_PORT"]
            '5432'
        """
        env = {}
        for spec in self.field_specs():
            value = getattr(self, spec.name)
            if value is None:
                continue
            env[spec.keys(self.env_prefix)[0]] = format_env_value(value)
        return env

    @classmethod
    def env_keys(cls) -> Dict[str, Tuple[str, ...]]:
        return {spec.name: spec.keys(cls.env_prefix) for spec in cls.field_specs()}

    @property
    def field_sources(self) -> Dict[str, ConfigSource]:
        marked = self.__dict__.get(_SOURCES_ATTR, {})
        return {spec.name: marked.get(spec.name, ConfigSource.DEFAULT) for spec in self.field_specs()}

    def secret_fields(self) -> List[str]:
        return [spec.name for spec in self.field_specs() if spec.secret]


_SECTION_REGISTRY: Dict[str, Type[ConfigPlugin]] = {}


def register_section(cls: Type[T]) -> Type[T]:
    """
    Class decorator making a section known to template generation.

    Raises:
        DuplicateSectionError: If a different class already uses the name
    """
    if not cls.name:
        raise ValueError(f"{cls.__name__} must define a section name")

    existing = _SECTION_REGISTRY.get(cls.name)
    if existing is not None and existing.__qualname__ != cls.__qualname__:
        raise DuplicateSectionError(cls.name)

    _SECTION_REGISTRY[cls.name] = cls
    return cls


def unregister_section(name: str) -> None:
    _SECTION_REGISTRY.pop(name, None)


def available_sections() -> List[Type[ConfigPlugin]]:
    """All registered section classes in registration order."""
    return list(_SECTION_REGISTRY.values())
