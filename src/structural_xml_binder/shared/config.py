"""Configuration classes for structural XML binding.

This module provides configuration objects for the markup parser, the
structural binder and process-wide settings, composed into one immutable
``BinderConfig``.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

_COMPONENTS = ("markup", "binding", "global_")


@dataclass
class MarkupConfig:
    """Configuration for the lxml-backed markup parser."""

    strip_text: bool = True
    remove_blank_text: bool = True
    remove_comments: bool = True
    resolve_entities: bool = False
    huge_tree: bool = False
    encoding: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate markup configuration."""
        if self.encoding is not None and not self.encoding.strip():
            raise ValueError("encoding must be a non-empty string or None")


@dataclass
class BindingConfig:
    """Configuration for the structural binder traversal."""

    max_depth: int = 200
    camel_case_mutators: bool = True
    snake_case_mutators: bool = True
    attribute_mutators: bool = False
    empty_leaf_as_empty_container: bool = True

    def __post_init__(self) -> None:
        """Validate binding configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")
        if not (
            self.camel_case_mutators
            or self.snake_case_mutators
            or self.attribute_mutators
        ):
            raise ValueError("at least one mutator convention must be enabled")


@dataclass
class GlobalConfig:
    """Global settings that apply across all components."""

    logging_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class BinderConfig:
    """Complete configuration for parsing and binding.

    Immutable, so one instance can be shared by every binder in a process.
    """

    markup: MarkupConfig = field(default_factory=MarkupConfig)
    binding: BindingConfig = field(default_factory=BindingConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete binder configuration."""
        try:
            self.markup.__post_init__()
            self.binding.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "BinderConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, nested with ``component__field``

        Returns:
            New BinderConfig instance with overrides applied

        Example:
            >>> config = BinderConfig()
            >>> config.override(binding__max_depth=50).binding.max_depth
            50
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component = next(
                    (name for name in _COMPONENTS if key.startswith(name + "__")),
                    key.split("__", 1)[0],
                )
                field_name = key[len(component) + 2:]
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS:
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinderConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than ignored.
        """
        component_classes = {
            "markup": MarkupConfig,
            "binding": BindingConfig,
            "global_": GlobalConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_classes:
                try:
                    values[key] = component_classes[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "BinderConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict(cls) -> "BinderConfig":
        """Only ``setFoo`` mutators, no container shortcut for empty leaves."""
        return cls(
            binding=BindingConfig(
                camel_case_mutators=True,
                snake_case_mutators=False,
                attribute_mutators=False,
                empty_leaf_as_empty_container=False,
            ),
            name="strict",
            description="Conventional setter mutators only",
        )

    @classmethod
    def python_objects(cls) -> "BinderConfig":
        """Also bind onto annotated attributes of plain classes and dataclasses."""
        return cls(
            binding=BindingConfig(attribute_mutators=True),
            name="python_objects",
            description="Setter methods plus annotated public attributes",
        )

    @classmethod
    def lenient(cls) -> "BinderConfig":
        """Attribute mutators, deeper nesting and very large documents."""
        return cls(
            markup=MarkupConfig(huge_tree=True),
            binding=BindingConfig(attribute_mutators=True, max_depth=300),
            name="lenient",
            description="Attribute mutators and large documents",
        )
