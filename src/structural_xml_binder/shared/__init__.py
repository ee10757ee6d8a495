"""Shared utilities for structural XML binding.

This module provides configuration objects, result and diagnostic types, the
exception taxonomy and logging helpers used by every layer.
"""

from .config import (
    BinderConfig,
    BindingConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    MarkupConfig,
)
from .errors import (
    AmbiguousMutatorError,
    BindingError,
    ConstructionError,
    DepthExceededError,
    LeafValueError,
    MarkupParseError,
    NoSuchFieldError,
    TypeConflictError,
    UnsupportedContainerTypeError,
    UnsupportedGenericShapeError,
    UnsupportedLeafTypeError,
    UnresolvedAnnotationError,
    XMLBinderError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    BindingMetrics,
    BindResult,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "BinderConfig",
    "BindingConfig",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "MarkupConfig",
    "AmbiguousMutatorError",
    "BindingError",
    "ConstructionError",
    "DepthExceededError",
    "LeafValueError",
    "MarkupParseError",
    "NoSuchFieldError",
    "TypeConflictError",
    "UnsupportedContainerTypeError",
    "UnsupportedGenericShapeError",
    "UnsupportedLeafTypeError",
    "UnresolvedAnnotationError",
    "XMLBinderError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "BindingMetrics",
    "BindResult",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
