"""Structural XML Binder.

Binds XML documents onto instances of plain Python classes by walking the
element tree and the object graph together: child elements name the fields
to set, leaf text is coerced to the declared field type, and repeated
elements fill list or set fields.

Progressive API Disclosure:
- Level 1: Simple functions - bind(), bind_string(), bind_file()
- Level 2: Configured binder - StructuralBinder class with BinderConfig
- Level 3: Custom policies - BindingPolicy subclasses, MappingPolicy
- Level 4: Explicit mutators - DescriptorRegistry.register_field()
"""

__version__ = "0.1.0"
__author__ = "Structural XML Binder Team"

# Progressive API disclosure - Level 1: Simple functions
from .api import bind, bind_detailed, bind_element, bind_file, bind_string, populate

# Progressive API disclosure - Levels 2-4: Binder, policies and registry
from .binding import (
    DECLINED,
    BindingPolicy,
    DescriptorRegistry,
    Int32,
    Int64,
    MappingPolicy,
    SortedUniqueSet,
    StructuralBinder,
)

# Markup tree for callers that parse once and bind many times
from .markup import Element, parse, parse_file, parse_string

# Configuration, results and errors
from .shared import (
    AmbiguousMutatorError,
    BinderConfig,
    BindingConfig,
    BindingError,
    BindResult,
    ConstructionError,
    DepthExceededError,
    GlobalConfig,
    LeafValueError,
    MarkupConfig,
    MarkupParseError,
    NoSuchFieldError,
    TypeConflictError,
    UnsupportedContainerTypeError,
    UnsupportedGenericShapeError,
    UnsupportedLeafTypeError,
    UnresolvedAnnotationError,
    XMLBinderError,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple binding functions
    "bind",
    "bind_detailed",
    "bind_element",
    "bind_file",
    "bind_string",
    "populate",

    # Level 2-4: Binder, policies, registry
    "StructuralBinder",
    "BindingPolicy",
    "MappingPolicy",
    "DECLINED",
    "DescriptorRegistry",
    "SortedUniqueSet",
    "Int32",
    "Int64",

    # Markup tree
    "Element",
    "parse",
    "parse_file",
    "parse_string",

    # Configuration and results
    "BinderConfig",
    "BindingConfig",
    "GlobalConfig",
    "MarkupConfig",
    "BindResult",

    # Errors
    "XMLBinderError",
    "MarkupParseError",
    "BindingError",
    "AmbiguousMutatorError",
    "ConstructionError",
    "DepthExceededError",
    "LeafValueError",
    "NoSuchFieldError",
    "TypeConflictError",
    "UnsupportedContainerTypeError",
    "UnsupportedGenericShapeError",
    "UnsupportedLeafTypeError",
    "UnresolvedAnnotationError",
]
