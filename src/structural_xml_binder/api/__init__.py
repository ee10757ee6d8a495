"""Public API for structural XML binding."""

from .binder import (
    bind,
    bind_detailed,
    bind_element,
    bind_file,
    bind_string,
    populate,
)

__all__ = [
    "bind",
    "bind_detailed",
    "bind_element",
    "bind_file",
    "bind_string",
    "populate",
]
