"""Command-line interface for structural XML binding.

Provides the xml-bind tool for binding XML files onto Python classes and for
inspecting the fields the binder discovers on a class.
"""

from .main import main

__all__ = ["main"]
