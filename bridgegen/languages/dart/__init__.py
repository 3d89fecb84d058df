"""
Dart binding generator.

Generates a Dart library with immutable classes, enums and sealed class
hierarchies plus an API class driven by the bridge runtime package.
"""

from .config import DartOptions
from .generator import DartGenerator, create_dart_generator
from .naming import DART_RESERVED_WORDS, DartNaming
from .types import DartTypeMapper

__all__ = [
    "DartGenerator",
    "create_dart_generator",
    "DartNaming",
    "DART_RESERVED_WORDS",
    "DartTypeMapper",
    "DartOptions",
]
