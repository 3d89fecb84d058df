"""
Language-specific binding generators.

This module contains generators for different target languages.
"""

from .dart import DartGenerator
from .python import PythonGenerator

__all__ = ["DartGenerator", "PythonGenerator"]
