"""
Python binding generator module.

Generates dataclasses, enums, codecs and an API class that talk to the
source side through a caller-supplied transport.
"""

from .config import PythonOptions
from .generator import PythonGenerator, create_python_generator
from .naming import PYTHON_RESERVED_WORDS, PythonNaming
from .types import PythonTypeMapper

__all__ = [
    # Generator
    "PythonGenerator",
    "create_python_generator",
    # Naming
    "PythonNaming",
    "PYTHON_RESERVED_WORDS",
    # Types and configuration
    "PythonTypeMapper",
    "PythonOptions",
]
