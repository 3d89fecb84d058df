"""
Python-specific naming utilities.

Handles Python reserved words and the names of generated codec functions.
"""

from ...core.naming import TargetNaming


# Python reserved keywords
PYTHON_RESERVED_WORDS = {
    "False",
    "None",
    "True",
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
    # Names the generated API class relies on
    "self",
}


class PythonNaming(TargetNaming):
    """Identifiers for generated Python modules."""

    reserved_words = PYTHON_RESERVED_WORDS
    encoder_format = "encode_{}"
    decoder_format = "decode_{}"
