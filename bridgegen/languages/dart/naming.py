"""
Dart-specific naming utilities.

Handles Dart reserved words, members every Dart object or enum already
has, and the names of the library-private codec functions.
"""

from ...core.naming import TargetNaming


# Dart keywords and built-in identifiers
DART_RESERVED_WORDS = {
    "abstract",
    "as",
    "assert",
    "async",
    "await",
    "base",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "covariant",
    "default",
    "deferred",
    "do",
    "dynamic",
    "else",
    "enum",
    "export",
    "extends",
    "extension",
    "external",
    "factory",
    "false",
    "final",
    "finally",
    "for",
    "Function",
    "get",
    "hide",
    "if",
    "implements",
    "import",
    "in",
    "interface",
    "is",
    "late",
    "library",
    "mixin",
    "new",
    "null",
    "on",
    "operator",
    "part",
    "required",
    "rethrow",
    "return",
    "sealed",
    "set",
    "show",
    "static",
    "super",
    "switch",
    "sync",
    "this",
    "throw",
    "true",
    "try",
    "typedef",
    "var",
    "void",
    "when",
    "while",
    "with",
    "yield",
    # Members of Object
    "hashCode",
    "noSuchMethod",
    "runtimeType",
    "toString",
}

# Members every Dart enum value already has
DART_ENUM_MEMBERS = {"index", "name", "values"}

# Types a generated library refers to unqualified
DART_CORE_TYPES = {
    "BigInt",
    "Future",
    "List",
    "Map",
    "Object",
    "String",
    "ArgumentError",
    # From the runtime package
    "BridgeTransport",
    "SourceError",
    "SourcePanic",
    "UnknownVariantTag",
    "WireFormatError",
}


# Runtime functions generated code calls unqualified
DART_RUNTIME_HELPERS = {
    "checkBool",
    "checkDouble",
    "checkInt",
    "checkList",
    "checkString",
    "checkUnit",
    "deepEquals",
    "deepHash",
    "dispatchAsync",
    "invokeSync",
    "listToWire",
    "mapToWire",
    "splitVariant",
    "u64ToWire",
    "wireToEnum",
    "wireToList",
    "wireToMap",
    "wireToU64",
}

# Names the generated `==` and `hashCode` refer to inside a class body
DART_EQUALITY_NAMES = {"deepEquals", "deepHash", "identical", "other"}


class DartNaming(TargetNaming):
    """Identifiers for generated Dart libraries."""

    reserved_words = DART_RESERVED_WORDS
    encoder_format = "_api2wire_{}"
    decoder_format = "_wire2api_{}"

    def member_name(self, name: str) -> str:
        identifier = super().member_name(name)
        if identifier in DART_ENUM_MEMBERS:
            escaped = f"{identifier}{self.sanitizer.suffix}"
            self.sanitizer.escaped.append((identifier, escaped))
            return escaped
        return identifier
