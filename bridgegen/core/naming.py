"""
Naming utilities for safe code generation.

Handles case conversion, reserved-word escaping and name-collision
detection. Identifiers are never renamed to dodge a collision: two
declarations that map to the same identifier fail the run instead.
"""

import re
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..logging_config import get_logger
from .errors import NameCollision

logger = get_logger(__name__)


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Optional[Set[str]] = None, suffix: str = "_"):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            suffix: Suffix appended to identifiers that hit a reserved word
        """
        self.reserved_words = reserved_words or set()
        self.suffix = suffix
        self._name_cache: Dict[Tuple[str, NamingCase], str] = {}
        self.escaped: List[Tuple[str, str]] = []

    def sanitize_name(self, name: str, target_case: NamingCase) -> str:
        """
        Convert a source name into a safe identifier of the target case.

        Args:
            name: Original name to sanitize
            target_case: Desired case style

        Returns:
            Identifier, with ``suffix`` appended if it is a reserved word
        """
        cache_key = (name, target_case)
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        converted = self.clean_case(name, target_case)
        final_name = self.escape_reserved(converted)

        self._name_cache[cache_key] = final_name
        return final_name

    def escape_reserved(self, identifier: str) -> str:
        """Append the suffix to a reserved identifier and remember the change."""
        if identifier in self.reserved_words:
            escaped = f"{identifier}{self.suffix}"
            self.escaped.append((identifier, escaped))
            logger.debug("Escaped reserved identifier %s as %s", identifier, escaped)
            return escaped
        return identifier

    def clean_case(self, name: str, target_case: NamingCase) -> str:
        """Case-convert ``name`` after replacing characters no identifier may hold."""
        return self.convert_case(self._clean_basic(name), target_case)

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_]", "_", name)
        cleaned = cleaned.strip("_")

        if not cleaned:
            cleaned = "field"

        return cleaned

    def convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            converted = self._to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            converted = self._to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            converted = self._to_pascal_case(name)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            converted = self._to_snake_case(name).upper()
        else:
            converted = name

        # Identifiers cannot start with a digit
        if converted and converted[0].isdigit():
            converted = f"_{converted}"
        return converted

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        # Split acronyms ("HTTPServer" -> "HTTP_Server") and camel humps
        name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
        name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)

        name = name.lower()
        name = re.sub(r"_+", "_", name)

        return name.strip("_")

    def _to_camel_case(self, name: str) -> str:
        """Convert to camelCase."""
        parts = self._to_snake_case(name).split("_")
        return parts[0] + "".join(part.capitalize() for part in parts[1:])

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        parts = self._to_snake_case(name).split("_")
        return "".join(part.capitalize() for part in parts if part)


class NameRegistry:
    """Tracks which declarations claim which identifier in each scope."""

    def __init__(self):
        self._claims: Dict[str, Dict[str, List[str]]] = {}

    def claim(self, scope: str, identifier: str, owner: str):
        """Record that ``owner`` emits ``identifier`` into ``scope``."""
        self._claims.setdefault(scope, {}).setdefault(identifier, []).append(owner)

    def claim_all(self, claims: Iterable[Tuple[str, str, str]]):
        for scope, identifier, owner in claims:
            self.claim(scope, identifier, owner)

    def collisions(self) -> List[Tuple[str, str, List[str]]]:
        """Every identifier claimed more than once, in first-claim order."""
        found = []
        for scope, identifiers in self._claims.items():
            for identifier, owners in identifiers.items():
                if len(owners) > 1:
                    found.append((scope, identifier, owners))
        return found

    def check(self):
        """
        Raises:
            NameCollision: if any identifier has more than one owner
        """
        collisions = self.collisions()
        if collisions:
            for scope, identifier, owners in collisions:
                logger.error(
                    "Name collision on %s in %s: %s", identifier, scope, ", ".join(owners)
                )
            raise NameCollision(collisions)


class TargetNaming:
    """Maps source names to target identifiers for one generation run.

    Language packages subclass this to supply reserved words and the
    naming pattern of generated codec procedures.
    """

    reserved_words: Set[str] = set()
    encoder_format = "encode_{}"
    decoder_format = "decode_{}"

    def __init__(self, config):
        self.config = config
        self.sanitizer = NameSanitizer(self.reserved_words)
        self.type_case = NamingCase(config.type_case)
        self.field_case = NamingCase(config.field_case)
        self.function_case = NamingCase(config.function_case)
        self.member_case = NamingCase(config.member_case)

    def type_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, self.type_case)

    def field_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, self.field_case)

    def param_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, self.field_case)

    def function_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, self.function_case)

    def member_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, self.member_case)

    def case_name(self, enum_name: str, variant_name: str) -> str:
        """Name of the case type emitted for one variant of a tagged union."""
        clean = self.sanitizer.clean_case
        joined = clean(enum_name, self.type_case) + clean(variant_name, NamingCase.PASCAL_CASE)
        return self.sanitizer.escape_reserved(joined)

    def encoder_name(self, type_name: str) -> str:
        stem = self.sanitizer.clean_case(type_name, NamingCase.SNAKE_CASE)
        return self.encoder_format.format(stem)

    def decoder_name(self, type_name: str) -> str:
        stem = self.sanitizer.clean_case(type_name, NamingCase.SNAKE_CASE)
        return self.decoder_format.format(stem)

    def api_class_name(self, module: str) -> str:
        if self.config.api_class_name:
            return self.config.api_class_name
        # Module paths such as `crate::api` are not identifiers
        return self.sanitizer.clean_case(f"{module}_bindings", NamingCase.PASCAL_CASE)

    def wire_name(self, function: str) -> str:
        stem = self.sanitizer.clean_case(function, NamingCase.SNAKE_CASE)
        return f"{self.config.wire_prefix}{stem}"

    def warnings(self) -> List[str]:
        """One warning per reserved identifier that had to be escaped."""
        seen = dict.fromkeys(self.sanitizer.escaped)
        return [
            f"`{original}` is a reserved word; emitted as `{escaped}`"
            for original, escaped in seen
        ]
