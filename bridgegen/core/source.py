"""
Source model handed over by the parser front-end.

The front-end describes a module as a list of declarations in source order.
Type expressions stay in the source language's syntax (``Vec<Option<u32>>``)
and are parsed here into small :class:`TypeExpr` trees for the classifier.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..logging_config import get_logger
from .errors import SourceError

logger = get_logger(__name__)


class ExprKind(Enum):
    """Syntactic category of a type expression."""

    PATH = "path"  # Name or Name<Args>
    UNIT = "unit"  # ()
    TUPLE = "tuple"  # (A, B)
    POINTER = "pointer"  # *const T / *mut T
    REFERENCE = "reference"  # &T / &mut T
    DYN = "dyn"  # dyn Trait
    IMPL = "impl"  # impl Trait
    ARRAY = "array"  # [T; N] / [T]
    FN = "fn"  # fn(A) -> B


class TypeSyntaxError(ValueError):
    """A type expression could not be parsed."""

    pass


@dataclass(frozen=True)
class TypeExpr:
    """Parsed type expression."""

    kind: ExprKind
    text: str
    name: str = ""  # last path segment for PATH, e.g. "HashMap"
    args: Tuple["TypeExpr", ...] = ()

    @classmethod
    def parse(cls, text: str) -> "TypeExpr":
        """Parse a type expression written in source syntax."""
        parser = _TypeParser(text)
        expr = parser.parse_type()
        parser.expect_end()
        return expr

    def __str__(self) -> str:
        return self.text


_TOKEN_RE = re.compile(
    r"\s*(?:(?P<ident>[A-Za-z_][A-Za-z0-9_]*(?:\s*::\s*[A-Za-z_][A-Za-z0-9_]*)*)"
    r"|(?P<number>\d+)|(?P<arrow>->)|(?P<punct>[<>(),;&*\[\]'])"
    r")"
)


class _TypeParser:
    """Recursive-descent parser over a flat token list."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    def _tokenize(self, text: str) -> List[str]:
        tokens = []
        pos = 0
        while pos < len(text):
            if text[pos:].strip() == "":
                break
            match = _TOKEN_RE.match(text, pos)
            if not match or match.end() == pos:
                raise TypeSyntaxError(f"unexpected character {text[pos:].strip()[0]!r}")
            token = match.group(match.lastgroup)
            if match.lastgroup == "ident":
                token = re.sub(r"\s+", "", token)
            tokens.append(token)
            pos = match.end()
        if not tokens:
            raise TypeSyntaxError("empty type expression")
        return tokens

    def peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise TypeSyntaxError("unexpected end of type expression")
        self.pos += 1
        return token

    def expect(self, token: str):
        got = self.take()
        if got != token:
            raise TypeSyntaxError(f"expected {token!r}, got {got!r}")

    def expect_end(self):
        if self.peek() is not None:
            raise TypeSyntaxError(f"unexpected trailing {self.peek()!r}")

    def parse_type(self) -> TypeExpr:
        start = self.pos
        token = self.take()

        if token == "*":
            qualifier = self.take()
            if qualifier not in ("const", "mut"):
                raise TypeSyntaxError("raw pointer needs `const` or `mut`")
            inner = self.parse_type()
            return TypeExpr(ExprKind.POINTER, self._span(start), args=(inner,))

        if token == "&":
            if self.peek() == "'":
                self.take()
                self.take()  # lifetime name
            if self.peek() == "mut":
                self.take()
            inner = self.parse_type()
            return TypeExpr(ExprKind.REFERENCE, self._span(start), args=(inner,))

        if token in ("dyn", "impl"):
            inner = self.parse_type()
            kind = ExprKind.DYN if token == "dyn" else ExprKind.IMPL
            return TypeExpr(kind, self._span(start), args=(inner,))

        if token == "(":
            items = self._parse_list(")")
            kind = ExprKind.UNIT if not items else ExprKind.TUPLE
            return TypeExpr(kind, self._span(start), args=tuple(items))

        if token == "[":
            inner = self.parse_type()
            if self.peek() == ";":
                self.take()
                self.take()  # length
            self.expect("]")
            return TypeExpr(ExprKind.ARRAY, self._span(start), args=(inner,))

        if token == "fn":
            self.expect("(")
            items = self._parse_list(")")
            if self.peek() == "->":
                self.take()
                items.append(self.parse_type())
            return TypeExpr(ExprKind.FN, self._span(start), args=tuple(items))

        if not re.match(r"[A-Za-z_]", token):
            raise TypeSyntaxError(f"unexpected {token!r}")

        args: List[TypeExpr] = []
        if self.peek() == "<":
            self.take()
            args = self._parse_list(">")
            if not args:
                raise TypeSyntaxError(f"empty generic argument list on {token}")
        return TypeExpr(
            ExprKind.PATH, self._span(start), name=token.split("::")[-1], args=tuple(args)
        )

    def _parse_list(self, closing: str) -> List[TypeExpr]:
        items = []
        if self.peek() == closing:
            self.take()
            return items
        while True:
            items.append(self.parse_type())
            token = self.take()
            if token == closing:
                return items
            if token != ",":
                raise TypeSyntaxError(f"expected ',' or {closing!r}, got {token!r}")
            if self.peek() == closing:  # trailing comma
                self.take()
                return items

    def _span(self, start: int) -> str:
        text = ""
        for token in self.tokens[start : self.pos]:
            if text and re.match(r"\w", token) and re.search(r"\w$", text):
                text += " "
            text += token
            if token == ",":
                text += " "
        return text


# Raw declarations, straight from the front-end


@dataclass
class SourceField:
    """Struct field or variant member; ``name`` is None for positional members."""

    type: str
    name: Optional[str] = None


@dataclass
class SourceVariant:
    name: str
    fields: List[SourceField] = field(default_factory=list)
    is_tuple: bool = False
    doc: Optional[str] = None

    @property
    def is_unit(self) -> bool:
        return not self.fields


@dataclass
class SourceStruct:
    name: str
    fields: List[SourceField] = field(default_factory=list)
    is_tuple: bool = False
    generics: List[str] = field(default_factory=list)
    location: Optional[str] = None
    doc: Optional[str] = None

    kind = "struct"


@dataclass
class SourceEnum:
    name: str
    variants: List[SourceVariant] = field(default_factory=list)
    generics: List[str] = field(default_factory=list)
    location: Optional[str] = None
    doc: Optional[str] = None

    kind = "enum"


@dataclass
class SourceParam:
    name: str
    type: str


@dataclass
class SourceFunction:
    name: str
    params: List[SourceParam] = field(default_factory=list)
    return_type: str = "()"
    is_async: bool = False
    fallible: bool = False
    error_type: Optional[str] = None
    generics: List[str] = field(default_factory=list)
    location: Optional[str] = None
    doc: Optional[str] = None

    kind = "function"


SourceDecl = Union[SourceStruct, SourceEnum, SourceFunction]


@dataclass
class SourceModule:
    """Declarations of one source module, in source order."""

    name: str
    decls: List[SourceDecl] = field(default_factory=list)

    @classmethod
    def load(cls, json_path: Union[str, Path]) -> "SourceModule":
        """Load a module description from a JSON file."""
        path = Path(json_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise SourceError(f"Declaration file not found: {path}")
        except json.JSONDecodeError as e:
            raise SourceError(f"Invalid JSON in declaration file {path}: {e}")
        logger.debug("Loaded declaration file %s", path)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceModule":
        """Create a module from a dictionary produced by the front-end."""
        if not isinstance(data, dict):
            raise SourceError("Declaration document must be a JSON object")

        decls: List[SourceDecl] = []
        for position, decl in enumerate(data.get("decls", [])):
            if not isinstance(decl, dict):
                raise SourceError(f"Declaration #{position} is not an object")
            kind = decl.get("kind")
            if "name" not in decl:
                raise SourceError(f"Declaration #{position} ({kind}) has no name")

            if kind == "struct":
                decls.append(cls._parse_struct(decl))
            elif kind == "enum":
                decls.append(cls._parse_enum(decl))
            elif kind == "function":
                decls.append(cls._parse_function(decl))
            else:
                raise SourceError(
                    f"Declaration {decl['name']!r} has unknown kind {kind!r}"
                )

        return cls(name=data.get("module", "api"), decls=decls)

    @staticmethod
    def _parse_fields(items: List[Any], owner: str) -> List[SourceField]:
        fields = []
        for item in items:
            if isinstance(item, str):
                fields.append(SourceField(type=item))
            elif isinstance(item, dict) and "type" in item:
                fields.append(SourceField(type=item["type"], name=item.get("name")))
            else:
                raise SourceError(f"Malformed field in {owner}: {item!r}")
        return fields

    @classmethod
    def _parse_struct(cls, decl: Dict[str, Any]) -> SourceStruct:
        fields = cls._parse_fields(decl.get("fields", []), decl["name"])
        is_tuple = bool(decl.get("tuple", False)) or (
            bool(fields) and all(f.name is None for f in fields)
        )
        if not is_tuple and any(f.name is None for f in fields):
            raise SourceError(f"Struct {decl['name']!r} mixes named and positional fields")
        return SourceStruct(
            name=decl["name"],
            fields=fields,
            is_tuple=is_tuple,
            generics=list(decl.get("generics", [])),
            location=decl.get("location"),
            doc=decl.get("doc"),
        )

    @classmethod
    def _parse_enum(cls, decl: Dict[str, Any]) -> SourceEnum:
        variants = []
        for item in decl.get("variants", []):
            if isinstance(item, str):
                variants.append(SourceVariant(name=item))
                continue
            if not isinstance(item, dict) or "name" not in item:
                raise SourceError(f"Malformed variant in {decl['name']!r}: {item!r}")
            owner = f"{decl['name']}::{item['name']}"
            if "types" in item:
                fields = cls._parse_fields(item["types"], owner)
                is_tuple = True
            else:
                fields = cls._parse_fields(item.get("fields", []), owner)
                is_tuple = bool(fields) and all(f.name is None for f in fields)
            if not is_tuple and any(f.name is None for f in fields):
                raise SourceError(f"Variant {owner!r} mixes named and positional fields")
            variants.append(
                SourceVariant(
                    name=item["name"], fields=fields, is_tuple=is_tuple, doc=item.get("doc")
                )
            )
        return SourceEnum(
            name=decl["name"],
            variants=variants,
            generics=list(decl.get("generics", [])),
            location=decl.get("location"),
            doc=decl.get("doc"),
        )

    @staticmethod
    def _parse_function(decl: Dict[str, Any]) -> SourceFunction:
        params = []
        for item in decl.get("params", []):
            if not isinstance(item, dict) or "name" not in item or "type" not in item:
                raise SourceError(f"Malformed parameter in {decl['name']!r}: {item!r}")
            params.append(SourceParam(name=item["name"], type=item["type"]))
        return SourceFunction(
            name=decl["name"],
            params=params,
            return_type=decl.get("return") or "()",
            is_async=bool(decl.get("async", False)),
            fallible=bool(decl.get("fallible", False)),
            error_type=decl.get("error"),
            generics=list(decl.get("generics", [])),
            location=decl.get("location"),
            doc=decl.get("doc"),
        )

    def declared_kinds(self) -> Dict[str, str]:
        """Map every struct/enum name to its kind; the first declaration wins."""
        kinds: Dict[str, str] = {}
        for decl in self.decls:
            if decl.kind != "function":
                kinds.setdefault(decl.name, decl.kind)
        return kinds
