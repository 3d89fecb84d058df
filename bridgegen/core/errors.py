"""
Error taxonomy for binding generation.

Per-declaration errors abort only the declaration that raised them and are
collected into diagnostics; whole-run errors stop the pipeline.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


class BridgeGenError(Exception):
    """Base exception for everything raised by the generator."""

    pass


@dataclass(frozen=True)
class Diagnostic:
    """One reported problem, tied to the declaration it belongs to."""

    declaration: str
    kind: str
    message: str
    location: Optional[str] = None

    def __str__(self) -> str:
        where = f" ({self.location})" if self.location else ""
        return f"{self.kind}: {self.declaration}{where}: {self.message}"


class DeclarationError(BridgeGenError):
    """Error that is fatal for a single declaration only."""

    kind = "DeclarationError"

    def __init__(
        self,
        message: str,
        declaration: Optional[str] = None,
        location: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.declaration = declaration
        self.location = location

    def attach(self, declaration: str, location: Optional[str]) -> "DeclarationError":
        """Fill in the owning declaration if the raiser did not know it."""
        if self.declaration is None:
            self.declaration = declaration
        if self.location is None:
            self.location = location
        return self

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            declaration=self.declaration or "<unknown>",
            kind=self.kind,
            message=self.message,
            location=self.location,
        )


class UnsupportedTypeKind(DeclarationError):
    """A declared type matches none of the supported shapes."""

    kind = "UnsupportedTypeKind"

    def __init__(
        self,
        type_text: str,
        reason: str,
        declaration: Optional[str] = None,
        location: Optional[str] = None,
    ):
        super().__init__(f"`{type_text}`: {reason}", declaration, location)
        self.type_text = type_text
        self.reason = reason


class UnhashableKeyType(DeclarationError):
    """A map key type has no stable equality/hash in the target language."""

    kind = "UnhashableKeyType"

    def __init__(
        self,
        key_text: str,
        declaration: Optional[str] = None,
        location: Optional[str] = None,
    ):
        super().__init__(
            f"map key `{key_text}` has no stable equality/hash in the target language",
            declaration,
            location,
        )
        self.key_text = key_text


class RunError(BridgeGenError):
    """Error that is fatal for the whole generation run."""

    kind = "RunError"

    def to_diagnostics(self) -> List[Diagnostic]:
        return [Diagnostic(declaration="<run>", kind=self.kind, message=str(self))]


class UnresolvedTypeReference(RunError):
    """One or more type references never resolved to a declaration."""

    kind = "UnresolvedTypeReference"

    def __init__(self, references: Sequence[Tuple[str, str, Optional[str]]]):
        """
        Args:
            references: ``(type name, referencing declaration, location)`` triples
        """
        self.references = list(references)
        names = ", ".join(
            f"`{name}` (used by {owner})" for name, owner, _ in self.references
        )
        super().__init__(f"Unresolved type reference(s): {names}")

    def to_diagnostics(self) -> List[Diagnostic]:
        return [
            Diagnostic(
                declaration=owner,
                kind=self.kind,
                message=f"`{name}` does not name a declared struct or enum",
                location=location,
            )
            for name, owner, location in self.references
        ]


class NameCollision(RunError):
    """Several declarations map to the same target identifier."""

    kind = "NameCollision"

    def __init__(self, collisions: Sequence[Tuple[str, str, Sequence[str]]]):
        """
        Args:
            collisions: ``(scope, identifier, owners)`` triples
        """
        self.collisions = [(scope, ident, list(owners)) for scope, ident, owners in collisions]
        details = "; ".join(
            f"`{ident}` in {scope} <- {', '.join(owners)}"
            for scope, ident, owners in self.collisions
        )
        super().__init__(f"Name collision(s): {details}")

    def to_diagnostics(self) -> List[Diagnostic]:
        return [
            Diagnostic(
                declaration=" / ".join(owners),
                kind=self.kind,
                message=f"all map to `{ident}` in {scope}",
            )
            for scope, ident, owners in self.collisions
        ]


class SourceError(BridgeGenError):
    """The declaration document handed over by the front-end is malformed."""

    pass


class GenerationFailed(BridgeGenError):
    """Raised by convenience entry points when a run produced diagnostics."""

    def __init__(self, message: str, diagnostics: Sequence[Diagnostic] = ()):
        super().__init__(message)
        self.diagnostics = list(diagnostics)
