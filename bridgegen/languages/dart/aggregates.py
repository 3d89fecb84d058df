"""
Struct and enum generation for Dart.

Structs become immutable classes, non-empty unit-only enums become native
Dart enums, and every other enum becomes a ``sealed class`` with one
``final class`` per variant so that ``switch`` over it is exhaustive.
"""

from typing import Any, Dict, List

from ...core.descriptor import CodecEntry
from ...core.generator import EmittedUnit, owner_label
from ...core.model import EnumDecl, StructDecl
from ...core.naming import TargetNaming
from .config import DartOptions
from .naming import DART_EQUALITY_NAMES
from .types import DartTypeMapper

MODULE_SCOPE = "library"


class DartAggregateBuilder:
    """Builds template context and codec expressions for structs and enums."""

    def __init__(
        self,
        mapper: DartTypeMapper,
        naming: TargetNaming,
        options: DartOptions,
        add_comments: bool = True,
    ):
        self.mapper = mapper
        self.naming = naming
        self.options = options
        self.add_comments = add_comments

    def _doc(self, doc):
        return doc if self.add_comments and doc else None

    def _fields(self, fields, positional: bool, wire: str) -> List[Dict[str, Any]]:
        result = []
        for field in fields:
            self.mapper.validate(field.shape)
            name = self.naming.field_name(field.name)
            decode = self.mapper.decode(field.shape, f"{wire}[{field.index}]")
            result.append(
                {
                    "name": name,
                    "source_name": field.name,
                    "index": field.index,
                    "type": self.mapper.type_name(field.shape),
                    "encode": self.mapper.encode(field.shape, f"value.{name}"),
                    "decode": decode,
                    "argument": decode if positional else f"{name}: {decode}",
                }
            )
        return result

    @staticmethod
    def _constructor_params(fields: List[Dict[str, Any]], positional: bool) -> str:
        if not fields:
            return ""
        if positional:
            return ", ".join(f"this.{field['name']}" for field in fields)
        return "{" + ", ".join(f"required this.{field['name']}" for field in fields) + "}"

    @staticmethod
    def _equality(name: str, fields: List[Dict[str, Any]]) -> Dict[str, str]:
        checks = [f"other is {name}"]
        checks.extend(f"deepEquals(other.{f['name']}, {f['name']})" for f in fields)
        if fields:
            hashed = f"deepHash([{', '.join(f['name'] for f in fields)}])"
        else:
            hashed = "runtimeType.hashCode"
        return {"equals": " && ".join(checks), "hash": hashed}

    def _field_claims(self, scope: str, fields: List[Dict[str, Any]], owner: str):
        claims = [
            (scope, field["name"], f"field {owner}.{field['source_name']}") for field in fields
        ]
        if self.options.equality:
            claims.extend(
                (scope, ident, "equality helper") for ident in sorted(DART_EQUALITY_NAMES)
            )
        return claims

    def _class_context(self, name: str, fields: List[Dict[str, Any]], positional: bool):
        return {
            "name": name,
            "fields": fields,
            "constructor": self._constructor_params(fields, positional),
            "equality": self._equality(name, fields) if self.options.equality else None,
        }

    def _aggregate_claims(self, decl, name: str, encoder: str, decoder: str):
        owner = owner_label(decl)
        return [
            (MODULE_SCOPE, name, owner),
            (MODULE_SCOPE, encoder, f"encoder of {owner}"),
            (MODULE_SCOPE, decoder, f"decoder of {owner}"),
        ]

    def build_struct(self, decl: StructDecl) -> EmittedUnit:
        name = self.naming.type_name(decl.name)
        encoder = self.naming.encoder_name(decl.name)
        decoder = self.naming.decoder_name(decl.name)
        fields = self._fields(decl.fields, decl.is_tuple, "items")

        claims = self._aggregate_claims(decl, name, encoder, decoder)
        claims.extend(self._field_claims(f"fields of {name}", fields, decl.name))

        context = self._class_context(name, fields, decl.is_tuple)
        context.update(
            {
                "source_name": decl.name,
                "doc": self._doc(decl.doc),
                "encoder": encoder,
                "decoder": decoder,
            }
        )
        codec = CodecEntry(
            source_name=decl.name,
            target_name=name,
            shape="tuple_struct" if decl.is_tuple else "struct",
            encode=encoder,
            decode=decoder,
        )
        return EmittedUnit(decl, "struct.dart.j2", context, claims, codec=codec)

    def build_enum(self, decl: EnumDecl) -> EmittedUnit:
        # Dart enums must declare at least one value
        if decl.is_unit_only and decl.variants:
            return self._build_native_enum(decl)
        return self._build_sealed_enum(decl)

    def _build_native_enum(self, decl: EnumDecl) -> EmittedUnit:
        name = self.naming.type_name(decl.name)
        encoder = self.naming.encoder_name(decl.name)
        decoder = self.naming.decoder_name(decl.name)
        members = [
            {
                "name": self.naming.member_name(variant.name),
                "source_name": variant.name,
                "ordinal": ordinal,
                "doc": self._doc(variant.doc),
            }
            for ordinal, variant in enumerate(decl.variants)
        ]

        claims = self._aggregate_claims(decl, name, encoder, decoder)
        claims.extend(
            (f"members of {name}", member["name"], f"variant {decl.name}::{member['source_name']}")
            for member in members
        )

        context = {
            "name": name,
            "source_name": decl.name,
            "doc": self._doc(decl.doc),
            "members": members,
            "encoder": encoder,
            "decoder": decoder,
        }
        codec = CodecEntry(decl.name, name, "enum", encoder, decoder)
        return EmittedUnit(decl, "enum.dart.j2", context, claims, codec=codec)

    def _build_sealed_enum(self, decl: EnumDecl) -> EmittedUnit:
        name = self.naming.type_name(decl.name)
        encoder = self.naming.encoder_name(decl.name)
        decoder = self.naming.decoder_name(decl.name)
        claims = self._aggregate_claims(decl, name, encoder, decoder)

        cases = []
        for tag, variant in enumerate(decl.variants):
            case_name = self.naming.case_name(decl.name, variant.name)
            variant_owner = f"{decl.name}::{variant.name}"
            positional = variant.payload.value == "tuple"
            fields = self._fields(variant.fields, positional, "payload")
            claims.append((MODULE_SCOPE, case_name, f"variant {variant_owner}"))
            claims.extend(self._field_claims(f"fields of {case_name}", fields, variant_owner))

            case = self._class_context(case_name, fields, positional)
            case.update(
                {
                    "source_name": variant.name,
                    "tag": tag,
                    "payload": variant.payload.value,
                    "doc": self._doc(variant.doc),
                }
            )
            cases.append(case)

        context = {
            "name": name,
            "source_name": decl.name,
            "doc": self._doc(decl.doc),
            "cases": cases,
            "encoder": encoder,
            "decoder": decoder,
        }
        codec = CodecEntry(decl.name, name, "tagged_enum", encoder, decoder)
        return EmittedUnit(decl, "sealed.dart.j2", context, claims, codec=codec)
