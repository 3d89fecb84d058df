"""
Struct and enum generation for Python.

Structs become dataclasses, unit-only enums become ``enum.Enum`` subclasses
whose values are the variant ordinals, and enums with payloads become a
sealed base class with one dataclass per variant. Each aggregate also gets
a module-level ``encode_<name>``/``decode_<name>`` pair.
"""

from typing import Any, Dict, List

from ...core.descriptor import CodecEntry
from ...core.generator import EmittedUnit, owner_label
from ...core.model import EnumDecl, StructDecl
from ...core.naming import TargetNaming
from .config import PythonOptions
from .types import PythonTypeMapper

MODULE_SCOPE = "module"


class PythonAggregateBuilder:
    """Builds template context and codec expressions for structs and enums."""

    def __init__(
        self,
        mapper: PythonTypeMapper,
        naming: TargetNaming,
        options: PythonOptions,
        add_comments: bool = True,
    ):
        self.mapper = mapper
        self.naming = naming
        self.options = options
        self.add_comments = add_comments

    def _doc(self, doc):
        return doc if self.add_comments and doc else None

    def _fields(self, fields, source: str, wire: str) -> List[Dict[str, Any]]:
        result = []
        for field in fields:
            self.mapper.validate(field.shape)
            name = self.naming.field_name(field.name)
            result.append(
                {
                    "name": name,
                    "source_name": field.name,
                    "index": field.index,
                    "type": self.mapper.type_name(field.shape),
                    "encode": self.mapper.encode(field.shape, f"{source}.{name}"),
                    "decode": self.mapper.decode(field.shape, f"{wire}[{field.index}]"),
                }
            )
        return result

    @staticmethod
    def _field_claims(scope: str, fields: List[Dict[str, Any]], owner: str):
        return [
            (scope, field["name"], f"field {owner}.{field['source_name']}") for field in fields
        ]

    def build_struct(self, decl: StructDecl) -> EmittedUnit:
        name = self.naming.type_name(decl.name)
        encoder = self.naming.encoder_name(decl.name)
        decoder = self.naming.decoder_name(decl.name)
        fields = self._fields(decl.fields, "value", "wire")

        owner = owner_label(decl)
        claims = [
            (MODULE_SCOPE, name, owner),
            (MODULE_SCOPE, encoder, f"encoder of {owner}"),
            (MODULE_SCOPE, decoder, f"decoder of {owner}"),
        ]
        claims.extend(self._field_claims(f"fields of {name}", fields, decl.name))

        context = {
            "name": name,
            "source_name": decl.name,
            "doc": self._doc(decl.doc),
            "decorator": self.options.dataclass_decorator,
            "fields": fields,
            "encoder": encoder,
            "decoder": decoder,
        }
        codec = CodecEntry(
            source_name=decl.name,
            target_name=name,
            shape="tuple_struct" if decl.is_tuple else "struct",
            encode=encoder,
            decode=decoder,
        )
        return EmittedUnit(decl, "struct.py.j2", context, claims, codec=codec)

    def build_enum(self, decl: EnumDecl) -> EmittedUnit:
        if decl.is_unit_only:
            return self._build_unit_enum(decl)
        return self._build_tagged_enum(decl)

    def _build_unit_enum(self, decl: EnumDecl) -> EmittedUnit:
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

        owner = owner_label(decl)
        claims = [
            (MODULE_SCOPE, name, owner),
            (MODULE_SCOPE, encoder, f"encoder of {owner}"),
            (MODULE_SCOPE, decoder, f"decoder of {owner}"),
        ]
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
        return EmittedUnit(decl, "unit_enum.py.j2", context, claims, codec=codec)

    def _build_tagged_enum(self, decl: EnumDecl) -> EmittedUnit:
        name = self.naming.type_name(decl.name)
        encoder = self.naming.encoder_name(decl.name)
        decoder = self.naming.decoder_name(decl.name)

        owner = owner_label(decl)
        claims = [
            (MODULE_SCOPE, name, owner),
            (MODULE_SCOPE, encoder, f"encoder of {owner}"),
            (MODULE_SCOPE, decoder, f"decoder of {owner}"),
        ]

        cases = []
        for tag, variant in enumerate(decl.variants):
            case_name = self.naming.case_name(decl.name, variant.name)
            variant_owner = f"{decl.name}::{variant.name}"
            fields = self._fields(variant.fields, "value", "payload")
            claims.append((MODULE_SCOPE, case_name, f"variant {variant_owner}"))
            claims.extend(self._field_claims(f"fields of {case_name}", fields, variant_owner))
            cases.append(
                {
                    "name": case_name,
                    "source_name": variant.name,
                    "tag": tag,
                    "payload": variant.payload.value,
                    "doc": self._doc(variant.doc),
                    "fields": fields,
                }
            )

        context = {
            "name": name,
            "source_name": decl.name,
            "doc": self._doc(decl.doc),
            "decorator": self.options.dataclass_decorator,
            "cases": cases,
            "encoder": encoder,
            "decoder": decoder,
        }
        codec = CodecEntry(decl.name, name, "tagged_enum", encoder, decoder)
        return EmittedUnit(decl, "tagged_enum.py.j2", context, claims, codec=codec)
