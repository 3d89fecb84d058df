"""
Function signature generation for Dart.

Each source function becomes a method of the API class. Synchronous
functions return the decoded value through ``invokeSync``; asynchronous
ones return a ``Future`` from ``dispatchAsync``.
"""

from ...core.descriptor import FunctionEntry
from ...core.generator import EmittedUnit, owner_label
from ...core.model import FunctionSig
from ...core.naming import TargetNaming
from .naming import DART_RUNTIME_HELPERS
from .types import DartTypeMapper


class DartSignatureBuilder:
    def __init__(
        self,
        mapper: DartTypeMapper,
        naming: TargetNaming,
        api_class: str,
        param_style: str = "positional",
        add_comments: bool = True,
    ):
        self.mapper = mapper
        self.naming = naming
        self.api_class = api_class
        self.param_style = param_style
        self.add_comments = add_comments

    def _parameter_list(self, params) -> str:
        if not params:
            return ""
        if self.param_style == "keyword":
            return "{" + ", ".join(f"required {p['type']} {p['name']}" for p in params) + "}"
        return ", ".join(f"{p['type']} {p['name']}" for p in params)

    def build_function(self, sig: FunctionSig) -> EmittedUnit:
        name = self.naming.function_name(sig.name)
        wire_name = self.naming.wire_name(sig.name)
        self.mapper.take_referenced_codecs()

        params = []
        for param in sig.params:
            self.mapper.validate(param.shape)
            param_name = self.naming.param_name(param.name)
            params.append(
                {
                    "name": param_name,
                    "source_name": param.name,
                    "type": self.mapper.type_name(param.shape),
                    "encode": self.mapper.encode(param.shape, param_name),
                }
            )

        self.mapper.validate(sig.return_shape, allow_unit=True)
        result_type = self.mapper.type_name(sig.return_shape)
        decode = self.mapper.decode(sig.return_shape, "wire")
        decode_error = None
        if sig.fallible:
            self.mapper.validate(sig.error_shape, allow_unit=True)
            decode_error = self.mapper.decode(sig.error_shape, "wire")

        owner = owner_label(sig)
        claims = [(f"methods of {self.api_class}", name, owner)]
        claims.extend(
            (f"parameters of {name}", param["name"], f"parameter {sig.name}({param['source_name']})")
            for param in params
        )
        # The call body names runtime helpers and codecs unqualified
        shadowed = [(helper, "runtime helper") for helper in sorted(DART_RUNTIME_HELPERS)]
        shadowed.extend(
            (codec, f"codec called by {sig.name}") for codec in self.mapper.take_referenced_codecs()
        )
        claims.extend((f"parameters of {name}", ident, what) for ident, what in shadowed)

        context = {
            "name": name,
            "source_name": sig.name,
            "doc": sig.doc if self.add_comments and sig.doc else None,
            "params": params,
            "parameter_list": self._parameter_list(params),
            "return_type": f"Future<{result_type}>" if sig.is_async else result_type,
            "decode": decode,
            "decode_error": decode_error,
            "is_async": sig.is_async,
            "fallible": sig.fallible,
            "wire_name": wire_name,
        }
        entry = FunctionEntry(
            source_name=sig.name,
            target_name=name,
            wire_name=wire_name,
            is_async=sig.is_async,
            fallible=sig.fallible,
            params=tuple(param["name"] for param in params),
        )
        return EmittedUnit(sig, "function.dart.j2", context, claims, function=entry)
