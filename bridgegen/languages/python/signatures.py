"""
Function signature generation for Python.

Each source function becomes a method of the API class. Synchronous
functions return the decoded value through ``_rt.invoke``; asynchronous
ones return an ``asyncio.Future`` from ``_rt.dispatch``. Fallible
functions raise ``SourceError`` carrying the decoded error value, and any
source-side abort surfaces as ``SourcePanic``.
"""

from ...core.descriptor import FunctionEntry
from ...core.generator import EmittedUnit, owner_label
from ...core.model import FunctionSig
from ...core.naming import TargetNaming
from .types import PythonTypeMapper


class PythonSignatureBuilder:
    def __init__(
        self,
        mapper: PythonTypeMapper,
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
        # Codecs named in the body live in the same namespace as the parameters
        claims.extend(
            (f"parameters of {name}", codec, f"codec called by {sig.name}")
            for codec in self.mapper.take_referenced_codecs()
        )

        context = {
            "name": name,
            "source_name": sig.name,
            "doc": sig.doc if self.add_comments and sig.doc else None,
            "params": params,
            "keyword_only": self.param_style == "keyword" and bool(params),
            "return_type": f"asyncio.Future[{result_type}]" if sig.is_async else result_type,
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
        return EmittedUnit(sig, "function.py.j2", context, claims, function=entry)
