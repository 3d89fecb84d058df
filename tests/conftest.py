from __future__ import annotations

import importlib.util
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterator, List

import pytest

from bridgegen import generate_bindings
from tests._fixtures.transport import FakeTransport

LoadBindings = Callable[..., ModuleType]


@pytest.fixture
def transport() -> Iterator[FakeTransport]:
    """Provide a fake transport; worker threads are joined after the test."""
    fake = FakeTransport()
    yield fake
    fake.join()


@pytest.fixture
def load_bindings(tmp_path: Path) -> Iterator[LoadBindings]:
    """Generate Python bindings for a declaration document and import them."""
    loaded: List[str] = []

    def load(document: Dict[str, Any], **config: Any) -> ModuleType:
        result = generate_bindings(document, "python", config or None)
        assert result.success, result.diagnostics or result.error_message

        stem = re.sub(r"\W", "_", document.get("module", "api"))
        name = f"generated_{stem}_{len(loaded)}"
        path = tmp_path / f"{name}.py"
        path.write_text(result.code, encoding="utf-8")

        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        loaded.append(name)
        spec.loader.exec_module(module)
        return module

    yield load
    for name in loaded:
        sys.modules.pop(name, None)
