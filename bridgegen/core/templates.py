"""
Jinja2 environment for the binding templates.

Every target language keeps its templates in a ``templates/`` directory next
to its generator. Templates are rendered with ``StrictUndefined``: a
context key missing from a builder is a ``TemplateError``, never an empty string in generated code.
"""

from pathlib import Path
from typing import Any, Dict, Union

import jinja2
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .errors import BridgeGenError
from .naming import NameSanitizer, NamingCase


class TemplateError(BridgeGenError):
    """Exception raised when a binding template cannot be loaded or rendered."""

    pass


def comment_lines(text: str, prefix: str = "#") -> str:
    """Prefix every line of a doc string; blank lines keep the bare prefix."""
    return "\n".join(f"{prefix} {line}".rstrip() for line in str(text).strip().split("\n"))


def indent_lines(text: str, width: int = 4) -> str:
    pad = " " * width
    return "\n".join(pad + line if line.strip() else line for line in str(text).split("\n"))


class TemplateEngine:
    """Renders the templates of one target language."""

    def __init__(self, template_dir: Union[str, Path]):
        self.template_dir = Path(template_dir)
        if not self.template_dir.is_dir():
            raise TemplateError(f"Template directory not found: {self.template_dir}")

        self._env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        cases = NameSanitizer()
        for case in NamingCase:
            self._env.filters[f"{case.value}_case"] = (
                lambda value, _case=case: cases.convert_case(str(value), _case)
            )
        self._env.filters["comment"] = comment_lines
        self._env.filters["indent"] = indent_lines
        self._env.filters["repr"] = repr

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render ``template_name`` with ``context``; any Jinja failure is a TemplateError."""
        try:
            return self._env.get_template(template_name).render(**context)
        except jinja2.TemplateError as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def template_exists(self, template_name: str) -> bool:
        return template_name in self._env.list_templates()


def create_template_engine(template_dir: Union[str, Path]) -> TemplateEngine:
    return TemplateEngine(template_dir)
