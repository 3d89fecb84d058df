"""
Rich rendering of generation results.

Prints a success panel with the run summary and the marshaling descriptor,
or a failure panel listing every diagnostic.
"""

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from .core.descriptor import MarshalDescriptor
from .core.errors import Diagnostic
from .core.generator import GenerationResult


def display_result(
    result: GenerationResult,
    console: Optional[Console] = None,
    show_code: bool = False,
):
    """Print the outcome of one generation run."""
    console = console or Console()

    if not result.success:
        console.print(
            Panel(
                f"[red]{result.error_message}[/red]",
                title="❌ Generation Failed",
                border_style="red",
            )
        )
        if result.diagnostics:
            display_diagnostics(result.diagnostics, console)
        return

    module = result.metadata.get("module", "?")
    language = result.metadata.get("language", "?")
    console.print(
        Panel.fit(
            f"[green]Generated {language} bindings for [bold]{module}[/bold][/green]",
            title="✅ Generation Complete",
            border_style="green",
        )
    )
    if result.warnings:
        display_warnings(result.warnings, console)
    display_metadata(result.metadata, console)
    if result.descriptor is not None:
        display_descriptor(result.descriptor, console)
    if show_code:
        preview_code(result.code, language, console)


def display_diagnostics(diagnostics: List[Diagnostic], console: Console):
    table = Table(
        title="Diagnostics",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold red",
    )
    table.add_column("Declaration", style="bold")
    table.add_column("Kind", style="red")
    table.add_column("Message")
    table.add_column("Location", style="dim")

    for diagnostic in diagnostics:
        table.add_row(
            diagnostic.declaration,
            diagnostic.kind,
            diagnostic.message,
            diagnostic.location or "",
        )

    console.print()
    console.print(table)


def display_warnings(warnings: List[str], console: Console):
    """Display generation warnings."""
    console.print("\n[yellow]⚠️ Warnings:[/yellow]")
    for warning in warnings:
        console.print(f"  [yellow]•[/yellow] {warning}")


def display_metadata(metadata: Dict[str, Any], console: Console):
    """Display generation metadata."""
    table = Table(
        title="📊 Generation Summary",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Property", style="bold")
    table.add_column("Value", style="green")

    for key, value in metadata.items():
        table.add_row(key.replace("_", " ").title(), str(value))

    console.print()
    console.print(table)


def display_descriptor(descriptor: MarshalDescriptor, console: Console):
    """Display the codec and function tables of a descriptor."""
    if descriptor.codecs:
        codecs = Table(title="Codecs", box=box.SIMPLE, header_style="bold cyan")
        codecs.add_column("Source", style="bold")
        codecs.add_column("Target")
        codecs.add_column("Shape", style="magenta")
        codecs.add_column("Encode", style="green")
        codecs.add_column("Decode", style="green")
        for entry in descriptor.codecs:
            codecs.add_row(
                entry.source_name, entry.target_name, entry.shape, entry.encode, entry.decode
            )
        console.print()
        console.print(codecs)

    if descriptor.functions:
        functions = Table(title="Functions", box=box.SIMPLE, header_style="bold cyan")
        functions.add_column("Source", style="bold")
        functions.add_column("Target")
        functions.add_column("Wire name", style="green")
        functions.add_column("Async")
        functions.add_column("Fallible")
        for entry in descriptor.functions:
            functions.add_row(
                entry.source_name,
                entry.target_name,
                entry.wire_name,
                "yes" if entry.is_async else "",
                "yes" if entry.fallible else "",
            )
        console.print()
        console.print(functions)


def preview_code(code: str, language: str, console: Console):
    """Preview generated code with syntax highlighting."""
    console.print(f"\n[green]📄 Generated {language.title()} Code Preview[/green]")
    console.print()
    console.print(Syntax(code, language, theme="monokai", line_numbers=False, padding=1))
    console.print()
