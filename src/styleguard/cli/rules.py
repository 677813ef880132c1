"""CLI commands: styleguard rules / languages - list what can be checked."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from styleguard.rules.registry import default_registry
from styleguard.source.syntax import SYNTAXES

console = Console(stderr=True)


@click.command()
def rules() -> None:
    """List available rules and their default severities."""
    table = Table(title="Rules", show_lines=False)
    table.add_column("Rule", style="cyan")
    table.add_column("Default")
    table.add_column("Advisory", justify="center")
    table.add_column("Description")

    for rule in default_registry():
        table.add_row(
            rule.id,
            rule.default_severity.value,
            "yes" if rule.advisory else "",
            rule.description,
        )
    console.print(table)


@click.command()
def languages() -> None:
    """List supported languages and their file extensions."""
    table = Table(title="Languages", show_lines=False)
    table.add_column("Language", style="cyan")
    table.add_column("Blocks")
    table.add_column("Extensions")

    for name in sorted(SYNTAXES):
        syntax = SYNTAXES[name]
        table.add_row(name, syntax.block_style, " ".join(syntax.extensions))
    console.print(table)
