# src/datamart_extractor/cli/commands/beans.py
# Implementation of `datamart beans` command.
"""
Shows each configured entry and the live objects it resolves to, without
writing anything to the store.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from datamart_extractor.core.config import load_settings
from datamart_extractor.errors import DatamartError
from datamart_extractor.extraction.sampler import AttributeSampler
from datamart_extractor.registry import connect

console = Console()


def beans_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Settings file (default: ./.datamart.yaml)"
    ),
    read: bool = typer.Option(
        False, "--read", "-r", help="Also read current attribute values"
    ),
) -> None:
    """List configured entries and what they resolve to in the registry."""
    try:
        settings = load_settings(config)
        registry = connect(settings.url)
    except DatamartError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    sampler = AttributeSampler()
    table = Table(title=f"Entries ({registry.description})")
    table.add_column("Entry", style="cyan")
    table.add_column("Pattern", justify="center")
    table.add_column("Enabled", justify="center")
    table.add_column("Resolved object", style="green")
    table.add_column("Alias")
    if read:
        table.add_column("Values")

    for entry in settings.beans:
        instances = sampler.resolve(entry, registry) if entry.enable else []
        flags = ("✓" if entry.pattern else "−", "✓" if entry.enable else "−")
        if not instances:
            row = [entry.name, *flags, "[dim]none[/dim]", entry.alias]
            table.add_row(*(row + ([""] if read else [])))
            continue
        for instance in instances:
            row = [entry.name, *flags, instance.name, instance.alias]
            if read:
                samples = sampler.sample(instance, registry)
                row.append(", ".join(f"{s.attribute.alias}={s.value!r}" for s in samples))
            table.add_row(*row)

    console.print(table)
    console.print(f"\n[dim]Total: {len(settings.beans)} entries[/dim]")
