# src/datamart_extractor/cli/commands/run.py
# Implementation of `datamart run` command.
"""
Starts extraction as configured by the settings file.

With a polling rate of 0 (or --once) a single pass runs and the command
exits. Otherwise extraction repeats until SIGINT or SIGTERM, after which
the store connection is closed before the process exits.
"""

import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from datamart_extractor.core.config import load_settings
from datamart_extractor.core.log_config import configure_logging
from datamart_extractor.errors import DatamartError
from datamart_extractor.extraction.scheduler import Scheduler

console = Console()


def _interrupt(signum, frame) -> None:  # type: ignore[no-untyped-def]
    raise KeyboardInterrupt


def run_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Settings file (default: ./.datamart.yaml)"
    ),
    once: bool = typer.Option(
        False, "--once", help="Run a single extraction regardless of polling rate"
    ),
    log_level: str = typer.Option(
        "INFO", "--log-level", "-l", help="Log level when no logging config is given"
    ),
    logging_config: Optional[Path] = typer.Option(
        None, "--logging-config", help="YAML logging dictConfig file"
    ),
) -> None:
    """
    Extract registry statistics into the embedded store.

    Examples:
        datamart run                          # Use ./.datamart.yaml
        datamart run -c prod.yaml --once      # One pass, then exit
    """
    try:
        configure_logging(log_level, logging_config)
        settings = load_settings(config)
        if once:
            settings = settings.model_copy(update={"polling_rate": 0})
        scheduler = Scheduler(settings)
    except DatamartError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not scheduler.is_periodically_extracting:
        try:
            outcome = scheduler.start()
        except DatamartError as e:
            console.print(f"[red]Extraction failed: {e}[/red]")
            raise typer.Exit(1)
        if outcome is not None:
            console.print(
                f"[green]✓[/green] Wrote {outcome.rows_written} rows "
                f"from {outcome.instances_written} objects to {scheduler.gate.store.path}"
            )
        return

    signal.signal(signal.SIGTERM, _interrupt)
    scheduler.start()
    console.print(
        f"[green]Extracting every {settings.polling_rate}s[/green] "
        f"to {scheduler.gate.store.path} [dim](Ctrl+C to stop)[/dim]"
    )
    try:
        while not scheduler.wait(timeout=1.0):
            pass
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping...[/yellow]")
    finally:
        scheduler.stop()
