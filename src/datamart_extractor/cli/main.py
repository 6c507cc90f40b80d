# src/datamart_extractor/cli/main.py
# Main CLI entrypoint for the statistics extractor.
"""
Main Typer application with all sub-commands.

Usage:
    datamart run                                # Extract per ./.datamart.yaml
    datamart run --config settings.yaml --once  # One pass, then exit
    datamart beans --config settings.yaml       # Show entry resolution
"""

import typer
from rich.console import Console

from datamart_extractor import __version__
from datamart_extractor.cli.commands import beans, run

app = typer.Typer(
    name="datamart",
    help="Sample registry attributes into an embedded SQLite store",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

app.command("run")(run.run_command)
app.command("beans")(beans.beans_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
) -> None:
    """datamart - registry statistics extractor."""
    if version:
        console.print(f"[bold]datamart[/bold] version {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


if __name__ == "__main__":
    app()
