"""Main juris CLI application."""

import typer
from rich.console import Console

from juris import __version__
from juris.commands import check, matrix
from juris.core.logging import configure_logging


console = Console()

app = typer.Typer(
    name="juris",
    help="Inspect office roles and access decisions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
app.command(name="matrix")(matrix.show_matrix)
app.command(name="check")(check.check)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """Juris CLI - office-scoped access control."""
    configure_logging()
    if version:
        console.print(f"[bold cyan]juris[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
