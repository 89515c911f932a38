"""Command: juris matrix - Show the permission matrix."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from juris.core.permissions.models import (
    OVERRIDABLE_RESOURCES,
    Action,
    Resource,
    Role,
    matrix_actions,
)


console = Console()


def show_matrix(
    role: Annotated[
        Role | None,
        typer.Option("--role", "-r", case_sensitive=False, help="Show a single role"),
    ] = None,
) -> None:
    """Show which actions each role has on each resource.

    Resources marked with * accept a per-member view override.
    """
    roles = [role] if role else list(Role)

    table = Table(title="Permission Matrix", show_header=True)
    table.add_column("Role", style="cyan", no_wrap=True)
    for resource in Resource:
        marker = "*" if resource in OVERRIDABLE_RESOURCES else ""
        table.add_column(f"{resource.value}{marker}")

    for r in roles:
        row = [r.value]
        for resource in Resource:
            granted = matrix_actions(r, resource)
            # Keep Action declaration order
            cell = ",".join(a.value for a in Action if a in granted)
            row.append(cell or "[dim](none)[/dim]")
        table.add_row(*row)

    console.print()
    console.print(table)
    console.print("[dim]* view override available[/dim]")
    console.print()
