"""Command: juris check - Evaluate a role-level access decision."""

from typing import Annotated

import typer
from rich.console import Console

from juris.core.permissions.checker import DecisionReason, role_allows
from juris.core.permissions.models import OVERRIDABLE_RESOURCES, Action, Resource, Role
from juris.modules.offices.schemas import MemberPermissions


console = Console()


def check(
    role: Role = typer.Argument(..., case_sensitive=False, help="Member role"),
    resource: Resource = typer.Argument(..., case_sensitive=False, help="Resource"),
    action: Action = typer.Argument(..., case_sensitive=False, help="Action"),
    override: Annotated[
        list[Resource] | None,
        typer.Option(
            "--override",
            "-o",
            case_sensitive=False,
            help="View override flag set on the member (repeatable)",
        ),
    ] = None,
) -> None:
    """Decide whether a member with ROLE may perform ACTION on RESOURCE.

    Exits with status 1 when the action is denied.
    """
    override = override or []
    flags = {r.value: True for r in override if r in OVERRIDABLE_RESOURCES}
    ignored = [r.value for r in override if r not in OVERRIDABLE_RESOURCES]
    if ignored:
        console.print(
            f"[yellow]Warning:[/yellow] no view override exists for: {', '.join(ignored)}"
        )

    reason = role_allows(role, resource, action, MemberPermissions(**flags))

    if reason is DecisionReason.ROLE:
        console.print(f"[green]allowed[/green] by the {role.value} role")
    elif reason is DecisionReason.VIEW_OVERRIDE:
        console.print(f"[green]allowed[/green] by the '{resource.value}' view override")
    else:
        console.print(
            f"[red]denied[/red]: the {role.value} role lacks "
            f"'{action.value}' on '{resource.value}'"
        )
        raise typer.Exit(code=1)
