"""leaselink-admin: operator commands that bypass the HTTP API."""

import asyncio
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from leaselink import __version__
from leaselink.core.errors import NotFoundError
from leaselink.modules.profiles.models import ProfileRole


console = Console()

app = typer.Typer(
    name="leaselink-admin",
    help="Administrative commands for leaselink.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


async def _set_role(subject: str, role: ProfileRole) -> Any:
    from leaselink.core.database import async_session_factory
    from leaselink.modules.profiles.repos import ProfileRepository
    from leaselink.modules.profiles.services import ProfileService

    async with async_session_factory() as session, session.begin():
        return await ProfileService(ProfileRepository(session)).change_role(subject, role)


async def _run_cleanup() -> dict[str, int]:
    from leaselink.core.database import async_session_factory
    from leaselink.core.jobs.tasks import cleanup_invite_tokens, cleanup_rate_limit_buckets

    ctx = {"db_session_factory": async_session_factory}
    results: dict[str, int] = {}
    results.update(await cleanup_rate_limit_buckets(ctx))
    results.update(await cleanup_invite_tokens(ctx))
    return results


@app.command(name="set-role")
def set_role(
    subject: str = typer.Argument(..., help="Identity-provider subject of the profile"),
    role: ProfileRole = typer.Argument(..., help="New role"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Change a profile's role.

    Roles are otherwise fixed once assigned; this is the only way to
    change one.
    """
    if not yes:
        confirm = typer.confirm(f"Change the role of '{subject}' to {role.value}?")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    try:
        profile = asyncio.run(_set_role(subject, role))
    except NotFoundError:
        console.print(f"[red]Error:[/red] No profile for subject '{subject}'.")
        raise typer.Exit(1) from None

    console.print(f"[green]✓[/green] Profile {profile.id} is now a {role.value}.")


@app.command()
def cleanup() -> None:
    """Run the storage cleanup jobs once."""
    results = asyncio.run(_run_cleanup())

    table = Table(title="Cleanup")
    table.add_column("Item", style="cyan")
    table.add_column("Deleted", justify="right")
    for name, count in results.items():
        table.add_row(name, str(count))
    console.print(table)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit."),
) -> None:
    """leaselink-admin - operator commands."""
    if version:
        console.print(f"[bold cyan]leaselink-admin[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
