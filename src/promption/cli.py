"""Operator CLI for maintenance tasks."""

import asyncio
from datetime import UTC, datetime, timedelta

import typer
from rich.console import Console
from rich.table import Table

from promption import __version__
from promption.core.logging import configure_logging


console = Console()

app = typer.Typer(
    name="promption",
    help="Maintenance commands for the Promption API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


async def _expire_invitations(dry_run: bool) -> int:
    from promption.core.database import async_engine, async_session_factory
    from promption.modules.invitations.repos import InvitationRepository

    try:
        async with async_session_factory() as session:
            expired = await InvitationRepository(session).expire_stale(datetime.now(UTC))
            if dry_run:
                await session.rollback()
            else:
                await session.commit()
    finally:
        await async_engine.dispose()
    return expired


@app.command(name="expire-invitations")
def expire_invitations(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Count stale invitations without changing them."
    ),
) -> None:
    """Mark pending invitations past their expiry as expired."""
    configure_logging()
    with console.status("[bold green]Sweeping invitations..."):
        count = asyncio.run(_expire_invitations(dry_run))

    verb = "would expire" if dry_run else "expired"
    console.print(f"[green]✓[/green] {verb} {count} invitation(s)")


@app.command(name="issue-token")
def issue_token_cmd(
    subject: str = typer.Argument(..., help="Auth subject id to embed as 'sub'."),
    email: str = typer.Argument(..., help="Email claim."),
    full_name: str | None = typer.Option(None, "--name", help="Display name."),
    minutes: int = typer.Option(
        60, "--minutes", "-m", min=1, help="Token lifetime in minutes."
    ),
) -> None:
    """Mint a session token for local development.

    Signed with AUTH_JWT_SECRET, so it is only accepted by services
    sharing that secret.
    """
    from promption.config import settings
    from promption.core.auth import issue_token

    if settings.is_production:
        console.print("[red]Error:[/red] refusing to mint tokens in production.")
        raise typer.Exit(1)

    token = issue_token(
        subject=subject,
        email=email,
        full_name=full_name,
        expires_delta=timedelta(minutes=minutes),
    )

    table = Table(show_header=False, box=None)
    table.add_row("[bold]subject[/bold]", subject)
    table.add_row("[bold]email[/bold]", email)
    table.add_row("[bold]expires in[/bold]", f"{minutes} min")
    console.print(table)
    console.print(token, soft_wrap=True)


@app.command(name="unblock-ip")
def unblock_ip(
    ip: str = typer.Argument(..., help="Client address to remove from the block list."),
) -> None:
    """Lift a block placed by the honeypot or repeated rate-limit violations."""
    from promption.core.cache import close_redis_pool
    from promption.core.rate_limit import ip_tracker

    async def _unblock() -> bool:
        try:
            return await ip_tracker.unblock(ip)
        finally:
            await close_redis_pool()

    if asyncio.run(_unblock()):
        console.print(f"[green]✓[/green] unblocked {ip}")
    else:
        console.print(f"[yellow]Warning:[/yellow] {ip} was not blocked")


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """Promption maintenance CLI."""
    if version:
        console.print(f"[bold cyan]promption[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
