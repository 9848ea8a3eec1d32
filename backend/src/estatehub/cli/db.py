"""Database management CLI commands."""

import asyncio
import subprocess
import sys
from pathlib import Path

import typer
from rich.console import Console

from estatehub.database import check_db, close_db

console = Console()
app = typer.Typer(help="Database management commands")

ALEMBIC_INI = Path(__file__).resolve().parents[3] / "alembic.ini"


def _alembic(*args: str) -> int:
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI), *args],
        check=False, capture_output=False,
    )
    return result.returncode


@app.command("migrate")
def migrate(
    revision: str = typer.Argument("head", help="Target revision (default: head)"),
):
    """Run database migrations to the specified revision."""
    console.print(f"[dim]Running migrations to {revision}...[/dim]")
    if _alembic("upgrade", revision) != 0:
        console.print("[red]Migration failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Migrations complete![/green]")


@app.command("rollback")
def rollback(
    revision: str = typer.Argument("-1", help="Target revision (default: one step back)"),
):
    """Rollback database migrations."""
    console.print(f"[dim]Rolling back to {revision}...[/dim]")
    if _alembic("downgrade", revision) != 0:
        console.print("[red]Rollback failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Rollback complete![/green]")


@app.command("current")
def current():
    """Show current database revision."""
    _alembic("current")


@app.command("create-migration")
def create_migration(
    message: str = typer.Argument(..., help="Migration message"),
):
    """Autogenerate a migration from model changes."""
    if _alembic("revision", "--autogenerate", "-m", message) != 0:
        console.print("[red]Failed to create migration![/red]")
        raise typer.Exit(1)
    console.print("[green]Migration created![/green]")


@app.command("check")
def check():
    """Verify the database is reachable."""

    async def _check():
        try:
            await check_db()
        finally:
            await close_db()

    try:
        asyncio.run(_check())
    except Exception as e:
        console.print(f"[red]Database unreachable:[/red] {e}")
        raise typer.Exit(1) from e
    console.print("[green]Database connected[/green]")
