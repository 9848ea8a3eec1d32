"""Account management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from estatehub.config import settings
from estatehub.database import get_session_context
from estatehub.models import Account, AccountRole
from estatehub.services.auth import get_account_by_email, hash_password
from estatehub.services.moderation import moderation_state, reset_to_pending

console = Console()
app = typer.Typer(help="Account management commands")


@app.command("list")
def list_accounts(
    role: AccountRole | None = typer.Option(None, "--role", "-r", help="Only show this role"),
):
    """List accounts."""

    async def _list():
        async with get_session_context() as session:
            stmt = select(Account).order_by(Account.email)
            if role:
                stmt = stmt.where(Account.role == role)
            result = await session.execute(stmt)
            accounts = result.scalars().all()

            table = Table(title="Accounts")
            table.add_column("ID", style="cyan")
            table.add_column("Email", style="green")
            table.add_column("Role", style="magenta")
            table.add_column("State")
            table.add_column("Created", style="dim")

            for account in accounts:
                created = account.created_at.strftime("%Y-%m-%d") if account.created_at else "-"
                table.add_row(
                    account.id,
                    account.email,
                    account.role.value,
                    moderation_state(account).value,
                    created,
                )

            console.print(table)

    asyncio.run(_list())


@app.command("create-admin")
def create_admin(
    email: str = typer.Argument(..., help="Admin email"),
    name: str = typer.Option("Administrator", "--name", "-n", help="Display name"),
    contact: str = typer.Option("0000000000", "--contact", help="10-digit contact number"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
):
    """Create an admin account. Admins cannot sign up through the API."""
    email = email.strip().lower()
    if len(password) < 8:
        console.print("[red]Error:[/red] Password must be at least 8 characters")
        raise typer.Exit(1)

    async def _create():
        async with get_session_context() as session:
            if await get_account_by_email(session, email):
                console.print(f"[red]Error:[/red] Account {email} already exists")
                raise typer.Exit(1)

            account = Account(
                name=name,
                email=email,
                password_hash=hash_password(password, settings.bcrypt_rounds),
                contact=contact,
                role=AccountRole.ADMIN,
                is_approved=True,
            )
            session.add(account)
            await session.commit()
            console.print(f"[green]Created admin:[/green] {email}")

    asyncio.run(_create())


@app.command("set-role")
def set_role(
    email: str = typer.Argument(..., help="Account email"),
    role: AccountRole = typer.Argument(..., help="New role"),
):
    """Change an account's role. Moving to agent sends the account back for review."""
    email = email.strip().lower()

    async def _set():
        async with get_session_context() as session:
            account = await get_account_by_email(session, email)
            if not account:
                console.print(f"[red]Error:[/red] Account {email} not found")
                raise typer.Exit(1)

            if account.role == role:
                console.print(f"[yellow]Warning:[/yellow] {email} already has role {role.value}")
                return

            account.role = role
            if role == AccountRole.AGENT:
                reset_to_pending(account)
            else:
                account.is_approved = True
            await session.commit()
            console.print(f"[green]Updated role:[/green] {email} -> {role.value}")

    asyncio.run(_set())
