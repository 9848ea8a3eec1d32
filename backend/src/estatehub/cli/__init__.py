"""CLI commands using Typer."""

import typer

from estatehub.cli.accounts import app as accounts_app
from estatehub.cli.db import app as db_app

app = typer.Typer(name="estatehub", help="EstateHub CLI")

app.add_typer(db_app, name="db")
app.add_typer(accounts_app, name="accounts")


@app.command()
def version():
    """Show version information."""
    from estatehub import __version__

    typer.echo(f"EstateHub v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from estatehub.logging import get_uvicorn_log_config

    uvicorn.run(
        "estatehub.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


if __name__ == "__main__":
    app()
