"""Main CLI application module."""

import typer
from rich.console import Console

from .user_commands import users_app

console = Console()

app = typer.Typer(
    help="Auth API - service and account management",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(users_app, name="users")


@app.command("init-db")
def init_db() -> None:
    """Create all database tables."""
    from src.auth_api.core.services import DbSessionService

    DbSessionService().create_all()
    console.print("[green]✅ Database initialized[/green]")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (defaults to config)"),
    port: int = typer.Option(None, "--port", help="Bind port (defaults to config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from src.auth_api.runtime.context import get_config

    config = get_config()
    uvicorn.run(
        "src.auth_api.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
