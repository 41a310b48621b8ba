"""Local user management CLI commands."""

import typer
from pydantic import EmailStr, TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from src.auth_api.core.security import PasswordHasher
from src.auth_api.core.services import DbSessionService
from src.auth_api.entities.core.user import User, UserRepository, UserTable

console = Console()

_email_adapter = TypeAdapter(EmailStr)

users_app = typer.Typer(help="Manage local user accounts")


@users_app.command("add")
def add_user(
    email: str = typer.Argument(..., help="Email address, used as the login name"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
    first_name: str = typer.Option(None, "--first-name", "-f", help="First name"),
    last_name: str = typer.Option(None, "--last-name", "-l", help="Last name"),
    role: str = typer.Option("user", "--role", "-r", help="Application role"),
    verified: bool = typer.Option(
        False, "--verified/--unverified", help="Mark the email as already verified"
    ),
) -> None:
    """Create a local user that can sign in with email and password."""
    # stored the way the HTTP layer normalizes sign-in emails
    try:
        email = _email_adapter.validate_python(email)
    except ValidationError:
        console.print(f"[red]❌ {email} is not a valid email address[/red]")
        raise typer.Exit(code=1) from None

    db_service = DbSessionService()
    db_service.create_all()

    user = None
    with db_service.session_scope() as session:
        repo = UserRepository(session)
        if repo.get_by_email(email) is None:
            user = repo.create(
                User(
                    email=email,
                    password_hash=PasswordHasher().hash(password),
                    first_name=first_name,
                    last_name=last_name,
                    role=role,
                    email_verified=verified,
                )
            )

    if user is None:
        console.print(f"[red]❌ User {email} already exists[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✅ Created user {user.email} ({user.id})[/green]")


@users_app.command("list")
def list_users(
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of users to show"),
) -> None:
    """List local users."""
    db_service = DbSessionService()

    with db_service.session_scope() as session:
        rows = session.exec(select(UserTable).limit(limit)).all()
        users = [User.model_validate(row, from_attributes=True) for row in rows]

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Email", style="blue")
    table.add_column("Role", style="magenta")
    table.add_column("Verified", style="yellow")
    table.add_column("Enabled", style="yellow")

    for user in users:
        table.add_row(
            user.id,
            user.email,
            user.role,
            "✅" if user.email_verified else "❌",
            "❌" if user.disabled else "✅",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")
