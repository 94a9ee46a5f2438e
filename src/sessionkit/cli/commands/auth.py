"""Authentication CLI commands."""

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from sessionkit.api.models import Credentials, User
from sessionkit.auth.session_manager import SessionState
from sessionkit.cli.progress import api_spinner, print_success, print_warning
from sessionkit.cli.utils import handle_auth_errors
from sessionkit.config import get_settings
from sessionkit.services.session import SessionService

console = Console()
app = typer.Typer(help="Authentication commands")


def _print_user(user: User) -> None:
    console.print(f"  User: [bold]{user.username}[/bold] [dim](id {user.id})[/dim]")
    if user.created_at:
        console.print(f"  [dim]Member since: {user.created_at.strftime('%Y-%m-%d')}[/dim]")


async def _login(credentials: Credentials) -> User:
    async with SessionService() as service:
        return await service.session.login(credentials)


async def _register(credentials: Credentials) -> User:
    async with SessionService() as service:
        return await service.session.register(credentials)


async def _logout() -> bool:
    async with SessionService() as service:
        had_session = service.session.is_authenticated()
        await service.session.logout()
        return had_session


async def _status() -> tuple[SessionState, User | None]:
    async with SessionService() as service:
        state = await service.session.initialize()
        return state, service.session.current_user()


async def _whoami() -> User | None:
    async with SessionService() as service:
        service.guard.require("/users/me")
        await service.session.initialize()
        return service.session.current_user()


@app.command("login")
@handle_auth_errors
def do_login(
    username: Annotated[str, typer.Option("--username", "-u", prompt=True, help="Username")],
    password: Annotated[
        str,
        typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password"),
    ],
):
    """
    Log in and store the session tokens.

    The tokens are kept in the system keychain until you log out.
    """
    credentials = Credentials(username=username, password=password)

    with api_spinner(f"Logging in to {get_settings().base_url}..."):
        user = asyncio.run(_login(credentials))

    print_success("Logged in!")
    _print_user(user)


@app.command("register")
@handle_auth_errors
def do_register(
    username: Annotated[str, typer.Option("--username", "-u", prompt=True, help="Username")],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            "-p",
            prompt=True,
            hide_input=True,
            confirmation_prompt=True,
            help="Password",
        ),
    ],
):
    """Create an account and log in with it."""
    credentials = Credentials(username=username, password=password)

    with api_spinner("Creating account..."):
        user = asyncio.run(_register(credentials))

    print_success("Account created!")
    _print_user(user)


@app.command("logout")
@handle_auth_errors
def do_logout():
    """Revoke the session and remove stored tokens."""
    if asyncio.run(_logout()):
        print_success("Logged out.")
    else:
        print_warning("No session found to remove.")


@app.command("status")
@handle_auth_errors
def status():
    """Show current authentication status."""
    with api_spinner("Checking session..."):
        state, user = asyncio.run(_status())

    if state is SessionState.AUTHENTICATED and user is not None:
        console.print(f"[green]Logged in[/green] as [bold]{user.username}[/bold]")
        console.print(f"Server: [cyan]{get_settings().base_url}[/cyan]")
        return

    console.print("[red]Not logged in[/red]")
    console.print("\nLog in with: [cyan]sessionkit login[/cyan]")
    raise typer.Exit(1)


@app.command("whoami")
@handle_auth_errors
def whoami():
    """Show the user the stored session belongs to."""
    user = asyncio.run(_whoami())
    if user is None:
        print_warning("Your session has expired.")
        console.print("\nLog in again with: [cyan]sessionkit login[/cyan]")
        raise typer.Exit(1)

    _print_user(user)
