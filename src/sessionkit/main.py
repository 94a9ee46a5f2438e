"""Main CLI entry point for sessionkit."""

from typing import Annotated

import typer

from sessionkit import __version__
from sessionkit.cli.commands import auth, config, request
from sessionkit.cli.utils import configure_logging

app = typer.Typer(
    name="sessionkit",
    help="Bearer-token session client: login, session restore and authenticated requests",
    no_args_is_help=True,
)

app.command("login")(auth.do_login)
app.command("register")(auth.do_register)
app.command("logout")(auth.do_logout)
app.command("status")(auth.status)
app.command("whoami")(auth.whoami)
app.command("request")(request.request)

# Add subcommand groups
app.add_typer(config.app, name="config", help="Manage configuration")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sessionkit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = None,
):
    """Bearer-token session client."""
    configure_logging(verbose)


if __name__ == "__main__":
    app()
