"""CLI utility functions and decorators."""

import logging
from functools import wraps
from typing import Callable, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console

from sessionkit.api.exceptions import AuthError
from sessionkit.cli.errors import format_error
from sessionkit.config import get_settings

console = Console()

F = TypeVar("F", bound=Callable)


def configure_logging(verbose: bool = False) -> None:
    """Route library logging to stderr; DEBUG with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def handle_auth_errors(f: F) -> F:
    """Decorator to handle authentication errors in CLI commands.

    This decorator catches and handles:
    - AuthError subclasses: Shows a formatted panel keyed by error kind
    - ValidationError: Shows which input field was rejected

    Usage:
        @app.command()
        @handle_auth_errors
        def my_command():
            ...
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except AuthError as e:
            format_error(
                e,
                console,
                base_url=get_settings().base_url,
                verbose=logging.getLogger().isEnabledFor(logging.DEBUG),
            )
            raise typer.Exit(1)
        except ValidationError as e:
            for err in e.errors():
                field = ".".join(str(loc) for loc in err["loc"])
                console.print(f"[red]Invalid {field}:[/red] {err['msg']}")
            raise typer.Exit(1)

    return wrapper  # type: ignore
