"""User-friendly error messages with actionable suggestions."""

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel

from sessionkit.api.exceptions import AuthError


@dataclass
class ErrorInfo:
    """Structured error information for display."""

    title: str
    message: str
    suggestion: str
    command: str | None = None


# Keyed by AuthError.kind
ERROR_MESSAGES = {
    "invalid_credentials": ErrorInfo(
        title="Login failed",
        message="The username or password is incorrect.",
        suggestion="Check your credentials and try again.",
        command="sessionkit login",
    ),
    "registration_failed": ErrorInfo(
        title="Registration failed",
        message="{reason}",
        suggestion="Pick another username or a stronger password.",
        command="sessionkit register",
    ),
    "refresh_rejected": ErrorInfo(
        title="Session expired",
        message="Your session has expired.",
        suggestion="Log in again",
        command="sessionkit login",
    ),
    "unauthorized": ErrorInfo(
        title="Access denied",
        message="The server rejected your access token.",
        suggestion="Log in again",
        command="sessionkit login",
    ),
    "auth_required": ErrorInfo(
        title="Not logged in",
        message="You need to log in to do this.",
        suggestion="Log in with your account",
        command="sessionkit login",
    ),
    "network_error": ErrorInfo(
        title="Network error",
        message="Could not reach the server at {base_url}.",
        suggestion="Check your connection and the configured base_url.",
        command="sessionkit config get base_url",
    ),
    "unknown": ErrorInfo(
        title="Unexpected error",
        message="An unexpected error occurred.",
        suggestion="If this keeps happening, log out and log in again.",
        command="sessionkit logout && sessionkit login",
    ),
}


def get_error_type(error: Exception) -> str:
    """Determine error type from exception."""
    if isinstance(error, AuthError):
        return error.kind if error.kind in ERROR_MESSAGES else "unknown"
    return "unknown"


def format_error(
    error: Exception,
    console: Console,
    base_url: str | None = None,
    verbose: bool = False,
) -> None:
    """Format and display a user-friendly error message."""
    error_type = get_error_type(error)
    info = ERROR_MESSAGES[error_type]

    message = info.message.format(
        reason=getattr(error, "reason", str(error)),
        base_url=base_url or "the server",
    )

    content_lines = [
        f"[white]{message}[/white]",
        "",
        f"[yellow]Suggestion:[/yellow] {info.suggestion}",
    ]

    if info.command:
        content_lines.append("")
        content_lines.append(f"[cyan]{info.command}[/cyan]")

    # Show technical details in verbose mode
    if verbose:
        content_lines.append("")
        content_lines.append("[dim]" + "─" * 40 + "[/dim]")
        content_lines.append(f"[dim]Type: {type(error).__name__}[/dim]")
        content_lines.append(f"[dim]Details: {error}[/dim]")

    console.print()
    console.print(Panel(
        "\n".join(content_lines),
        title=f"[red bold]Error: {info.title}[/red bold]",
        border_style="red",
        padding=(1, 2),
    ))
    console.print()
