"""Send authenticated requests to the server."""

import asyncio
import json
from typing import Annotated, Any

import httpx
import typer
from rich.console import Console
from rich.syntax import Syntax

from sessionkit.cli.utils import handle_auth_errors
from sessionkit.services.session import SessionService

console = Console()

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def parse_headers(values: list[str] | None) -> dict[str, str]:
    """Parse ``Name: value`` pairs from the command line."""
    headers: dict[str, str] = {}
    for value in values or []:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Invalid header '{value}', expected 'Name: value'")
        headers[name.strip()] = content.strip()
    return headers


def parse_data(data: str | None) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--data is not valid JSON: {e}")


async def _send(method: str, path: str, headers: dict[str, str], body: Any) -> httpx.Response:
    async with SessionService() as service:
        service.guard.require(path)
        kwargs: dict[str, Any] = {"headers": headers}
        if body is not None:
            kwargs["json"] = body
        return await service.requests.send(method, path, **kwargs)


def _print_response(response: httpx.Response) -> None:
    color = "green" if response.is_success else "red"
    console.print(f"[{color}]{response.status_code} {response.reason_phrase}[/{color}]")
    if not response.content:
        return
    try:
        pretty = json.dumps(response.json(), indent=2, ensure_ascii=False)
    except ValueError:
        console.print(response.text)
        return
    console.print(Syntax(pretty, "json", theme="ansi_dark"))


@handle_auth_errors
def request(
    method: Annotated[str, typer.Argument(help="HTTP method (GET, POST, ...)")],
    path: Annotated[str, typer.Argument(help="Path relative to base_url, e.g. /live-data")],
    data: Annotated[
        str | None,
        typer.Option("--data", "-d", help="JSON request body"),
    ] = None,
    header: Annotated[
        list[str] | None,
        typer.Option("--header", "-H", help="Extra header 'Name: value' (repeatable)"),
    ] = None,
):
    """
    Send an authenticated request.

    The stored access token is attached; an expired token is refreshed once
    and the request retried.

    Examples:
        sessionkit request GET /live-data
        sessionkit request POST /notes -d '{"text": "hi"}'
    """
    method = method.upper()
    if method not in METHODS:
        raise typer.BadParameter(f"Unsupported method '{method}'")

    response = asyncio.run(_send(method, path, parse_headers(header), parse_data(data)))
    _print_response(response)
    if not response.is_success:
        raise typer.Exit(1)
