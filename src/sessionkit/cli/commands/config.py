"""Config CLI commands for managing settings."""

from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from sessionkit import config as settings_module
from sessionkit.config import Settings, get_settings, load_config, reset_settings, save_config

console = Console()
app = typer.Typer(help="Manage configuration")

# Settings that can be configured via the config command
CONFIGURABLE_KEYS = {
    "base_url": {
        "description": "Authentication server URL",
        "type": "str",
        "example": "http://localhost:8080",
    },
    "timeout": {
        "description": "HTTP timeout in seconds (5-120)",
        "type": "int",
        "example": "30",
    },
    "keyring_service": {
        "description": "Keyring service name for stored tokens",
        "type": "str",
        "example": "sessionkit",
    },
    "use_keyring": {
        "description": "Store tokens in the OS keyring",
        "type": "bool",
        "example": "true",
    },
    "login_path": {
        "description": "Redirect target for unauthenticated access",
        "type": "str",
        "example": "/login",
    },
}


def parse_value(key: str, value: str) -> str | int | bool:
    """Parse string value to appropriate type based on key."""
    key_info = CONFIGURABLE_KEYS.get(key)
    if not key_info:
        return value

    value_type = key_info["type"]

    if value_type == "bool":
        return value.lower() in ("true", "1", "yes", "on")
    elif value_type == "int":
        try:
            return int(value)
        except ValueError:
            raise typer.BadParameter(f"'{value}' is not a valid number")
    return value


def validate_value(key: str, value: str | int | bool) -> None:
    """Validate a config value against the Settings model."""
    try:
        Settings.model_validate({key: value})
    except ValidationError as e:
        raise typer.BadParameter(e.errors()[0]["msg"])


@app.command("show")
def config_show():
    """
    Show all configuration settings.

    Examples:
        sessionkit config show
    """
    config = load_config()
    settings = get_settings()

    table = Table(title="sessionkit configuration", show_header=True)
    table.add_column("Setting", style="cyan", width=18)
    table.add_column("Value", style="green", width=28)
    table.add_column("Source", style="dim", width=12)
    table.add_column("Description", style="dim", width=40)

    defaults = Settings.model_fields
    for key, info in CONFIGURABLE_KEYS.items():
        file_value = config.get(key)
        effective_value = getattr(settings, key, None)

        if file_value is not None:
            source = "config.yaml"
            display_value = str(file_value)
        elif effective_value != defaults[key].default:
            source = "env var"
            display_value = str(effective_value)
        else:
            source = "default"
            display_value = f"[dim]{effective_value}[/dim]"

        table.add_row(key, display_value, source, info["description"])

    console.print(table)
    console.print()
    console.print(f"[dim]Config file: {settings_module.CONFIG_PATH}[/dim]")


@app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Setting name")],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """
    Set a configuration value.

    Examples:
        sessionkit config set base_url https://auth.example.com
        sessionkit config set timeout 60
    """
    if key not in CONFIGURABLE_KEYS:
        console.print(f"[red]Unknown setting:[/red] {key}")
        console.print()
        console.print("[bold]Available settings:[/bold]")
        for k, info in CONFIGURABLE_KEYS.items():
            console.print(f"  [cyan]{k}[/cyan] - {info['description']}")
        raise typer.Exit(1)

    parsed_value = parse_value(key, value)
    validate_value(key, parsed_value)

    config = load_config()
    config[key] = parsed_value
    save_config(config)
    reset_settings()

    console.print(f"[green]✓[/green] {key} = {parsed_value}")


@app.command("get")
def config_get(
    key: Annotated[str, typer.Argument(help="Setting name")],
):
    """
    Show a single configuration value.

    Examples:
        sessionkit config get base_url
    """
    if key not in CONFIGURABLE_KEYS:
        console.print(f"[red]Unknown setting:[/red] {key}")
        raise typer.Exit(1)

    file_value = load_config().get(key)
    if file_value is not None:
        console.print(f"{key} = {file_value} [dim](config.yaml)[/dim]")
    else:
        console.print(f"{key} = {getattr(get_settings(), key)} [dim](default/env)[/dim]")


@app.command("reset")
def config_reset(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset without confirmation"),
    ] = False,
):
    """
    Reset all configuration to defaults.

    Examples:
        sessionkit config reset --force
    """
    config_path = settings_module.CONFIG_PATH
    if not config_path.exists():
        console.print("[yellow]No config file found.[/yellow]")
        return

    if not force:
        confirm = typer.confirm("Reset all settings to their defaults?")
        if not confirm:
            console.print("[dim]Cancelled.[/dim]")
            return

    config_path.unlink()
    reset_settings()
    console.print("[green]✓[/green] Configuration reset to defaults.")
