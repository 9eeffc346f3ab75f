"""Configuration management commands."""

import json
from typing import Any

import typer
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from questfocus.services.config_service import get_config_service
from questfocus.utils.exit_codes import ERROR_INVALID_ARGS, ERROR_NOT_FOUND
from questfocus.utils.logger import log_file_path
from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_success, format_warning

from .decorators import AppError, command_wrapper

console = get_console()
app = typer.Typer(help="Configuration management commands")


def _parse_value(raw: str, current: Any) -> Any:
    """Turn a command-line string into the type the option already holds."""
    if isinstance(current, list):
        return raw.split(",")
    if raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    # pydantic coerces numeric strings for int and float fields
    return raw


def _first_error(e: PydanticValidationError) -> str:
    error = e.errors()[0]
    return error["msg"]


@app.command("show")
@command_wrapper
def show_config():
    """Show the whole configuration and where it lives."""
    service = get_config_service()
    console.print(f"[dim]{service.config_path}[/dim]", soft_wrap=True)
    console.print_json(service.config.model_dump_json())
    console.print(f"[dim]Log file: {log_file_path()}[/dim]", soft_wrap=True)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., timer.break_duration)"),
):
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", exit_code=ERROR_NOT_FOUND)

    if isinstance(value, BaseModel):
        console.print_json(value.model_dump_json())
    elif isinstance(value, list):
        console.print_json(json.dumps(value))
    else:
        console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., timer.break_duration)"),
    value: str = typer.Argument(..., help="New value; lists are comma-separated"),
):
    """Set a configuration value."""
    service = get_config_service()
    current = service.get(key)
    if isinstance(current, BaseModel):
        raise AppError(f"'{key}' is a section, set one of its options", ERROR_INVALID_ARGS)

    try:
        service.set(key, _parse_value(value, current))
    except KeyError as e:
        raise AppError(f"Configuration key '{key}' not found", exit_code=ERROR_NOT_FOUND) from e
    except PydanticValidationError as e:
        raise AppError(f"Invalid value for '{key}': {_first_error(e)}", ERROR_INVALID_ARGS) from e

    format_success(f"Configuration '{key}' set to '{service.get(key)}'")
    if key.startswith("timer.") and key != "timer.break_activities":
        console.print("[dim]Run 'questfocus settings reset' to apply the new defaults[/dim]")


@app.command("reset")
@command_wrapper
def reset_config(
    key: str | None = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Reset configuration to defaults."""
    service = get_config_service()
    if key is not None and service.get(key) is None:
        raise AppError(f"Configuration key '{key}' not found", exit_code=ERROR_NOT_FOUND)

    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            format_warning("Cancelled")
            raise typer.Exit(0)

    service.reset_config(key)
    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
