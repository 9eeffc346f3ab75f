"""Timer settings commands."""

import typer
from rich.table import Table

from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_success

from .decorators import command_wrapper, open_runtime, rejection_error

console = get_console()
app = typer.Typer(help="Focus and break durations")


def _print_settings(engine) -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")
    table.add_row("Focus", f"{engine.pomodoro_seconds // 60} min")
    table.add_row("Break", f"{engine.break_seconds // 60} min")
    console.print(table)


@app.command("show")
@command_wrapper
def show():
    """Show the current durations."""
    with open_runtime() as runtime:
        _print_settings(runtime.engine)


@app.command("set")
@command_wrapper
def set_durations(
    pomodoro: str | None = typer.Option(None, "--pomodoro", "-p", help="Focus minutes"),
    brk: str | None = typer.Option(None, "--break", "-b", help="Break minutes"),
):
    """Change the focus and/or break duration (minutes)."""
    with open_runtime() as runtime:
        engine = runtime.engine
        applied = engine.update_settings(pomodoro=pomodoro, brk=brk)
        if any(applied.values()):
            changed = ", ".join(name for name, ok in applied.items() if ok)
            format_success(f"Updated {changed}")
        _print_settings(engine)
        if engine.last_rejection:
            raise rejection_error(engine)


@app.command("reset")
@command_wrapper
def reset():
    """Restore the configured default durations."""
    with open_runtime() as runtime:
        runtime.engine.reset_settings()
        format_success("Durations reset")
        _print_settings(runtime.engine)
