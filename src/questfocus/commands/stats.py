"""Progression and history commands."""

import typer

from questfocus.utils.exit_codes import ERROR_INVALID_ARGS
from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_progression, format_trail

from .decorators import AppError, command_wrapper, open_runtime

console = get_console()


@command_wrapper
def stats():
    """Show level, experience and today's sessions."""
    with open_runtime() as runtime:
        engine = runtime.engine
        format_progression(engine.progression)
        record = engine.daily_record()
        goal = f"/{record.goal}" if record.goal else ""
        console.print(
            f"\n📅 {engine.selected_date}: {record.completed}{goal} sessions "
            f"([dim]{engine.sessions_completed()} on quests[/dim])"
        )


@command_wrapper
def trail(
    days: int | None = typer.Option(None, "--days", "-n", help="Number of days to show"),
):
    """Show the checkpoint trail of recent days."""
    with open_runtime() as runtime:
        if days is None:
            days = runtime.config.history.window_days
        if days <= 0:
            raise AppError("--days must be positive", exit_code=ERROR_INVALID_ARGS)
        format_trail(runtime.engine.trail(days))
