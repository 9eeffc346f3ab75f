"""Commands for moving the viewed date."""

import typer

from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_quests

from .decorators import command_wrapper, open_runtime

console = get_console()
app = typer.Typer(help="Move between days")


def _show(engine) -> None:
    format_quests(
        engine.quests(),
        engine.store.selection,
        engine.daily_record(),
        engine.selected_date,
    )


@app.command("next")
@command_wrapper
def next_day():
    """View the next day."""
    with open_runtime() as runtime:
        runtime.engine.select_date(1)
        _show(runtime.engine)


@app.command("prev")
@command_wrapper
def previous_day():
    """View the previous day."""
    with open_runtime() as runtime:
        runtime.engine.select_date(-1)
        _show(runtime.engine)


@app.command("today")
@command_wrapper
def today():
    """Jump back to today."""
    with open_runtime() as runtime:
        runtime.engine.go_to_today()
        _show(runtime.engine)


@app.command("show")
@command_wrapper
def show():
    """Show the viewed date and its quests."""
    with open_runtime() as runtime:
        _show(runtime.engine)
