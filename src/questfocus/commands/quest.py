"""Quest and sub-quest commands."""

import typer

from questfocus.utils.exit_codes import ERROR_INVALID_ARGS
from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_quests, format_success
from questfocus.utils.uuid_utils import shorten_uuid

from .decorators import AppError, command_wrapper, open_runtime, rejection_error

console = get_console()
app = typer.Typer(help="Manage quests and sub-quests")


@app.command("add")
@command_wrapper
def add_quest(
    title: str = typer.Argument(..., help="Quest title"),
    estimate: str = typer.Option(
        ..., "--estimate", "-e", help="Estimated number of focus sessions"
    ),
    date: str | None = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD), defaults to the viewed date"
    ),
):
    """Add a quest to a day."""
    with open_runtime() as runtime:
        engine = runtime.engine
        quest = engine.add_quest(title, estimate, date)
        if quest is None:
            raise rejection_error(engine)

        format_success(
            f"Added quest '{quest.title}' (#{shorten_uuid(quest.id)}) "
            f"with {quest.estimated} session(s)"
        )
        record = engine.daily_record(date)
        if record.goal:
            console.print(f"[dim]Goal for {date or engine.selected_date}: {record.goal} sessions[/dim]")


@app.command("sub")
@command_wrapper
def add_sub_quest(
    quest_id: str = typer.Argument(..., help="Quest ID (or a unique prefix)"),
    title: str = typer.Argument(..., help="Sub-quest title"),
    date: str | None = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD)"),
):
    """Add a sub-quest to a quest."""
    with open_runtime() as runtime:
        sub = runtime.engine.add_sub_quest(quest_id, title, date)
        if sub is None:
            raise rejection_error(runtime.engine)
        format_success(f"Added sub-quest '{sub.title}' (#{shorten_uuid(sub.id)})")


@app.command("select")
@command_wrapper
def select_sub_quest(
    sub_quest_id: str | None = typer.Argument(None, help="Sub-quest ID (or a unique prefix)"),
    clear: bool = typer.Option(False, "--clear", help="Clear the current selection"),
):
    """Select (or toggle off) the next focus target."""
    if sub_quest_id is None and not clear:
        raise AppError("Give a sub-quest ID or --clear", exit_code=ERROR_INVALID_ARGS)

    with open_runtime() as runtime:
        engine = runtime.engine
        if not engine.select_sub_quest(None if clear else sub_quest_id):
            raise rejection_error(engine)

        sub = engine.store.selected_sub_quest()
        if sub is None:
            console.print("[dim]Selection cleared[/dim]")
        else:
            console.print(f"🎯 Next target: [bold]{sub.title}[/bold]")


@app.command("list")
@command_wrapper
def list_quests(
    date: str | None = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD)"),
):
    """List the quests of the viewed date."""
    with open_runtime() as runtime:
        engine = runtime.engine
        date_key = date or engine.selected_date
        try:
            quests = engine.quests(date_key)
            record = engine.daily_record(date_key)
        except ValueError as e:
            raise AppError(str(e), exit_code=ERROR_INVALID_ARGS) from e
        format_quests(quests, engine.store.selection, record, date_key)
