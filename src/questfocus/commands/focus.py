"""Focus session commands: start, pause, resume, stop and the live timer."""

import typer

from questfocus.ui.timer_display import TimerDisplay, show_session_status
from questfocus.utils.exit_codes import ERROR_INVALID_ARGS
from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_info, format_warning

from .decorators import AppError, command_wrapper, open_runtime, rejection_error

console = get_console()
app = typer.Typer(help="Focus sessions with a Pomodoro timer")


def _watch(engine) -> None:
    result = TimerDisplay(console).run(engine)
    if result == "finished":
        console.print("[bold green]✓ Interval finished[/bold green]")
    elif result == "stopped":
        console.print("[yellow]⏹ Session stopped[/yellow]")
    else:
        format_info("Timer keeps running. Use 'questfocus focus status' to check on it.")


@app.command("start")
@command_wrapper
def start_focus(
    sub_quest_id: str | None = typer.Argument(
        None, help="Sub-quest to focus on (defaults to the current selection)"
    ),
    watch: bool = typer.Option(False, "--watch", "-w", help="Open the fullscreen timer"),
):
    """Start a focus interval on a sub-quest."""
    with open_runtime() as runtime:
        engine = runtime.engine
        if not engine.start_focus(sub_quest_id):
            raise rejection_error(engine)
        show_session_status(engine, console)
        if watch:
            _watch(engine)


@app.command("break")
@command_wrapper
def start_break(
    watch: bool = typer.Option(False, "--watch", "-w", help="Open the fullscreen timer"),
):
    """Take a break without a focus interval first."""
    with open_runtime() as runtime:
        engine = runtime.engine
        if not engine.start_break():
            raise rejection_error(engine)
        show_session_status(engine, console)
        if watch:
            _watch(engine)


@app.command("pause")
@command_wrapper
def pause():
    """Pause the running interval."""
    with open_runtime() as runtime:
        engine = runtime.engine
        if not engine.pause():
            if engine.last_rejection:
                raise rejection_error(engine)
            format_warning("Already paused")
            return
        show_session_status(engine, console)


@app.command("resume")
@command_wrapper
def resume():
    """Resume a paused interval."""
    with open_runtime() as runtime:
        engine = runtime.engine
        if not engine.resume():
            raise rejection_error(engine)
        show_session_status(engine, console)


@app.command("stop")
@command_wrapper
def stop():
    """Cancel the current interval without completing anything."""
    with open_runtime() as runtime:
        engine = runtime.engine
        was_idle = engine.session.is_idle
        engine.stop()
        if was_idle:
            console.print("[dim]No active session[/dim]")
        else:
            console.print("[yellow]⏹ Session stopped[/yellow]")


@app.command("skip-break")
@command_wrapper
def skip_break():
    """End the break early."""
    with open_runtime() as runtime:
        engine = runtime.engine
        if not engine.skip_break():
            raise rejection_error(engine)
        console.print("[green]Break skipped, ready for the next quest[/green]")


@app.command("status")
@command_wrapper
def status():
    """Show the current session."""
    with open_runtime() as runtime:
        show_session_status(runtime.engine, console)


@app.command("watch")
@command_wrapper
def watch():
    """Open the fullscreen timer for the current session."""
    with open_runtime() as runtime:
        engine = runtime.engine
        if engine.session.is_idle:
            raise AppError("No active session to watch", exit_code=ERROR_INVALID_ARGS)
        _watch(engine)
