"""Main entry point for QuestFocus."""

import typer

from questfocus import __version__
from questfocus.commands import config, date, focus, quest, settings, stats
from questfocus.utils.ui.console import get_console

app = typer.Typer(
    name="questfocus",
    help="Gamified focus sessions: quests, Pomodoro intervals and levels",
    no_args_is_help=True,
)

console = get_console()


app.add_typer(date.app, name="date", help="Move between days")
app.add_typer(quest.app, name="quest", help="Quest and sub-quest management")
app.add_typer(focus.app, name="focus", help="Pomodoro focus sessions")
app.add_typer(settings.app, name="settings", help="Focus and break durations")
app.add_typer(config.app, name="config", help="Configuration management")

app.command("stats")(stats.stats)
app.command("trail")(stats.trail)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]QuestFocus[/bold] version [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
