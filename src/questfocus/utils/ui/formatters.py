"""Output formatters for quests, progression and history."""

from rich.table import Table
from rich.text import Text

from questfocus.models.goals import DailyRecord, TrailDay
from questfocus.models.progression import XP_PER_LEVEL, ProgressionState
from questfocus.models.quests import Quest
from questfocus.services.quest_store import Selection
from questfocus.utils.uuid_utils import shorten_uuid

from .console import get_console

console = get_console()


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[error]Error:[/error] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[success]Success:[/success] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[warning]Warning:[/warning] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[info]Info:[/info] {message}")


def format_clock(seconds: int) -> str:
    """Render seconds as M:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def get_progress_bar(percentage: float, width: int = 10) -> str:
    """Get a progress bar representation."""
    filled = min(width, int(percentage / 100 * width))
    return "▓" * filled + "░" * (width - filled)


def get_completion_color(percentage: float) -> str:
    """Get color based on completion percentage."""
    if percentage >= 100:
        return "green"
    if percentage >= 50:
        return "yellow"
    return "red"


def format_quests(
    quests: list[Quest], selection: Selection | None, record: DailyRecord, date_key: str
) -> None:
    """Print the quests of one date with their sub-quests."""
    goal_text = f"{record.completed}/{record.goal}" if record.goal else f"{record.completed}"
    console.print(f"\n[bold cyan]📅 {date_key}[/bold cyan]  Sessions: {goal_text}\n")

    if not quests:
        console.print("[dim]No quests for this day. Add one with 'questfocus quest add'.[/dim]")
        return

    for quest in quests:
        status = "✅" if quest.is_complete else "🗺️ "
        console.print(
            f"{status} [bold]{quest.title}[/bold] [dim](#{shorten_uuid(quest.id)})[/dim]  "
            f"🍅 {quest.completed}/{quest.estimated}"
        )
        for sub in quest.sub_quests:
            if sub.is_complete:
                marker = "✅"
            elif selection is not None and selection.sub_quest_id == sub.id:
                marker = "🎯"
            else:
                marker = "⚪"
            style = "dim strike" if sub.is_complete else ""
            line = Text(f"    {marker} ")
            line.append(sub.title, style=style)
            line.append(f" (#{shorten_uuid(sub.id)})", style="dim")
            console.print(line)
        if quest.remaining_slots:
            console.print(f"    [dim]{quest.remaining_slots} slot(s) left[/dim]")


def format_progression(progression: ProgressionState) -> None:
    """Print level, tier and experience."""
    tier = progression.tier
    console.print(f"\n{tier.emoji}  [bold]{tier.name}[/bold]  [dim]{tier.description}[/dim]\n")
    bar = get_progress_bar(progression.progress_percent, width=20)
    console.print(f"  {bar}  {progression.level_progress} / {XP_PER_LEVEL} XP")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    table.add_row(str(progression.level), "Level")
    table.add_row(str(progression.xp), "Total XP")
    console.print(table)

    upcoming = progression.next_tier
    if upcoming is not None:
        console.print(
            f"\n  Next: {upcoming.emoji} {upcoming.name}  "
            f"[dim]{progression.xp_to_next_level} XP needed[/dim]"
        )


def format_trail(trail: list[TrailDay]) -> None:
    """Print the checkpoint trail as a table."""
    table = Table(title="Checkpoint Trail", show_header=True)
    table.add_column("Date", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Progress")
    table.add_column("", justify="center")

    for day in trail:
        if day.goal:
            percentage = day.completed / day.goal * 100
            color = get_completion_color(percentage)
            progress = f"[{color}]{get_progress_bar(percentage)}[/{color}]"
            sessions = f"{day.completed}/{day.goal}"
        else:
            progress = "[dim]-[/dim]"
            sessions = str(day.completed) if day.completed else "[dim]0[/dim]"
        marker = "🏁" if day.met else ""
        date_text = f"[bold]{day.date}[/bold]" if day.is_end else day.date
        table.add_row(date_text, sessions, progress, marker)

    console.print(table)
