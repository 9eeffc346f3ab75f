"""Full-screen timer UI and session panels."""

import time
from collections.abc import Callable

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from questfocus.models.progression import LevelUpEvent
from questfocus.services.focus_engine import FocusEngine
from questfocus.services.ticker import FocusTicker
from questfocus.utils.ui.formatters import format_clock

from .keyboard import KeyboardHandler


def interval_length(engine: FocusEngine) -> int:
    """Full length of the current interval in seconds."""
    if engine.session.mode == "break":
        return engine.break_seconds
    return engine.pomodoro_seconds


class TimerDisplay:
    """Manages the fullscreen timer display."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def create_layout(self, engine: FocusEngine) -> Layout:
        """Create the timer layout with all components."""
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        session = engine.session
        if session.paused:
            emoji, title, color = "⏸️ ", "PAUSED", "yellow"
        elif session.mode == "focus":
            emoji, title, color = "🍅", "Focus", "cyan"
        elif session.mode == "break":
            emoji, title, color = "☕", "Break", "green"
        else:
            emoji, title, color = "✓", "IDLE", "dim"

        header_text = Text(f"{emoji}  {title}", style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header_text, vertical="middle"))

        layout["body"].update(Align.center(self._create_body_content(engine), vertical="middle"))

        footer_text = self._create_footer_text(engine)
        layout["footer"].update(Align.center(footer_text, vertical="middle"))

        return layout

    def _create_body_content(self, engine: FocusEngine) -> Group:
        components = []
        session = engine.session

        if session.mode == "focus":
            sub = engine.focus_target()
            if sub is not None:
                components.append(
                    Text(f"Focusing on: {sub.title[:50]}", style="bold white", justify="center")
                )
                components.append(Text(""))
        elif session.mode == "break" and session.activity:
            components.append(
                Text(f"Break: {session.activity}", style="bold white", justify="center")
            )
            components.append(Text(""))

        remaining = engine.remaining_seconds()
        if session.paused:
            timer_color = "yellow"
        elif remaining < 60:
            timer_color = "red"
        else:
            timer_color = "cyan"
        components.append(
            Text(format_clock(remaining), style=f"bold {timer_color}", justify="center")
        )
        components.append(Text(""))

        total = interval_length(engine)
        progress_pct = min(100, int((total - remaining) / total * 100)) if total > 0 else 0
        bar_width = 40
        filled = int(bar_width * progress_pct / 100)
        components.append(
            Text(
                "▓" * filled + "░" * (bar_width - filled) + f"  {progress_pct}%",
                style="dim",
                justify="center",
            )
        )
        return Group(*components)

    def _create_footer_text(self, engine: FocusEngine) -> Text:
        """Create footer with keyboard hints."""
        session = engine.session
        hints = ["'r' to resume" if session.paused else "'p' to pause"]
        if session.mode == "break":
            hints.append("'b' to skip break")
        hints.extend(["'s' to stop", "'q' to leave running"])
        return Text("Press " + "  •  ".join(hints), style="dim", justify="center")

    def run(
        self,
        engine: FocusEngine,
        keyboard_factory: Callable[[], KeyboardHandler] = KeyboardHandler,
        poll_interval: float = 0.25,
    ) -> str:
        """
        Show the live timer until the session ends.

        Returns 'finished' when the session reaches Idle on its own,
        'stopped' on 's', and 'detached' on 'q' or Ctrl-C (the session keeps
        its deadline and carries on without the display).
        """
        ticker = FocusTicker(engine)
        ticker.start()
        keyboard = keyboard_factory()

        try:
            with Live(
                self.create_layout(engine),
                console=self.console,
                refresh_per_second=4,
                screen=True,
            ) as live:
                while True:
                    key = keyboard.get_key()
                    if key == "p":
                        engine.pause()
                    elif key == "r":
                        engine.resume()
                    elif key == "b":
                        engine.skip_break()
                    elif key == "s":
                        engine.stop()
                        return "stopped"
                    elif key == "q":
                        return "detached"

                    if engine.session.is_idle:
                        return "finished"

                    live.update(self.create_layout(engine))
                    time.sleep(poll_interval)

        except KeyboardInterrupt:
            return "detached"
        finally:
            keyboard.stop()
            ticker.stop()


def show_level_up(event: LevelUpEvent, console: Console | None = None):
    """Celebrate a level change."""
    console = console or Console()
    tier = event.tier
    levels = f" (+{event.levels_gained} levels)" if event.levels_gained > 1 else ""

    panel = Panel(
        f"""[bold]🎉 LEVEL UP! 🎉[/bold]

{tier.emoji}  You are now a [bold]{tier.name}[/bold]!
Level {event.new_level}{levels}
[dim]{tier.description}[/dim]""",
        border_style="yellow",
        padding=(1, 2),
    )
    console.print(panel)


def show_session_status(engine: FocusEngine, console: Console | None = None):
    """Print the current session and its remaining time."""
    console = console or Console()
    session = engine.session
    remaining = format_clock(engine.remaining_seconds())

    if session.is_idle:
        sub = engine.store.selected_sub_quest()
        target = f"Next target: {sub.title}" if sub else "No sub-quest selected"
        body = f"[dim]Idle[/dim]  {remaining}\n{target}"
        style = "dim"
    elif session.mode == "focus":
        sub = engine.focus_target()
        state = "Paused" if session.paused else "Focusing"
        body = f"🍅 [bold]{state}[/bold]  {remaining}\nTask: {sub.title if sub else 'N/A'}"
        style = "yellow" if session.paused else "cyan"
    else:
        state = "Paused break" if session.paused else "Break"
        body = f"☕ [bold]{state}[/bold]  {remaining}\nActivity: {session.activity}"
        style = "yellow" if session.paused else "green"

    console.print(Panel(body, border_style=style, padding=(1, 2)))
