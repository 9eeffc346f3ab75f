"""Tests for the live timer display and session panels."""

import io

import pytest
from rich.console import Console

from questfocus.models.progression import LevelUpEvent
from questfocus.ui.timer_display import (
    TimerDisplay,
    interval_length,
    show_level_up,
    show_session_status,
)


class FakeKeyboard:
    """Replays a fixed sequence of keypresses."""

    def __init__(self, keys):
        self.keys = list(keys)
        self.stopped = False

    def get_key(self):
        return self.keys.pop(0) if self.keys else None

    def stop(self):
        self.stopped = True


@pytest.fixture()
def console():
    return Console(file=io.StringIO(), width=120)


@pytest.fixture()
def focusing(engine, make_quest):
    quest = make_quest(engine)
    assert engine.start_focus(quest.sub_quests[0].id)
    return quest


def run(display, engine, keys):
    keyboard = FakeKeyboard(keys)
    result = display.run(engine, keyboard_factory=lambda: keyboard, poll_interval=0)
    return result, keyboard


class TestRun:
    def test_stop_key(self, engine, focusing, console):
        result, keyboard = run(TimerDisplay(console), engine, ["s"])
        assert result == "stopped"
        assert engine.session.is_idle
        assert keyboard.stopped

    def test_quit_leaves_session_running(self, engine, focusing, console):
        result, _ = run(TimerDisplay(console), engine, ["q"])
        assert result == "detached"
        assert engine.session.mode == "focus"

    def test_pause_then_quit(self, engine, focusing, console):
        result, _ = run(TimerDisplay(console), engine, ["p", "q"])
        assert result == "detached"
        assert engine.session.paused

    def test_skip_break_finishes(self, engine, console):
        engine.start_break()
        result, _ = run(TimerDisplay(console), engine, ["b"])
        assert result == "finished"


class TestLayout:
    def _render(self, console, layout) -> str:
        console.print(layout)
        return console.file.getvalue()

    def test_focus_layout(self, engine, focusing, console):
        text = self._render(console, TimerDisplay(console).create_layout(engine))
        assert "Focus" in text
        assert "Outline" in text
        assert "25:00" in text

    def test_break_layout_shows_activity(self, engine, console):
        engine.start_break()
        text = self._render(console, TimerDisplay(console).create_layout(engine))
        assert engine.session.activity in text
        assert "skip break" in text

    def test_interval_length(self, engine):
        assert interval_length(engine) == 1500
        engine.start_break()
        assert interval_length(engine) == 300


class TestPanels:
    def test_level_up(self, console):
        show_level_up(LevelUpEvent(previous_level=1, new_level=3, xp=2000), console)
        text = console.file.getvalue()
        assert "LEVEL UP" in text
        assert "Bee" in text
        assert "+2 levels" in text

    def test_idle_status(self, engine, console):
        show_session_status(engine, console)
        assert "No sub-quest selected" in console.file.getvalue()

    def test_paused_focus_status(self, engine, focusing, console):
        engine.pause()
        show_session_status(engine, console)
        text = console.file.getvalue()
        assert "Paused" in text
        assert "Outline" in text
