"""CLI tests for the questfocus commands.

Coverage strategy: load_runtime is redirected to a temporary data directory
and a FakeClock, so each CliRunner invocation behaves like a separate process
sharing the same files. Time passes between invocations by advancing the
clock.
"""

import json
import re

import pytest
from typer.testing import CliRunner

from questfocus import __version__
from questfocus.main import app
from questfocus.services.runtime import load_runtime

runner = CliRunner()


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return re.compile(r"\x1b\[[0-9;]*m").sub("", text)


@pytest.fixture()
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture()
def open_engine(data_dir, clock, instant_config):
    """Load a runtime the way every command does."""

    def _load():
        return load_runtime(config=instant_config, data_dir=data_dir, clock=clock)

    return _load


@pytest.fixture(autouse=True)
def cli_runtime(open_engine, monkeypatch):
    monkeypatch.setattr("questfocus.commands.decorators.load_runtime", open_engine)


@pytest.fixture()
def peek(open_engine):
    """Read engine state without going through the CLI."""

    def _peek(fn):
        runtime = open_engine()
        try:
            return fn(runtime.engine)
        finally:
            runtime.close()

    return _peek


def invoke(*args):
    result = runner.invoke(app, list(args))
    result.clean = strip_ansi(result.output)
    return result


@pytest.fixture()
def planned(peek):
    """A quest with three sub-quests; returns (quest_id, [sub_ids])."""
    assert invoke("quest", "add", "Write report", "--estimate", "3").exit_code == 0
    quest_id = peek(lambda e: e.quests()[0].id)
    for title in ("Outline", "Draft", "Edit"):
        result = invoke("quest", "sub", quest_id[:8], title)
        assert result.exit_code == 0, result.output
    sub_ids = peek(lambda e: [s.id for s in e.quests()[0].sub_quests])
    return quest_id, sub_ids


# ---------------------------------------------------------------------------
# quest
# ---------------------------------------------------------------------------


class TestQuestCommands:
    def test_add(self, peek):
        result = invoke("quest", "add", "Write report", "--estimate", "3")
        assert result.exit_code == 0
        assert "Added quest 'Write report'" in result.clean
        assert peek(lambda e: e.quests()[0].estimated) == 3

    @pytest.mark.parametrize("estimate", ["0", "2.5", "three"])
    def test_add_bad_estimate(self, estimate, peek):
        result = invoke("quest", "add", "Write report", "--estimate", estimate)
        assert result.exit_code == 2
        assert "Error" in result.clean
        assert peek(lambda e: e.quests()) == []

    def test_add_bad_date(self):
        result = invoke("quest", "add", "Later", "--estimate", "1", "--date", "2025-13-01")
        assert result.exit_code == 2

    def test_sub_unknown_quest(self):
        result = invoke("quest", "sub", "deadbeef", "Outline")
        assert result.exit_code == 5

    def test_sub_bad_date(self, planned):
        quest_id, _ = planned
        result = invoke("quest", "sub", quest_id[:8], "Extra", "--date", "2025-13-40")
        assert result.exit_code == 2
        assert "unexpected" not in result.clean

    def test_sub_over_capacity(self, planned, peek):
        quest_id, _ = planned
        result = invoke("quest", "sub", quest_id, "Extra")
        assert result.exit_code == 2
        assert peek(lambda e: len(e.quests()[0].sub_quests)) == 3

    def test_list(self, planned):
        result = invoke("quest", "list")
        assert result.exit_code == 0
        assert "Write report" in result.clean
        assert "Draft" in result.clean
        assert "2025-03-10" in result.clean

    def test_select_and_clear(self, planned, peek):
        _, subs = planned
        result = invoke("quest", "select", subs[1][:8])
        assert result.exit_code == 0
        assert "Next target: Draft" in result.clean
        assert peek(lambda e: e.store.selection.sub_quest_id) == subs[1]

        result = invoke("quest", "select", "--clear")
        assert result.exit_code == 0
        assert peek(lambda e: e.store.selection) is None

    def test_select_requires_argument(self):
        assert invoke("quest", "select").exit_code == 2


# ---------------------------------------------------------------------------
# focus
# ---------------------------------------------------------------------------


class TestFocusCommands:
    def test_full_cycle(self, planned, clock, peek):
        _, subs = planned
        result = invoke("focus", "start", subs[0][:8])
        assert result.exit_code == 0, result.output
        assert "Focusing" in result.clean
        assert "25:00" in result.clean

        clock.advance(1500)
        result = invoke("focus", "status")
        assert "Break" in result.clean

        assert peek(lambda e: e.progression.xp) == 250
        assert peek(lambda e: e.quests()[0].completed) == 1

        result = invoke("focus", "skip-break")
        assert result.exit_code == 0
        assert peek(lambda e: e.session.is_idle)

    def test_start_without_selection(self, planned):
        result = invoke("focus", "start")
        assert result.exit_code == 2
        assert "no sub-quest" in result.clean

    def test_start_twice(self, planned):
        _, subs = planned
        invoke("focus", "start", subs[0])
        result = invoke("focus", "start", subs[1])
        assert result.exit_code == 2
        assert "Cannot start focus while focus" in result.clean

    def test_pause_and_resume(self, planned, clock, peek):
        _, subs = planned
        invoke("focus", "start", subs[0])
        clock.advance(60)
        assert invoke("focus", "pause").exit_code == 0
        assert "Already paused" in invoke("focus", "pause").clean

        clock.advance(3600)
        assert peek(lambda e: e.remaining_seconds()) == 1440
        result = invoke("focus", "resume")
        assert result.exit_code == 0
        assert "24:00" in result.clean

    def test_pause_idle(self):
        result = invoke("focus", "pause")
        assert result.exit_code == 2
        assert "Cannot pause while idle" in result.clean

    def test_stop(self, planned, peek):
        _, subs = planned
        invoke("focus", "start", subs[0])
        result = invoke("focus", "stop")
        assert "Session stopped" in result.clean
        assert peek(lambda e: e.session.is_idle)
        assert "No active session" in invoke("focus", "stop").clean

    def test_skip_break_outside_break(self):
        assert invoke("focus", "skip-break").exit_code == 2

    def test_break_from_idle(self, peek):
        result = invoke("focus", "break")
        assert result.exit_code == 0
        assert peek(lambda e: e.session.mode) == "break"

    def test_watch_idle(self):
        result = invoke("focus", "watch")
        assert result.exit_code == 2
        assert "No active session" in result.clean

    def test_level_up_is_announced(self, data_dir, planned, clock):
        snapshot_path = data_dir / "questfocus.json"
        data = json.loads(snapshot_path.read_text())
        data["xp"] = 750
        snapshot_path.write_text(json.dumps(data))

        _, subs = planned
        invoke("focus", "start", subs[0])
        clock.advance(1500)
        result = invoke("focus", "status")
        assert "LEVEL UP" in result.clean
        assert "Ant" in result.clean
        assert "LEVEL UP" not in invoke("focus", "status").clean


# ---------------------------------------------------------------------------
# settings, dates, stats
# ---------------------------------------------------------------------------


class TestSettingsCommands:
    def test_show_defaults(self):
        result = invoke("settings", "show")
        assert "25 min" in result.clean
        assert "5 min" in result.clean

    def test_set(self, peek):
        result = invoke("settings", "set", "--pomodoro", "50", "--break", "10")
        assert result.exit_code == 0
        assert "50 min" in result.clean
        assert peek(lambda e: (e.pomodoro_seconds, e.break_seconds)) == (3000, 600)

    def test_set_partial_rejection(self, peek):
        result = invoke("settings", "set", "--pomodoro", "40", "--break", "abc")
        assert result.exit_code == 2
        assert peek(lambda e: (e.pomodoro_seconds, e.break_seconds)) == (2400, 300)

    def test_reset(self, peek):
        invoke("settings", "set", "--pomodoro", "50")
        assert invoke("settings", "reset").exit_code == 0
        assert peek(lambda e: e.pomodoro_seconds) == 1500


class TestDateCommands:
    def test_next_prev_today(self, peek):
        assert "2025-03-11" in invoke("date", "next").clean
        assert peek(lambda e: e.selected_date) == "2025-03-11"
        assert "2025-03-10" in invoke("date", "prev").clean
        invoke("date", "prev")
        assert "2025-03-10" in invoke("date", "today").clean

    def test_quests_follow_viewed_date(self, peek):
        invoke("date", "next")
        invoke("quest", "add", "Tomorrow", "--estimate", "1")
        assert peek(lambda e: len(e.quests("2025-03-11"))) == 1
        assert "Tomorrow" not in invoke("date", "prev").clean


class TestStatsCommands:
    def test_stats(self):
        result = invoke("stats")
        assert result.exit_code == 0
        assert "Caterpillar" in result.clean
        assert "Ant" in result.clean

    def test_trail(self):
        result = invoke("trail", "--days", "3")
        assert result.exit_code == 0
        assert "Checkpoint Trail" in result.clean
        assert "2025-03-08" in result.clean

    def test_trail_rejects_zero(self):
        assert invoke("trail", "--days", "0").exit_code == 2

    def test_version(self):
        result = invoke("version")
        assert __version__ in result.clean


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    @pytest.fixture()
    def saved(self, tmp_config):
        """Read config.json the way the next process would."""
        return lambda: json.loads(tmp_config.config_path.read_text())

    def test_show(self, tmp_config):
        result = invoke("config", "show")
        assert result.exit_code == 0
        assert "window_days" in result.clean
        assert "questfocus.log" in result.clean

    def test_get(self, tmp_config):
        result = invoke("config", "get", "history.window_days")
        assert result.exit_code == 0
        assert "15" in result.clean

    def test_get_section(self, tmp_config):
        result = invoke("config", "get", "timer")
        assert result.exit_code == 0
        assert "pomodoro_duration" in result.clean

    def test_get_unknown(self, tmp_config):
        assert invoke("config", "get", "timer.colour").exit_code == 5

    def test_set(self, tmp_config, saved):
        result = invoke("config", "set", "progression.xp_per_session", "100")
        assert result.exit_code == 0, result.output
        assert saved()["progression"]["xp_per_session"] == 100

    def test_set_list(self, tmp_config, saved):
        assert invoke("config", "set", "timer.break_activities", "Walk, Stretch").exit_code == 0
        assert saved()["timer"]["break_activities"] == ["Walk", "Stretch"]

    @pytest.mark.parametrize(
        "key,value,code",
        [
            ("history.window_days", "0", 2),
            ("progression.xp_per_session", "2.5", 2),
            ("timer", "5", 2),
            ("timer.colour", "red", 5),
        ],
    )
    def test_set_rejected(self, tmp_config, saved, key, value, code):
        invoke("config", "show")
        before = saved()
        assert invoke("config", "set", key, value).exit_code == code
        assert saved() == before

    def test_reset_key(self, tmp_config, saved):
        invoke("config", "set", "history.window_days", "30")
        assert invoke("config", "reset", "history.window_days", "--yes").exit_code == 0
        assert saved()["history"]["window_days"] == 15

    def test_reset_all(self, tmp_config, saved):
        invoke("config", "set", "timer.break_duration", "9")
        assert invoke("config", "reset", "--yes").exit_code == 0
        assert saved()["timer"]["break_duration"] == 5

    def test_reset_cancelled(self, tmp_config, saved):
        invoke("config", "set", "timer.break_duration", "9")
        result = runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert saved()["timer"]["break_duration"] == 9
