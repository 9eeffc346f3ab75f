"""Tests for the daily goal engine and the checkpoint trail.

Coverage strategy: the lookback rules (failed days, momentum, floor of one)
are exercised with hand-built DailyRecords; trail tests check ordering and
the end marker.
"""

import pytest

from questfocus.models.goals import (
    DailyRecord,
    DailyRecords,
    build_trail,
    ensure_goal,
    generate_balanced_goal,
)

DAY = "2025-03-10"


class TestDailyRecord:
    def test_failed_and_met(self):
        assert DailyRecord(goal=5, completed=2).failed
        assert not DailyRecord(goal=5, completed=2).met
        assert DailyRecord(goal=3, completed=3).met
        assert not DailyRecord(goal=0, completed=4).met
        assert not DailyRecord(goal=0, completed=0).failed

    def test_missing_day_reads_as_zero(self):
        assert DailyRecords().record_for(DAY) == DailyRecord(0, 0)


class TestGenerateBalancedGoal:
    def test_fresh_history_uses_base_plus_level(self):
        assert generate_balanced_goal(DAY, level=1, records=DailyRecords()) == 3
        assert generate_balanced_goal(DAY, level=4, records=DailyRecords()) == 5

    def test_failed_day_reduces_goal(self):
        records = DailyRecords(
            goals={"2025-03-09": 5, "2025-03-08": 4},
            completed={"2025-03-09": 2, "2025-03-08": 5},
        )
        # base 3 + 2 // 2, no momentum, one failed day
        assert generate_balanced_goal(DAY, level=2, records=records) == 3

    def test_momentum_after_met_yesterday(self):
        records = DailyRecords(goals={"2025-03-09": 3}, completed={"2025-03-09": 4})
        assert generate_balanced_goal(DAY, level=1, records=records) == 4

    def test_goal_never_below_one(self):
        records = DailyRecords(
            goals={"2025-03-09": 9, "2025-03-08": 9, "2025-03-07": 9},
            completed={},
        )
        assert generate_balanced_goal(DAY, level=1, records=records) == 1

    def test_only_three_days_are_considered(self):
        records = DailyRecords(goals={"2025-03-06": 9}, completed={})
        assert generate_balanced_goal(DAY, level=1, records=records) == 3


class TestEnsureGoal:
    def test_seeds_once(self):
        records = DailyRecords()
        assert ensure_goal(DAY, 1, records) == 3
        assert records.goals[DAY] == 3
        assert ensure_goal(DAY, 10, records) is None
        assert records.goals[DAY] == 3

    def test_invalid_date(self):
        with pytest.raises(ValueError):
            ensure_goal("2025-3-10", 1, DailyRecords())


class TestBuildTrail:
    def test_oldest_first_ending_at_date(self):
        records = DailyRecords(goals={DAY: 3}, completed={DAY: 3, "2025-03-09": 1})
        trail = build_trail(records, DAY, days=3)

        assert [d.date for d in trail] == ["2025-03-08", "2025-03-09", DAY]
        assert trail[-1].is_end
        assert not trail[0].is_end
        assert trail[-1].met
        assert trail[1].completed == 1
        assert not trail[1].met

    def test_days_must_be_positive(self):
        with pytest.raises(ValueError):
            build_trail(DailyRecords(), DAY, days=0)
