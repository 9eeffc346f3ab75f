"""Adaptive daily session goals and the per-day history they are computed from."""

from dataclasses import dataclass

from .quests import shift_date_key, validate_date_key

BASE_DAILY_GOAL = 3
LOOKBACK_DAYS = 3
MIN_DAILY_GOAL = 1


@dataclass(frozen=True)
class DailyRecord:
    """Target and finished focus sessions for one date."""

    goal: int = 0
    completed: int = 0

    @property
    def failed(self) -> bool:
        """A day with a target that was not reached."""
        return self.goal > 0 and self.completed < self.goal

    @property
    def met(self) -> bool:
        return self.goal > 0 and self.completed >= self.goal


class DailyRecords:
    """The two parallel date-keyed mappings: goals and completed sessions.

    The completed counter is kept apart from the quests' own counters so goal
    tracking survives quest edits.
    """

    def __init__(
        self,
        goals: dict[str, int] | None = None,
        completed: dict[str, int] | None = None,
    ):
        self.goals: dict[str, int] = {
            validate_date_key(k): int(v) for k, v in (goals or {}).items()
        }
        self.completed: dict[str, int] = {
            validate_date_key(k): int(v) for k, v in (completed or {}).items()
        }

    def record_for(self, date_key: str) -> DailyRecord:
        """Return the record for *date_key*; missing days read as (0, 0)."""
        validate_date_key(date_key)
        return DailyRecord(
            goal=self.goals.get(date_key, 0),
            completed=self.completed.get(date_key, 0),
        )

    def has_goal(self, date_key: str) -> bool:
        return validate_date_key(date_key) in self.goals

    def set_goal(self, date_key: str, goal: int) -> None:
        if goal < 0:
            raise ValueError(f"goal must be non-negative, got {goal}")
        self.goals[validate_date_key(date_key)] = goal

    def increment_completed(self, date_key: str) -> int:
        date_key = validate_date_key(date_key)
        self.completed[date_key] = self.completed.get(date_key, 0) + 1
        return self.completed[date_key]


def generate_balanced_goal(date_key: str, level: int, records: DailyRecords) -> int:
    """
    Compute the session target for *date_key*.

    The base grows with level, gets +1 when the previous day's target was met,
    and is reduced by one for every missed target in the last three days.

    Args:
        date_key: Date the goal is for (YYYY-MM-DD)
        level: Current progression level
        records: Goal/completed history

    Returns:
        The new goal, never below 1
    """
    previous = [
        records.record_for(shift_date_key(date_key, -offset))
        for offset in range(1, LOOKBACK_DAYS + 1)
    ]
    yesterday = previous[0]

    failed_count = sum(1 for record in previous if record.failed)
    momentum_bonus = 1 if yesterday.met else 0

    new_goal = BASE_DAILY_GOAL + level // 2 + momentum_bonus
    if failed_count > 0:
        new_goal = max(MIN_DAILY_GOAL, new_goal - failed_count)
    return new_goal


def ensure_goal(date_key: str, level: int, records: DailyRecords) -> int | None:
    """Seed the goal for *date_key* if it has none. Returns the new goal, or None if one existed."""
    if records.has_goal(date_key):
        return None
    goal = generate_balanced_goal(date_key, level, records)
    records.set_goal(date_key, goal)
    return goal


@dataclass(frozen=True)
class TrailDay:
    """One checkpoint of the history trail."""

    date: str
    goal: int
    completed: int
    met: bool
    is_end: bool


def build_trail(records: DailyRecords, end_date: str, days: int = 15) -> list[TrailDay]:
    """Return the *days* most recent checkpoints ending at *end_date*, oldest first."""
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")

    trail = []
    for offset in range(days - 1, -1, -1):
        key = shift_date_key(end_date, -offset)
        record = records.record_for(key)
        trail.append(
            TrailDay(
                date=key,
                goal=record.goal,
                completed=record.completed,
                met=record.met,
                is_end=offset == 0,
            )
        )
    return trail
