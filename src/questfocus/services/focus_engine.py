"""Focus engine: the Idle -> Focus -> Break state machine and its side effects.

The engine is the one owner of the session, the progression counter and the
quest store. Every public method takes the same re-entrant lock, so callers
on different threads (the ticker, the CLI loop) are serialized.

Countdowns are always computed as ``deadline - now`` at observation time.
Nothing is decremented per tick, so time spent suspended is reconciled by the
next tick: an interval whose deadline already passed completes immediately.
"""

import random
import threading
from collections import deque
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from questfocus.exceptions import InvalidTransitionError, QuestFocusError, ValidationError
from questfocus.models.config_models import (
    DEFAULT_BREAK_ACTIVITIES,
    DEFAULT_BREAK_MINUTES,
    DEFAULT_POMODORO_MINUTES,
    parse_duration_minutes,
)
from questfocus.models.goals import DailyRecord, TrailDay, build_trail, ensure_goal
from questfocus.models.progression import XP_PER_SESSION, LevelUpEvent, ProgressionState
from questfocus.models.quests import Quest, SubQuest, shift_date_key, today_key
from questfocus.models.state import SessionState, ViewState
from questfocus.services.persistence import Snapshot
from questfocus.services.quest_store import QuestStore, Selection
from questfocus.utils.logger import get_logger

Clock = Callable[[], datetime]
ChangeListener = Callable[[str], None]

# Change kinds passed to listeners
DATA_CHANGED = "data"
SESSION_CHANGED = "session"
VIEW_CHANGED = "view"


def local_now() -> datetime:
    return datetime.now().astimezone()


class FocusEngine:
    """Single-writer container for session, progression and quests."""

    def __init__(
        self,
        store: QuestStore | None = None,
        progression: ProgressionState | None = None,
        session: SessionState | None = None,
        pomodoro_seconds: int = DEFAULT_POMODORO_MINUTES * 60,
        break_seconds: int = DEFAULT_BREAK_MINUTES * 60,
        default_pomodoro_seconds: int = DEFAULT_POMODORO_MINUTES * 60,
        default_break_seconds: int = DEFAULT_BREAK_MINUTES * 60,
        break_activities: Sequence[str] = DEFAULT_BREAK_ACTIVITIES,
        xp_per_session: int = XP_PER_SESSION,
        clock: Clock = local_now,
        rng: random.Random | None = None,
    ):
        if not break_activities:
            raise ValueError("break_activities cannot be empty")

        self._lock = threading.RLock()
        self.progression = progression or ProgressionState()
        self.store = store or QuestStore()
        self.store.level_source = lambda: self.progression.level
        self.session = session or SessionState()

        self.pomodoro_seconds = pomodoro_seconds
        self.break_seconds = break_seconds
        self.default_pomodoro_seconds = default_pomodoro_seconds
        self.default_break_seconds = default_break_seconds
        self.break_activities = list(break_activities)
        self.xp_per_session = xp_per_session

        self.clock = clock
        self.rng = rng or random.Random()

        self.selected_date = today_key(self.clock())
        self.deadline_generation = 0
        self.last_rejection: str | None = None
        self.last_error: Exception | None = None

        self._current_day: str | None = None
        self._level_ups: deque[LevelUpEvent] = deque()
        self._listeners: list[ChangeListener] = []

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, **kwargs) -> "FocusEngine":
        """Build an engine from a persisted snapshot."""
        return cls(
            store=QuestStore(quests=snapshot.quests(), records=snapshot.records()),
            progression=ProgressionState(xp=snapshot.xp),
            pomodoro_seconds=snapshot.pomodoro_duration_seconds,
            break_seconds=snapshot.break_duration_seconds,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, kind: str) -> None:
        for listener in list(self._listeners):
            listener(kind)

    def _set_session(self, session: SessionState) -> None:
        """Swap the session and invalidate any tick scheduled for the old deadline."""
        self.session = session
        self.deadline_generation += 1
        self._notify(SESSION_CHANGED)

    def _reject(self, error: Exception) -> None:
        self.last_error = error
        self.last_rejection = str(error)
        get_logger().warning("Rejected: %s", error)

    # ------------------------------------------------------------------
    # Session transitions
    # ------------------------------------------------------------------

    def remaining_seconds(self) -> int:
        """Seconds shown on the timer; Idle shows the full focus duration."""
        with self._lock:
            if self.session.is_idle:
                return self.pomodoro_seconds
            return self.session.time_remaining(self.clock())

    def start_focus(self, sub_quest_id: str | None = None) -> bool:
        """
        Start a focus interval on the selected sub-quest.

        If *sub_quest_id* is given it is selected first. Only valid from Idle
        with an incomplete sub-quest selected.
        """
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if not self.session.is_idle:
                self._reject(InvalidTransitionError("start focus", self.session.label))
                return False

            try:
                if sub_quest_id is not None:
                    sub_quest_id = self.store.resolve_sub_quest_id(self.selected_date, sub_quest_id)
                    selection = self.store.selection
                    if selection is None or selection.sub_quest_id != sub_quest_id:
                        self.store.select_sub_quest(self.selected_date, sub_quest_id)
            except QuestFocusError as e:
                self._reject(e)
                return False

            selection = self.store.selection
            sub = self.store.selected_sub_quest()
            if selection is None or sub is None or sub.is_complete:
                self._reject(InvalidTransitionError("start focus", "no sub-quest is selected"))
                return False

            now = self.clock()
            self._set_session(
                SessionState(
                    mode="focus",
                    deadline=(now + timedelta(seconds=self.pomodoro_seconds)).isoformat(),
                    anchor_date=selection.date,
                    anchor_quest_id=selection.quest_id,
                    anchor_sub_quest_id=selection.sub_quest_id,
                    started_at=now.isoformat(),
                )
            )
            get_logger().info("Focus started on '%s' (%ds)", sub.title, self.pomodoro_seconds)
            return True

    def start_break(self) -> bool:
        """Start a break from Idle. Focus completion enters a break on its own."""
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if not self.session.is_idle:
                self._reject(InvalidTransitionError("start a break", self.session.label))
                return False
            self._enter_break()
            return True

    def _enter_break(self) -> None:
        now = self.clock()
        activity = self.rng.choice(self.break_activities)
        self._set_session(
            SessionState(
                mode="break",
                deadline=(now + timedelta(seconds=self.break_seconds)).isoformat(),
                activity=activity,
                started_at=now.isoformat(),
            )
        )
        get_logger().info("Break started: %s (%ds)", activity, self.break_seconds)

    def pause(self) -> bool:
        """Freeze the running interval. Pausing twice is a no-op."""
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if self.session.is_idle:
                self._reject(InvalidTransitionError("pause", "idle"))
                return False
            if self.session.paused:
                get_logger().debug("Pause ignored: already paused")
                return False

            remaining = self.session.time_remaining(self.clock())
            self.session.paused = True
            self.session.remaining_seconds = remaining
            self.session.deadline = None
            self.deadline_generation += 1
            self._notify(SESSION_CHANGED)
            return True

    def resume(self) -> bool:
        """Re-anchor a paused interval to ``now + remaining``."""
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if not self.session.paused:
                self._reject(InvalidTransitionError("resume", self.session.label))
                return False

            now = self.clock()
            remaining = self.session.remaining_seconds or 0
            self.session.deadline = (now + timedelta(seconds=remaining)).isoformat()
            self.session.remaining_seconds = None
            self.session.paused = False
            self.deadline_generation += 1
            self._notify(SESSION_CHANGED)
            return True

    def stop(self) -> bool:
        """Cancel whatever is running. Nothing is awarded or completed."""
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if not self.session.is_idle:
                get_logger().info("Session stopped during %s", self.session.label)
            self._set_session(SessionState())
            return True

    def skip_break(self) -> bool:
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if self.session.mode != "break":
                self._reject(InvalidTransitionError("skip the break", self.session.label))
                return False
            self._set_session(SessionState())
            return True

    def tick(self) -> int:
        """
        Re-evaluate the deadline.

        Completes the interval when the remaining time reaches zero and
        returns the seconds now shown on the timer.
        """
        with self._lock:
            now = self.clock()
            self._roll_day(now)

            if not self.session.is_running:
                return self.remaining_seconds()

            if self.session.time_remaining(now) > 0:
                return self.session.time_remaining(now)

            if self.session.mode == "focus":
                self._complete_focus()
                self._enter_break()
            else:
                get_logger().info("Break finished")
                self._set_session(SessionState())
            return self.remaining_seconds()

    def _complete_focus(self) -> None:
        session = self.session
        try:
            completed = self.store.complete_sub_quest(
                session.anchor_date, session.anchor_quest_id, session.anchor_sub_quest_id
            )
        except QuestFocusError as e:
            get_logger().warning("Focus finished but its sub-quest is gone: %s", e)
            completed = False

        if not completed:
            return

        event = self.progression.award(self.xp_per_session)
        get_logger().info(
            "Focus completed on %s; xp=%d level=%d",
            session.anchor_date,
            self.progression.xp,
            self.progression.level,
        )
        if event is not None:
            get_logger().info("Level up: %d -> %d", event.previous_level, event.new_level)
            self._level_ups.append(event)
        self._notify(DATA_CHANGED)

    def _roll_day(self, now: datetime) -> None:
        today = today_key(now)
        if today == self._current_day:
            return
        self._current_day = today
        goal = ensure_goal(today, self.progression.level, self.store.records)
        if goal is not None:
            get_logger().info("New day %s, goal %d sessions", today, goal)
            self._notify(DATA_CHANGED)

    def drain_level_ups(self) -> list[LevelUpEvent]:
        """Return and clear pending level-up events (each is delivered once)."""
        with self._lock:
            events = list(self._level_ups)
            self._level_ups.clear()
            return events

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def update_settings(
        self, pomodoro: int | str | None = None, brk: int | str | None = None
    ) -> dict[str, bool]:
        """
        Change the durations, in minutes.

        Each value is validated on its own; a rejected value keeps the
        previous setting.

        Returns:
            Which of "pomodoro" and "break" were applied
        """
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            applied = {"pomodoro": False, "break": False}
            for name, value in (("pomodoro", pomodoro), ("break", brk)):
                if value is None:
                    continue
                try:
                    seconds = parse_duration_minutes(value) * 60
                except ValueError as e:
                    self._reject(ValidationError(f"{name}: {e}"))
                    continue
                if name == "pomodoro":
                    self.pomodoro_seconds = seconds
                else:
                    self.break_seconds = seconds
                applied[name] = True

            if any(applied.values()):
                self._notify(DATA_CHANGED)
            return applied

    def reset_settings(self) -> None:
        with self._lock:
            self.pomodoro_seconds = self.default_pomodoro_seconds
            self.break_seconds = self.default_break_seconds
            self._notify(DATA_CHANGED)

    # ------------------------------------------------------------------
    # Dates and quests
    # ------------------------------------------------------------------

    def select_date(self, offset: int) -> str:
        """Move the viewed date by *offset* days."""
        with self._lock:
            self.selected_date = shift_date_key(self.selected_date, offset)
            self._notify(VIEW_CHANGED)
            return self.selected_date

    def go_to_today(self) -> str:
        with self._lock:
            self.selected_date = today_key(self.clock())
            self._notify(VIEW_CHANGED)
            return self.selected_date

    def add_quest(self, title: str, estimated: int | str, date_key: str | None = None) -> Quest | None:
        """Add a quest to the viewed date (or *date_key*). Returns None when rejected."""
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            if isinstance(estimated, str):
                try:
                    estimated = int(estimated.strip())
                except ValueError:
                    self._reject(
                        ValidationError(f"Estimate must be a positive integer, got {estimated!r}")
                    )
                    return None
            try:
                quest = self.store.add_quest(date_key or self.selected_date, title, estimated)
            except (QuestFocusError, ValueError) as e:
                self._reject(e)
                return None
            self._notify(DATA_CHANGED)
            return quest

    def add_sub_quest(self, quest_id: str, title: str, date_key: str | None = None) -> SubQuest | None:
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            try:
                date_key = date_key or self.selected_date
                quest_id = self.store.resolve_quest_id(date_key, quest_id)
                sub = self.store.add_sub_quest(date_key, quest_id, title)
            except (QuestFocusError, ValueError) as e:
                self._reject(e)
                return None
            self._notify(DATA_CHANGED)
            return sub

    def select_sub_quest(self, sub_quest_id: str | None, date_key: str | None = None) -> bool:
        """Toggle the focus target. Returns False when the selection was rejected."""
        with self._lock:
            self.last_rejection = None
            self.last_error = None
            try:
                date_key = date_key or self.selected_date
                if sub_quest_id is not None:
                    sub_quest_id = self.store.resolve_sub_quest_id(date_key, sub_quest_id)
                self.store.select_sub_quest(date_key, sub_quest_id)
            except (QuestFocusError, ValueError) as e:
                self._reject(e)
                return False
            self._notify(VIEW_CHANGED)
            return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def quests(self, date_key: str | None = None) -> list[Quest]:
        with self._lock:
            return list(self.store.quests_for(date_key or self.selected_date))

    def focus_target(self) -> SubQuest | None:
        """The sub-quest the running focus interval is anchored to."""
        with self._lock:
            session = self.session
            if session.mode != "focus" or not session.anchor_date:
                return None
            quest = self.store.quests.find(session.anchor_date, session.anchor_quest_id)
            if quest is None:
                return None
            return quest.find_sub_quest(session.anchor_sub_quest_id)

    def daily_record(self, date_key: str | None = None) -> DailyRecord:
        with self._lock:
            return self.store.records.record_for(date_key or self.selected_date)

    def sessions_completed(self, date_key: str | None = None) -> int:
        with self._lock:
            return self.store.sessions_completed_for_date(date_key or self.selected_date)

    def trail(self, days: int = 15, end_date: str | None = None) -> list[TrailDay]:
        with self._lock:
            return build_trail(self.store.records, end_date or self.selected_date, days)

    def snapshot(self) -> Snapshot:
        """Serializable copy of everything that outlives the process."""
        with self._lock:
            return Snapshot.model_validate(
                {
                    "questsByDate": self.store.quests.to_dict(),
                    "xp": self.progression.xp,
                    "pomodoroDurationSeconds": self.pomodoro_seconds,
                    "breakDurationSeconds": self.break_seconds,
                    "dailyGoals": dict(self.store.records.goals),
                    "completedTasks": dict(self.store.records.completed),
                }
            )

    def view_state(self) -> ViewState:
        with self._lock:
            selection = self.store.selection
            return ViewState(
                selected_date=self.selected_date,
                viewed_on=today_key(self.clock()),
                selection_date=selection.date if selection else None,
                selection_quest_id=selection.quest_id if selection else None,
                selection_sub_quest_id=selection.sub_quest_id if selection else None,
            )

    def restore_view(self, view: ViewState) -> None:
        """
        Reapply a saved view.

        A view saved on an earlier day goes back to today. A selection that
        no longer points at an incomplete sub-quest is dropped.
        """
        with self._lock:
            today = today_key(self.clock())
            if view.selected_date and view.viewed_on == today:
                try:
                    self.selected_date = shift_date_key(view.selected_date, 0)
                except ValueError:
                    self.selected_date = today

            self.store.selection = None
            if view.selection_date and view.selection_quest_id and view.selection_sub_quest_id:
                quest = self.store.quests.find(view.selection_date, view.selection_quest_id)
                sub = quest.find_sub_quest(view.selection_sub_quest_id) if quest else None
                if sub is not None and not sub.is_complete:
                    self.store.selection = Selection(
                        date=view.selection_date,
                        quest_id=view.selection_quest_id,
                        sub_quest_id=view.selection_sub_quest_id,
                    )
