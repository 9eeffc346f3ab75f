"""Snapshot persistence: one JSON document holding quests, experience and history.

Writes are coalesced by DebouncedWriter so a burst of mutations produces a
single file write; anything still pending is flushed at interpreter exit.
"""

from __future__ import annotations

import atexit
import json
import os
import threading
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from questfocus.models.config_models import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_POMODORO_MINUTES,
)
from questfocus.models.goals import DailyRecords
from questfocus.models.quests import DatedQuests, validate_date_key
from questfocus.utils.logger import get_logger

SNAPSHOT_FILE = "questfocus.json"


class SubQuestRecord(BaseModel):
    """Wire form of a sub-quest."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    is_complete: bool = Field(default=False, alias="isComplete")


class QuestRecord(BaseModel):
    """Wire form of a quest."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    estimated: int = Field(gt=0)
    completed: int = Field(default=0, ge=0)
    is_complete: bool = Field(default=False, alias="isComplete")
    sub_quests: list[SubQuestRecord] = Field(default_factory=list, alias="subQuests")

    @model_validator(mode="after")
    def check_capacity(self) -> "QuestRecord":
        if len(self.sub_quests) > self.estimated:
            raise ValueError(
                f"quest {self.id} has {len(self.sub_quests)} sub-quests "
                f"but only {self.estimated} slots"
            )
        return self


def _check_date_keys(value: dict) -> dict:
    for key in value:
        validate_date_key(key)
    return value


class Snapshot(BaseModel):
    """Everything the engine persists between runs."""

    model_config = ConfigDict(populate_by_name=True)

    quests_by_date: dict[str, list[QuestRecord]] = Field(
        default_factory=dict, alias="questsByDate"
    )
    xp: int = Field(default=0, ge=0)
    pomodoro_duration_seconds: int = Field(
        default=DEFAULT_POMODORO_MINUTES * 60, gt=0, alias="pomodoroDurationSeconds"
    )
    break_duration_seconds: int = Field(
        default=DEFAULT_BREAK_MINUTES * 60, gt=0, alias="breakDurationSeconds"
    )
    daily_goals: dict[str, int] = Field(default_factory=dict, alias="dailyGoals")
    completed_tasks: dict[str, int] = Field(
        default_factory=dict, alias="completedTasks"
    )

    @field_validator("quests_by_date", "daily_goals", "completed_tasks")
    @classmethod
    def validate_dates(cls, v: dict) -> dict:
        """Every mapping is keyed by YYYY-MM-DD."""
        return _check_date_keys(v)

    @field_validator("daily_goals", "completed_tasks")
    @classmethod
    def validate_counts(cls, v: dict[str, int]) -> dict[str, int]:
        """Counters are never negative."""
        for key, count in v.items():
            if count < 0:
                raise ValueError(f"negative count for {key}: {count}")
        return v

    def quests(self) -> DatedQuests:
        return DatedQuests.from_dict(self.model_dump(by_alias=True)["questsByDate"])

    def records(self) -> DailyRecords:
        return DailyRecords(goals=self.daily_goals, completed=self.completed_tasks)


class SnapshotStore:
    """Reads and writes the snapshot file."""

    def __init__(self, data_dir: Path | None = None):
        if data_dir is None:
            from platformdirs import user_data_dir

            data_dir = Path(user_data_dir("questfocus"))

        self.data_dir = data_dir
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / SNAPSHOT_FILE

    def load(self, default: Snapshot | None = None) -> Snapshot:
        """Load the snapshot. A missing or unreadable file yields *default*."""
        default = default or Snapshot()
        if not self.path.exists():
            return default

        try:
            with open(self.path, encoding="utf-8") as f:
                return Snapshot.model_validate_json(f.read())
        except (OSError, ValidationError, ValueError) as e:
            get_logger().warning(
                "Snapshot %s could not be loaded, starting from defaults: %s",
                self.path,
                e,
            )
            return default

    def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot atomically."""
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot.model_dump(by_alias=True), f, indent=2)
        tmp_path.chmod(0o600)
        os.replace(tmp_path, self.path)


class DebouncedWriter:
    """Coalesces snapshot writes until *delay* seconds pass without a new one."""

    def __init__(self, store: SnapshotStore, delay: float = 1.0):
        self.store = store
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: Snapshot | None = None
        atexit.register(self.flush)

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, snapshot: Snapshot) -> None:
        """Queue *snapshot* for writing, restarting the quiet period."""
        with self._lock:
            self._pending = snapshot
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self.delay > 0:
                self._timer = threading.Timer(self.delay, self.flush)
                self._timer.daemon = True
                self._timer.start()

        if self.delay <= 0:
            self.flush()

    def flush(self) -> None:
        """Write the pending snapshot now, if any."""
        with self._lock:
            snapshot, self._pending = self._pending, None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        if snapshot is None:
            return
        try:
            self.store.save(snapshot)
        except OSError as e:
            get_logger().error("Failed to save snapshot to %s: %s", self.store.path, e)

    def close(self) -> None:
        """Flush and stop listening for interpreter exit."""
        self.flush()
        atexit.unregister(self.flush)
