"""Session state with persistent storage."""

import json
import math
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from questfocus.utils.logger import get_logger

SessionMode = Literal["idle", "focus", "break"]


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class SessionState:
    """The single active session.

    Running intervals are anchored to an absolute ``deadline``; a paused
    interval drops the deadline and keeps ``remaining_seconds`` instead.
    """

    mode: SessionMode = "idle"
    paused: bool = False
    deadline: str | None = None  # ISO 8601
    remaining_seconds: int | None = None
    anchor_date: str | None = None
    anchor_quest_id: str | None = None
    anchor_sub_quest_id: str | None = None
    activity: str | None = None
    started_at: str | None = None  # ISO 8601

    @property
    def deadline_datetime(self) -> datetime | None:
        """Parse deadline as datetime."""
        if self.deadline:
            return parse_iso(self.deadline)
        return None

    @property
    def is_idle(self) -> bool:
        return self.mode == "idle"

    @property
    def is_running(self) -> bool:
        """A deadline is active and counting down."""
        return self.mode != "idle" and not self.paused

    @property
    def label(self) -> str:
        if self.mode == "idle":
            return "idle"
        return f"paused {self.mode}" if self.paused else self.mode

    def time_remaining(self, now: datetime) -> int:
        """Seconds left in the interval, observed at *now*. Never negative."""
        if self.paused:
            return max(0, self.remaining_seconds or 0)

        end = self.deadline_datetime
        if end is None:
            return 0
        return max(0, math.ceil((end - now).total_seconds()))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        """Create from dictionary."""
        state = cls(**data)
        if state.mode not in ("idle", "focus", "break"):
            raise ValueError(f"Unknown session mode: {state.mode!r}")
        if state.mode != "idle" and not state.paused and not state.deadline:
            raise ValueError("Running session without a deadline")
        return state


@dataclass
class ViewState:
    """What the user is looking at: the viewed date and the focus target."""

    selected_date: str | None = None
    viewed_on: str | None = None  # day the date was chosen; stale views reset to today
    selection_date: str | None = None
    selection_quest_id: str | None = None
    selection_sub_quest_id: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ViewState":
        return cls(**data)


class SessionStateManager:
    """Manages session and view state persistence."""

    def __init__(self, state_dir: Path | None = None):
        """Initialize state manager."""
        if state_dir is None:
            from platformdirs import user_data_dir

            state_dir = Path(user_data_dir("questfocus")) / "state"

        self.state_dir = state_dir
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.state_file = self.state_dir / "current_session.json"
        self.view_file = self.state_dir / "view.json"

    def _write(self, path: Path, data: dict) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        # Set secure permissions
        path.chmod(0o600)

    def _read(self, path: Path) -> dict | None:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            get_logger().warning("Discarding unreadable state file %s: %s", path, e)
            return None

    def save(self, session: SessionState) -> None:
        """Save session state to file."""
        self._write(self.state_file, session.to_dict())

    def load(self) -> SessionState | None:
        """Load session state from file. Returns None if file missing or invalid."""
        data = self._read(self.state_file)
        if data is None:
            return None

        try:
            return SessionState.from_dict(data)
        except (TypeError, KeyError, ValueError) as e:
            get_logger().warning(
                "Discarding unreadable session file %s: %s", self.state_file, e
            )
            return None

    def save_view(self, view: ViewState) -> None:
        self._write(self.view_file, view.to_dict())

    def load_view(self) -> ViewState | None:
        data = self._read(self.view_file)
        if data is None:
            return None
        try:
            return ViewState.from_dict(data)
        except TypeError as e:
            get_logger().warning("Discarding unreadable view file %s: %s", self.view_file, e)
            return None
