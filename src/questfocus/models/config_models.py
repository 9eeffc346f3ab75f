"""Configuration models for QuestFocus.

Static options read from ``config.json``. The user's current timer durations
are part of the persisted snapshot; the values here are the defaults that
``settings reset`` restores.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .progression import XP_PER_SESSION

DEFAULT_POMODORO_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_BREAK_ACTIVITIES = [
    "20 Jumping Jacks",
    "10 Push-ups",
    "15 Squats",
    "30-sec Plank",
    "15 Lunges (each leg)",
    "20 High Knees",
    "10 Burpees",
    "30-sec Wall Sit",
]


class TimerConfig(BaseModel):
    """Timer defaults and the break activity catalog."""

    pomodoro_duration: int = Field(default=DEFAULT_POMODORO_MINUTES, gt=0)
    break_duration: int = Field(default=DEFAULT_BREAK_MINUTES, gt=0)
    break_activities: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BREAK_ACTIVITIES)
    )

    @field_validator("break_activities")
    @classmethod
    def validate_activities(cls, v: list[str]) -> list[str]:
        """Strip entries and require at least one."""
        cleaned = [item.strip() for item in v if item and item.strip()]
        if not cleaned:
            raise ValueError("break_activities cannot be empty")
        return cleaned


class ProgressionConfig(BaseModel):
    """Experience awards."""

    xp_per_session: int = Field(default=XP_PER_SESSION, gt=0)


class HistoryConfig(BaseModel):
    """History trail display."""

    window_days: int = Field(default=15, gt=0)


class StorageConfig(BaseModel):
    """Snapshot persistence."""

    save_debounce_seconds: float = Field(default=1.0, ge=0)


class AppConfig(BaseModel):
    """Main QuestFocus configuration"""

    timer: TimerConfig = Field(default_factory=TimerConfig)
    progression: ProgressionConfig = Field(default_factory=ProgressionConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def parse_duration_minutes(value: int | str) -> int:
    """
    Parse a duration in whole minutes.

    Raises:
        ValueError: The value is not numeric or not positive
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    try:
        minutes = int(str(value).strip())
    except ValueError as e:
        raise ValueError(f"Invalid duration: {value!r}") from e
    if minutes <= 0:
        raise ValueError(f"Duration must be positive, got {minutes}")
    return minutes
