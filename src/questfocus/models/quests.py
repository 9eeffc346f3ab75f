"""Quest and sub-quest models plus the date-keyed quest mapping."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"


def today_key(now: datetime | None = None) -> str:
    """Return the local calendar date as a ``YYYY-MM-DD`` key."""
    now = now or datetime.now().astimezone()
    return now.date().isoformat()


def validate_date_key(key: str) -> str:
    """Return *key* unchanged if it is a valid ``YYYY-MM-DD`` date, else raise ValueError."""
    try:
        parsed = datetime.strptime(key, DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date key: {key!r} (expected YYYY-MM-DD)") from e
    # strptime accepts unpadded fields like 2024-1-5
    if parsed.isoformat() != key:
        raise ValueError(f"Invalid date key: {key!r} (expected YYYY-MM-DD)")
    return key


def shift_date_key(key: str, days: int) -> str:
    """Return the date key *days* away from *key* (negative for the past)."""
    parsed = date.fromisoformat(validate_date_key(key))
    return (parsed + timedelta(days=days)).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class SubQuest:
    """One unit of work consumed by exactly one focus session."""

    id: str
    title: str
    is_complete: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "isComplete": self.is_complete}

    @classmethod
    def from_dict(cls, data: dict) -> "SubQuest":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            is_complete=bool(data.get("isComplete", False)),
        )


@dataclass
class Quest:
    """A goal broken into an estimated number of focus sessions."""

    id: str
    title: str
    estimated: int
    completed: int = 0
    is_complete: bool = False
    sub_quests: list[SubQuest] = field(default_factory=list)

    @property
    def remaining_slots(self) -> int:
        return max(0, self.estimated - len(self.sub_quests))

    @property
    def has_capacity(self) -> bool:
        return len(self.sub_quests) < self.estimated

    def find_sub_quest(self, sub_quest_id: str) -> SubQuest | None:
        for sub in self.sub_quests:
            if sub.id == sub_quest_id:
                return sub
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "estimated": self.estimated,
            "completed": self.completed,
            "isComplete": self.is_complete,
            "subQuests": [sub.to_dict() for sub in self.sub_quests],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Quest":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            estimated=int(data["estimated"]),
            completed=int(data.get("completed", 0)),
            is_complete=bool(data.get("isComplete", False)),
            sub_quests=[SubQuest.from_dict(s) for s in data.get("subQuests", [])],
        )


class DatedQuests:
    """Ordered mapping of date key -> ordered list of quests.

    Reads never create keys; a date's list is created on the first quest
    added for it.
    """

    def __init__(self, data: dict[str, list[Quest]] | None = None):
        self._by_date: dict[str, list[Quest]] = {}
        for key, quests in (data or {}).items():
            self._by_date[validate_date_key(key)] = list(quests)

    def get(self, date_key: str) -> list[Quest]:
        """Return the quests for *date_key*, or an empty list (not stored)."""
        return self._by_date.get(validate_date_key(date_key), [])

    def append(self, date_key: str, quest: Quest) -> None:
        self._by_date.setdefault(validate_date_key(date_key), []).append(quest)

    def find(self, date_key: str, quest_id: str) -> Quest | None:
        for quest in self.get(date_key):
            if quest.id == quest_id:
                return quest
        return None

    def to_dict(self) -> dict[str, list[dict]]:
        return {
            key: [quest.to_dict() for quest in quests]
            for key, quests in self._by_date.items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, list[dict]]) -> "DatedQuests":
        return cls(
            {key: [Quest.from_dict(q) for q in quests] for key, quests in data.items()}
        )
