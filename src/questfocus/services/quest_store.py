"""Quest store: the quest/sub-quest hierarchy per date and the focus selection."""

from collections.abc import Callable
from dataclasses import dataclass

from questfocus.exceptions import NotFoundError, ValidationError
from questfocus.models.goals import DailyRecords, ensure_goal
from questfocus.models.quests import DatedQuests, Quest, SubQuest, new_id
from questfocus.utils.logger import get_logger
from questfocus.utils.uuid_utils import resolve_uuid


@dataclass(frozen=True)
class Selection:
    """The sub-quest chosen as the next focus target."""

    date: str
    quest_id: str
    sub_quest_id: str


class QuestStore:
    """Owns quests, daily records and the current focus selection.

    Mutations raise ValidationError or NotFoundError on rejected input and
    leave the state untouched.
    """

    def __init__(
        self,
        quests: DatedQuests | None = None,
        records: DailyRecords | None = None,
        level_source: Callable[[], int] = lambda: 1,
    ):
        self.quests = quests if quests is not None else DatedQuests()
        self.records = records if records is not None else DailyRecords()
        self.level_source = level_source
        self.selection: Selection | None = None

    def quests_for(self, date_key: str) -> list[Quest]:
        return self.quests.get(date_key)

    def find_quest(self, date_key: str, quest_id: str) -> Quest:
        quest = self.quests.find(date_key, quest_id)
        if quest is None:
            raise NotFoundError(f"Quest '{quest_id}' not found on {date_key}")
        return quest

    def find_sub_quest(self, date_key: str, sub_quest_id: str) -> tuple[Quest, SubQuest]:
        """Locate a sub-quest by id among the quests of *date_key*."""
        for quest in self.quests.get(date_key):
            sub = quest.find_sub_quest(sub_quest_id)
            if sub is not None:
                return quest, sub
        raise NotFoundError(f"Sub-quest '{sub_quest_id}' not found on {date_key}")

    def resolve_quest_id(self, date_key: str, value: str) -> str:
        """Expand a short quest id typed by the user."""
        return resolve_uuid(value, (q.id for q in self.quests.get(date_key)), kind="Quest")

    def resolve_sub_quest_id(self, date_key: str, value: str) -> str:
        """Expand a short sub-quest id typed by the user."""
        ids = (sub.id for quest in self.quests.get(date_key) for sub in quest.sub_quests)
        return resolve_uuid(value, ids, kind="Sub-quest")

    def add_quest(self, date_key: str, title: str, estimated: int) -> Quest:
        """
        Create a quest at the end of the date's list.

        Also seeds the date's session goal when it has none yet.

        Raises:
            ValidationError: Empty title or non-positive estimate
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Quest title cannot be empty")
        if isinstance(estimated, bool) or not isinstance(estimated, int) or estimated <= 0:
            raise ValidationError(f"Estimate must be a positive integer, got {estimated!r}")

        quest = Quest(id=new_id(), title=title, estimated=estimated)
        self.quests.append(date_key, quest)

        goal = ensure_goal(date_key, self.level_source(), self.records)
        if goal is not None:
            get_logger().info("Seeded daily goal for %s: %d sessions", date_key, goal)
        return quest

    def add_sub_quest(self, date_key: str, quest_id: str, title: str) -> SubQuest:
        """
        Append an incomplete sub-quest while the quest has free slots.

        Raises:
            ValidationError: Empty title or capacity reached
            NotFoundError: Unknown quest
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Sub-quest title cannot be empty")

        quest = self.find_quest(date_key, quest_id)
        if not quest.has_capacity:
            raise ValidationError(
                f"Quest '{quest.title}' already has {quest.estimated} sub-quests"
            )

        sub = SubQuest(id=new_id(), title=title)
        quest.sub_quests.append(sub)
        return sub

    def complete_sub_quest(self, date_key: str, quest_id: str, sub_quest_id: str) -> bool:
        """
        Mark a sub-quest complete and count the session.

        The quest counter and the date's completed record are bumped together.

        Returns:
            True if the sub-quest changed, False if it was already complete
        """
        quest = self.find_quest(date_key, quest_id)
        sub = quest.find_sub_quest(sub_quest_id)
        if sub is None:
            raise NotFoundError(f"Sub-quest '{sub_quest_id}' not found in quest '{quest_id}'")

        if self.selection is not None and self.selection.sub_quest_id == sub_quest_id:
            self.selection = None

        if sub.is_complete:
            return False

        sub.is_complete = True
        quest.completed += 1
        if quest.completed >= quest.estimated:
            quest.is_complete = True
        self.records.increment_completed(date_key)
        return True

    def select_sub_quest(self, date_key: str, sub_quest_id: str | None) -> Selection | None:
        """
        Toggle the focus target.

        None clears the selection; selecting the current target deselects it.

        Raises:
            ValidationError: The sub-quest is already complete
            NotFoundError: Unknown sub-quest
        """
        if sub_quest_id is None:
            self.selection = None
            return None

        if self.selection is not None and self.selection.sub_quest_id == sub_quest_id:
            self.selection = None
            return None

        quest, sub = self.find_sub_quest(date_key, sub_quest_id)
        if sub.is_complete:
            raise ValidationError(f"Sub-quest '{sub.title}' is already complete")

        self.selection = Selection(date=date_key, quest_id=quest.id, sub_quest_id=sub.id)
        return self.selection

    def selected_sub_quest(self) -> SubQuest | None:
        if self.selection is None:
            return None
        quest = self.quests.find(self.selection.date, self.selection.quest_id)
        if quest is None:
            return None
        return quest.find_sub_quest(self.selection.sub_quest_id)

    def sessions_completed_for_date(self, date_key: str) -> int:
        """Sum of quest session counters for the date (display figure)."""
        return sum(quest.completed for quest in self.quests.get(date_key))
