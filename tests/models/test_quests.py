"""Tests for quest models and date keys."""

from datetime import datetime

import pytest

from questfocus.models.quests import (
    DatedQuests,
    Quest,
    SubQuest,
    shift_date_key,
    today_key,
    validate_date_key,
)


class TestDateKeys:
    def test_today_key_uses_given_time(self):
        assert today_key(datetime(2025, 1, 31, 23, 59)) == "2025-01-31"

    @pytest.mark.parametrize("key", ["2025-1-5", "2025/01/05", "", "2025-02-30", "yesterday"])
    def test_invalid_keys(self, key):
        with pytest.raises(ValueError):
            validate_date_key(key)

    def test_shift_across_month_and_year(self):
        assert shift_date_key("2025-01-31", 1) == "2025-02-01"
        assert shift_date_key("2025-01-01", -1) == "2024-12-31"
        assert shift_date_key("2024-03-01", -1) == "2024-02-29"


class TestQuest:
    def test_capacity(self):
        quest = Quest(id="q1", title="Report", estimated=2)
        assert quest.has_capacity
        assert quest.remaining_slots == 2
        quest.sub_quests.append(SubQuest(id="s1", title="One"))
        quest.sub_quests.append(SubQuest(id="s2", title="Two"))
        assert not quest.has_capacity
        assert quest.remaining_slots == 0

    def test_find_sub_quest(self):
        quest = Quest(id="q1", title="Report", estimated=1, sub_quests=[SubQuest("s1", "One")])
        assert quest.find_sub_quest("s1").title == "One"
        assert quest.find_sub_quest("nope") is None

    def test_dict_uses_camel_case(self):
        quest = Quest(id="q1", title="Report", estimated=1, sub_quests=[SubQuest("s1", "One")])
        data = quest.to_dict()
        assert data["isComplete"] is False
        assert data["subQuests"][0] == {"id": "s1", "title": "One", "isComplete": False}
        assert Quest.from_dict(data) == quest


class TestDatedQuests:
    def test_get_does_not_create_key(self):
        dated = DatedQuests()
        assert dated.get("2025-03-10") == []
        assert dated.to_dict() == {}

    def test_append_keeps_order(self):
        dated = DatedQuests()
        dated.append("2025-03-10", Quest("a", "A", 1))
        dated.append("2025-03-10", Quest("b", "B", 1))
        dated.append("2025-03-09", Quest("c", "C", 1))
        assert [q.id for q in dated.get("2025-03-10")] == ["a", "b"]
        assert list(dated.to_dict()) == ["2025-03-10", "2025-03-09"]
        assert dated.find("2025-03-10", "b").title == "B"
        assert dated.find("2025-03-09", "b") is None

    def test_rejects_bad_keys(self):
        with pytest.raises(ValueError):
            DatedQuests().append("10-03-2025", Quest("a", "A", 1))
        with pytest.raises(ValueError):
            DatedQuests.from_dict({"not-a-date": []})
