"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real filesystem and the
wall clock.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from questfocus.models.config_models import AppConfig, StorageConfig

T0 = datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        self.now += timedelta(seconds=seconds, **kwargs)
        return self.now


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logger(tmp_path):
    """Send log output to *tmp_path* and reset the logger singleton."""
    import questfocus.utils.logger as logger_mod

    logger_mod._logger = None
    logging.getLogger("questfocus").handlers.clear()
    with patch("questfocus.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    logging.getLogger("questfocus").handlers.clear()
    logger_mod._logger = None


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from questfocus.services.config_service import ConfigService, get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("questfocus.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("questfocus.services.config_service.user_data_dir", return_value=tmpdir):
            yield ConfigService()
    get_config_service.cache_clear()


# ---------------------------------------------------------------------------
# Engine helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def engine(clock):
    """A fresh engine on the fake clock with a seeded RNG."""
    from questfocus.services.focus_engine import FocusEngine

    return FocusEngine(clock=clock, rng=random.Random(7))


@pytest.fixture()
def instant_config() -> AppConfig:
    """Config whose snapshot writes happen immediately."""
    return AppConfig(storage=StorageConfig(save_debounce_seconds=0))


@pytest.fixture()
def make_quest():
    """Factory adding a quest with sub-quests on the engine's viewed date."""

    def _make(engine, title="Write report", estimate=3, subs=("Outline", "Draft", "Edit")):
        quest = engine.add_quest(title, estimate)
        assert quest is not None, engine.last_rejection
        for sub_title in subs:
            assert engine.add_sub_quest(quest.id, sub_title) is not None, engine.last_rejection
        return quest

    return _make
