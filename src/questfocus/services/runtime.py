"""Wiring between the engine and its storage.

``load_runtime`` builds a FocusEngine from the snapshot and the saved
session, hooks persistence onto the engine's change notifications, and runs
one tick so time that passed while no process was running is accounted for.
"""

from dataclasses import dataclass
from pathlib import Path

from questfocus.models.config_models import AppConfig
from questfocus.models.state import SessionStateManager
from questfocus.services.config_service import get_config_service
from questfocus.services.focus_engine import DATA_CHANGED, Clock, FocusEngine, local_now
from questfocus.services.persistence import DebouncedWriter, Snapshot, SnapshotStore
from questfocus.utils.logger import get_logger


@dataclass
class Runtime:
    """An engine plus the collaborators that persist it."""

    engine: FocusEngine
    writer: DebouncedWriter
    state_manager: SessionStateManager
    config: AppConfig

    def save_state(self) -> None:
        """Persist the session and view; failures are logged, never raised."""
        try:
            self.state_manager.save(self.engine.session)
            self.state_manager.save_view(self.engine.view_state())
        except OSError as e:
            get_logger().error("Failed to save session state: %s", e)

    def on_change(self, kind: str) -> None:
        if kind == DATA_CHANGED:
            self.writer.schedule(self.engine.snapshot())
        else:
            self.save_state()

    def close(self) -> None:
        self.engine.remove_listener(self.on_change)
        self.writer.close()


def default_snapshot(config: AppConfig) -> Snapshot:
    """Snapshot used on first run or when the stored one is unreadable."""
    return Snapshot(
        pomodoro_duration_seconds=config.timer.pomodoro_duration * 60,
        break_duration_seconds=config.timer.break_duration * 60,
    )


def load_runtime(
    config: AppConfig | None = None,
    data_dir: Path | None = None,
    clock: Clock = local_now,
) -> Runtime:
    """Load state from disk and return a ready engine."""
    if config is None:
        config = get_config_service().config

    store = SnapshotStore(data_dir)
    snapshot = store.load(default=default_snapshot(config))
    state_manager = SessionStateManager(data_dir / "state" if data_dir else None)

    engine = FocusEngine.from_snapshot(
        snapshot,
        session=state_manager.load(),
        default_pomodoro_seconds=config.timer.pomodoro_duration * 60,
        default_break_seconds=config.timer.break_duration * 60,
        break_activities=config.timer.break_activities,
        xp_per_session=config.progression.xp_per_session,
        clock=clock,
    )
    view = state_manager.load_view()
    if view is not None:
        engine.restore_view(view)

    runtime = Runtime(
        engine=engine,
        writer=DebouncedWriter(store, config.storage.save_debounce_seconds),
        state_manager=state_manager,
        config=config,
    )
    engine.add_listener(runtime.on_change)
    engine.tick()
    return runtime
