"""Background ticker driving FocusEngine.tick() once per second.

Each scheduled tick remembers the engine's ``deadline_generation`` at the
time it was armed. Pausing, resuming, stopping or changing mode bumps the
generation, so a tick armed for an outdated deadline does nothing when it
fires; the ticker re-arms itself for the new deadline instead.
"""

import threading
from collections.abc import Callable

from questfocus.services.focus_engine import SESSION_CHANGED, FocusEngine
from questfocus.utils.logger import get_logger


class FocusTicker:
    """Self-rearming one-second timer bound to an engine."""

    def __init__(
        self,
        engine: FocusEngine,
        interval: float = 1.0,
        on_tick: Callable[[int], None] | None = None,
    ):
        self.engine = engine
        self.interval = interval
        self.on_tick = on_tick
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._running = False

    @property
    def is_armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def start(self) -> None:
        with self._lock:
            self._running = True
        self.engine.add_listener(self._on_change)
        self.reschedule()

    def stop(self) -> None:
        self.engine.remove_listener(self._on_change)
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def reschedule(self) -> None:
        """Cancel the pending tick and arm one for the current deadline, if any."""
        # Read without the engine lock; the listener runs while the engine holds it
        session = self.engine.session
        generation = self.engine.deadline_generation

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not self._running or not session.is_running:
                return
            self._timer = threading.Timer(self.interval, self._fire, args=(generation,))
            self._timer.daemon = True
            self._timer.start()

    def _on_change(self, kind: str) -> None:
        if kind == SESSION_CHANGED:
            self.reschedule()

    def _fire(self, generation: int) -> None:
        if generation != self.engine.deadline_generation:
            get_logger().debug("Dropping stale tick for generation %d", generation)
            return

        remaining = self.engine.tick()
        if self.on_tick is not None:
            self.on_tick(remaining)

        # A transition inside tick() already re-armed through the listener
        if generation == self.engine.deadline_generation:
            self.reschedule()
