from __future__ import annotations

import logging
from typing import Callable, Protocol

from PySide6.QtCore import QObject, QTimer

from core.config import RefreshConfig
from core.models import PlaybackSnapshot

logger = logging.getLogger(__name__)


class ChangeSource(Protocol):
    def changed(self) -> bool: ...
    def current_snapshot(self) -> PlaybackSnapshot: ...


class RefreshScheduler(QObject):
    """
    One single-shot QTimer drives every poll.

    Steady ticks come every `steady_ms`. A local action calls accelerate(),
    which replaces the pending tick with one `accelerated_ms` out. Every
    (re)schedule stops the timer first, so at most one tick is ever pending.
    """

    def __init__(
        self,
        engine: ChangeSource,
        on_snapshot: Callable[[PlaybackSnapshot], None],
        config: RefreshConfig | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self.engine = engine
        self.on_snapshot = on_snapshot
        self.config = config or RefreshConfig()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.tick)

        self.ticks = 0

    # ---- scheduling ----

    def _schedule(self, delay_ms: int) -> None:
        self._timer.stop()
        self._timer.start(max(0, int(delay_ms)))

    def start(self) -> None:
        self._schedule(0)

    def accelerate(self) -> None:
        self._schedule(self.config.accelerated_ms)

    def stop(self) -> None:
        self._timer.stop()

    def is_pending(self) -> bool:
        return self._timer.isActive()

    def pending_interval_ms(self) -> int | None:
        return self._timer.interval() if self._timer.isActive() else None

    # ---- tick ----

    def tick(self) -> None:
        self.ticks += 1
        try:
            if self.engine.changed():
                self.on_snapshot(self.engine.current_snapshot())
        finally:
            # an engine error still propagates, but polling goes on
            self._schedule(self.config.steady_ms)
