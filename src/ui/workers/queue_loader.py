# ui/workers/queue_loader.py
from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QThread, Signal

from core.models import QueueEntry


class QueueLoader(QThread):
    """Reads the tags behind a playlist snapshot off the GUI thread."""

    queueLoaded = Signal(int, object)   # generation, list[QueueEntry]

    def __init__(self, paths: list[str], generation: int, entries_for: Callable[[list[str]], list[QueueEntry]], parent=None):
        super().__init__(parent)
        self.paths = list(paths)
        self.generation = generation
        self._entries_for = entries_for

    def run(self):
        # tag read failures are already folded into stem-titled entries
        self.queueLoaded.emit(self.generation, self._entries_for(self.paths))
