# ui/dialogs/file_picker.py
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject
from PySide6.QtWidgets import QFileDialog, QWidget

from library.tags import AUDIO_EXTS, PLAYLIST_EXTS

logger = logging.getLogger(__name__)


def _name_filter(label: str, exts) -> str:
    patterns = " ".join(f"*{e}" for e in sorted(exts))
    return f"{label} ({patterns})"


AUDIO_FILTER = _name_filter("Audio files", AUDIO_EXTS)
PLAYLIST_FILTER = _name_filter("Playlists", PLAYLIST_EXTS)


class FilePicker(QObject):
    """
    Non-blocking multi-file selection.

    Every choose() bumps a generation token; a dialog that finishes after a
    newer one was opened is ignored.
    """

    def __init__(self, parent_widget: QWidget | None = None):
        super().__init__(parent_widget)
        self.parent_widget = parent_widget
        self._generation = 0
        self._dialogs: dict[int, QFileDialog] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def choose(self, on_chosen: Callable[[list[str]], None], *, playlist: bool = False) -> QFileDialog:
        self._generation += 1
        gen = self._generation

        dlg = QFileDialog(self.parent_widget, "Select playlist" if playlist else "Select files")
        dlg.setFileMode(QFileDialog.FileMode.ExistingFiles)
        dlg.setNameFilters([PLAYLIST_FILTER if playlist else AUDIO_FILTER, "All files (*)"])
        dlg.filesSelected.connect(lambda files, g=gen: self.complete(g, list(files), on_chosen))
        dlg.finished.connect(lambda _result, g=gen: self._drop(g))

        self._dialogs[gen] = dlg
        dlg.open()
        return dlg

    def complete(self, generation: int, files: list[str], on_chosen: Callable[[list[str]], None]) -> bool:
        """Hand `files` to `on_chosen` unless a newer dialog superseded this one."""
        if generation != self._generation:
            logger.debug("Dropping stale file selection (generation %d, current %d)", generation, self._generation)
            return False
        if not files:
            return False
        on_chosen(files)
        return True

    def _drop(self, generation: int) -> None:
        dlg = self._dialogs.pop(generation, None)
        if dlg is not None:
            dlg.deleteLater()
