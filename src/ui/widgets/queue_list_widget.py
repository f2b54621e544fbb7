# ui/widgets/queue_list_widget.py
from __future__ import annotations

import logging

from PySide6.QtCore import Signal, Qt
from PySide6.QtWidgets import QWidget, QVBoxLayout, QListWidget, QListWidgetItem

from core.models import QueueEntry

logger = logging.getLogger(__name__)


def _row_text(entry: QueueEntry) -> str:
    return "\n".join((entry.title, entry.album, entry.artist))


class QueueListWidget(QWidget):
    """
    The engine's queue as a list, one row per entry.

    rebuild() builds a complete new QListWidget off-screen and swaps it in,
    so the old rows stay visible until the new ones are ready.
    """

    entryActivated = Signal(int)   # queue index

    def __init__(self, parent=None):
        super().__init__(parent)
        self._active_index = -1

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)

        self.list = self._new_list()
        self._layout.addWidget(self.list)

    # -------------------------
    # External API
    # -------------------------
    def rebuild(self, queue: list[QueueEntry], active_index: int) -> None:
        fresh = self._new_list()
        for i, entry in enumerate(queue):
            item = QListWidgetItem(_row_text(entry))
            item.setData(Qt.ItemDataRole.UserRole, i)
            item.setToolTip(entry.source_path)
            fresh.addItem(item)

        old = self.list
        self._layout.replaceWidget(old, fresh)
        self.list = fresh
        old.hide()
        old.deleteLater()

        self._active_index = -1
        self.set_active_index(active_index)
        logger.debug("Queue rebuilt with %d entries", len(queue))

    def set_active_index(self, index: int) -> None:
        self._active_index = int(index)
        for row in range(self.list.count()):
            item = self.list.item(row)
            font = item.font()
            want = row == self._active_index
            if font.bold() != want:
                font.setBold(want)
                item.setFont(font)

    def count(self) -> int:
        return self.list.count()

    def bolded_rows(self) -> list[int]:
        return [r for r in range(self.list.count()) if self.list.item(r).font().bold()]

    # -------------------------
    # Internals
    # -------------------------
    def _new_list(self) -> QListWidget:
        lst = QListWidget()
        lst.setObjectName("Queue")
        lst.setSelectionMode(QListWidget.SelectionMode.NoSelection)
        lst.itemClicked.connect(self._on_item_clicked)
        return lst

    def _on_item_clicked(self, item: QListWidgetItem):
        index = item.data(Qt.ItemDataRole.UserRole)
        if index is None:
            return
        self.entryActivated.emit(int(index))
