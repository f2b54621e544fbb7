# ui/player_bar.py
from __future__ import annotations

import logging
from enum import Enum

from PySide6.QtCore import Qt, QSize, Signal, QByteArray
from PySide6.QtGui import QIcon, QPixmap, QPainter
from PySide6.QtWidgets import QWidget, QHBoxLayout, QToolButton, QPushButton
from PySide6.QtSvg import QSvgRenderer

logger = logging.getLogger(__name__)


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.GlobalColor.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PREV = "M6 18V6h2v12H6zm3.5-6L18 6v12l-8.5-6z"
SVG_NEXT = "M16 6v12h2V6h-2zM6 18l8.5-6L6 6v12z"
SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"


class TransportState(Enum):
    PAUSED = "paused"
    PLAYING = "playing"


class ControlSurface(QWidget):
    """
    Transport buttons plus the file actions and the info toggle.

    The play button is a two-state machine. Whichever handler is bound does
    its engine call, swaps the icon and rebinds the button to the other
    handler. sync_transport() lines the machine up with what the engine
    actually reports.
    """

    nextClicked = Signal()
    prevClicked = Signal()
    addNextClicked = Signal()
    addQueueClicked = Signal()
    importClicked = Signal()
    infoToggled = Signal(bool)

    def __init__(self, engine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.state = TransportState.PAUSED
        self._bound = None
        self._info_open = False

        self._icons = {
            "prev": _svg_icon(SVG_PREV, 20),
            "next": _svg_icon(SVG_NEXT, 20),
            "play": _svg_icon(SVG_PLAY, 22),
            "pause": _svg_icon(SVG_PAUSE, 22),
        }

        root = QHBoxLayout(self)
        root.setContentsMargins(8, 6, 8, 6)
        root.setSpacing(8)

        self.btn_prev = self._tool("BtnPrev", "prev", "Previous", 20)
        self.btn_play = self._tool("BtnPlay", "play", "Play", 22)
        self.btn_next = self._tool("BtnNext", "next", "Next", 20)

        self.btn_add_next = QPushButton("play next")
        self.btn_add_next.setToolTip("Play files now, then resume the current track")
        self.btn_add_queue = QPushButton("add to queue")
        self.btn_add_queue.setToolTip("Append files to the end of the queue")
        self.btn_import = QPushButton("import")
        self.btn_import.setToolTip("Append the entries of an .m3u playlist")
        self.btn_info = QPushButton("info")
        self.btn_info.setObjectName("BtnInfo")

        root.addWidget(self.btn_prev)
        root.addWidget(self.btn_play)
        root.addWidget(self.btn_next)
        root.addStretch(1)
        root.addWidget(self.btn_add_next)
        root.addWidget(self.btn_add_queue)
        root.addWidget(self.btn_import)
        root.addSpacing(6)
        root.addWidget(self.btn_info)

        self.btn_prev.clicked.connect(self.prevClicked)
        self.btn_next.clicked.connect(self.nextClicked)
        self.btn_add_next.clicked.connect(self.addNextClicked)
        self.btn_add_queue.clicked.connect(self.addQueueClicked)
        self.btn_import.clicked.connect(self.importClicked)
        self.btn_info.clicked.connect(self._toggle_info)

        self._bind(self._on_play)

        self.setObjectName("ControlSurface")
        self._apply_styles()

    def _tool(self, name: str, icon: str, tip: str, size: int) -> QToolButton:
        btn = QToolButton()
        btn.setObjectName(name)
        btn.setIcon(self._icons[icon])
        btn.setIconSize(QSize(size, size))
        btn.setToolTip(tip)
        return btn

    # -------------------------
    # Play / pause state machine
    # -------------------------
    def _bind(self, handler) -> None:
        if self._bound is not None:
            self.btn_play.clicked.disconnect(self._bound)
        self.btn_play.clicked.connect(handler)
        self._bound = handler

    def _on_play(self) -> None:
        self.engine.play()
        self._show(TransportState.PLAYING)

    def _on_pause(self) -> None:
        self.engine.pause()
        self._show(TransportState.PAUSED)

    def _show(self, state: TransportState) -> None:
        self.state = state
        if state is TransportState.PLAYING:
            self.btn_play.setIcon(self._icons["pause"])
            self.btn_play.setToolTip("Pause")
            self._bind(self._on_pause)
        else:
            self.btn_play.setIcon(self._icons["play"])
            self.btn_play.setToolTip("Play")
            self._bind(self._on_play)

    def sync_transport(self, paused: bool | None) -> None:
        if paused is None:
            return
        wanted = TransportState.PAUSED if paused else TransportState.PLAYING
        if wanted is not self.state:
            logger.debug("Transport reconciled to %s", wanted.value)
            self._show(wanted)

    # -------------------------
    # Info toggle
    # -------------------------
    def _toggle_info(self) -> None:
        self._info_open = not self._info_open
        self.btn_info.setText("close" if self._info_open else "info")
        self.infoToggled.emit(self._info_open)

    def set_enabled(self, enabled: bool) -> None:
        for btn in (self.btn_prev, self.btn_play, self.btn_next, self.btn_add_next, self.btn_add_queue, self.btn_import):
            btn.setEnabled(enabled)

    def _apply_styles(self):
        self.setStyleSheet("""
        QToolButton {
            border: 1px solid transparent;
            background: transparent;
            padding: 6px;
            border-radius: 10px;
        }
        QToolButton:hover {
            background: rgba(0, 0, 0, 0.08);
            border-color: rgba(0, 0, 0, 0.15);
        }
        QToolButton#BtnPlay {
            background: #111827;
            border: 1px solid #1f2937;
            border-radius: 999px;
            padding: 8px;
        }
        QToolButton#BtnPlay:hover { border-color: #38bdf8; }
        QToolButton:disabled { background: transparent; }

        QPushButton {
            background: transparent;
            border: 1px solid rgba(0, 0, 0, 0.25);
            border-radius: 10px;
            padding: 4px 10px;
            color: #111827;
        }
        QPushButton:hover { background: rgba(0, 0, 0, 0.08); }
        QPushButton:disabled { color: rgba(0, 0, 0, 0.35); }
        """)
