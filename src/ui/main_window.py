# ui/main_window.py
from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QShortcut, QKeySequence
from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel

from core.config import CoverConfig
from core.models import ThemeState, TrackTag
from sync.theme import rgb_css
from ui.player_bar import ControlSurface
from ui.widgets.now_playing_widget import NowPlayingWidget
from ui.widgets.queue_list_widget import QueueListWidget
from ui.widgets.toast import ToastManager, normalize_kind

logger = logging.getLogger(__name__)

INFO_TEXT = (
    "coverdeck plays local audio files through mpv.\n\n"
    "play next: play the chosen files now, the current track follows them\n"
    "add to queue: append files to the end of the queue\n"
    "import: append the entries of .m3u / .m3u8 playlists\n"
    "click a queue row to jump to it"
)


class MainWindow(QMainWindow):
    """
    Render targets for the controller: cover, tag labels, queue, theme.
    Implements the now-playing view the differ writes to.
    """

    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("coverdeck")
        self.app_state = app_state
        self._theme: ThemeState | None = None

        self.central_widget = QWidget()
        self.central_widget.setObjectName("Root")
        self.setCentralWidget(self.central_widget)
        layout = QVBoxLayout(self.central_widget)

        self.now_playing = NowPlayingWidget()
        self.queue_list = QueueListWidget()

        self.info_panel = QLabel(INFO_TEXT)
        self.info_panel.setObjectName("InfoPanel")
        self.info_panel.setWordWrap(True)
        self.info_panel.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self.info_panel.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self.info_panel.setVisible(False)
        self._info_path: str | None = None

        body = QHBoxLayout()
        body.addWidget(self.now_playing, 0, Qt.AlignmentFlag.AlignTop)
        body.addWidget(self.queue_list, 1)
        body.addWidget(self.info_panel, 1)
        layout.addLayout(body, 1)

        self.control = ControlSurface(app_state.engine, self)
        layout.addWidget(self.control)
        self.control.infoToggled.connect(self.set_info_visible)

        self.toasts = ToastManager(self)
        self.app_state.notification.connect(self._on_notify)
        self.resize(720, 520)

        QShortcut(QKeySequence("Ctrl+Right"), self, activated=self.control.nextClicked.emit)
        QShortcut(QKeySequence("Ctrl+Left"), self, activated=self.control.prevClicked.emit)
        QShortcut(QKeySequence("Space"), self, activated=self.control.btn_play.click)

        cover_cfg = app_state.config.cover if app_state.config else CoverConfig()
        self.now_playing.set_cover(cover_cfg.fallback_asset)

    # ------------------ now-playing view ------------------
    def show_tag(self, tag: TrackTag) -> None:
        self.now_playing.show_tag(tag)

    def relayout_tags(self) -> None:
        self.now_playing.relayout_tags()

    def set_cover(self, asset_path: str) -> None:
        self.now_playing.set_cover(asset_path)

    def set_active_index(self, index: int) -> None:
        self.queue_list.set_active_index(index)

    # ------------------ theme ------------------
    def set_theme(self, theme: ThemeState) -> None:
        self._theme = theme
        bg = rgb_css(theme.background)
        hl = rgb_css(theme.highlight)
        self.central_widget.setStyleSheet(f"""
            QWidget#Root {{
                background-color: {bg};
            }}
            QListWidget#Queue {{
                background: transparent;
                border: none;
                color: #111827;
            }}
            QListWidget#Queue::item {{
                padding: 6px 8px;
                border-radius: 8px;
            }}
            QListWidget#Queue::item:hover {{
                background-color: {hl};
            }}
            QLabel {{
                color: #111827;
            }}
            QLabel#TagTitle {{
                font-size: 15px;
                font-weight: 600;
            }}
            QLabel#InfoPanel {{
                padding: 8px;
            }}
        """)

    @property
    def theme(self) -> ThemeState | None:
        return self._theme

    # ------------------ info panel ------------------
    def set_info_visible(self, visible: bool) -> None:
        self.info_panel.setVisible(visible)
        self.queue_list.setVisible(not visible)

    def set_info_path(self, path: str | None) -> None:
        if path == self._info_path:
            return
        self._info_path = path
        text = INFO_TEXT
        if path:
            text += f"\n\nnow playing:\n{path}"
        self.info_panel.setText(text)

    # ------------------ notifications ------------------
    def _on_notify(self, n):
        msg = getattr(n, "message", "") or ""
        if not msg:
            return
        self.toasts.show_toast(msg, notify_type=normalize_kind(n.notify_type), timeout_ms=3000)

    def show_queued_notifications(self):
        for n in self.app_state.drain_notifications():
            self._on_notify(n)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.toasts.relayout()
