# ui/widgets/now_playing_widget.py
from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QWidget, QVBoxLayout, QGridLayout, QLabel

from core.models import TrackTag
from sync.differ import TagOrientation, next_orientation

logger = logging.getLogger(__name__)

COVER_SIZE = 256


class NowPlayingWidget(QWidget):
    """Cover image plus the artist / album / title block under it."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("NowPlaying")

        self.cover = QLabel()
        self.cover.setObjectName("CoverImage")
        self.cover.setFixedSize(COVER_SIZE, COVER_SIZE)
        self.cover.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._cover_path: str | None = None

        self.lbl_artist = QLabel("")
        self.lbl_artist.setObjectName("TagArtist")
        self.lbl_album = QLabel("")
        self.lbl_album.setObjectName("TagAlbum")
        self.lbl_title = QLabel("")
        self.lbl_title.setObjectName("TagTitle")
        self.lbl_sep = QLabel(" - ")
        self.lbl_sep.setObjectName("TagSeparator")

        for lbl in (self.lbl_artist, self.lbl_album, self.lbl_title):
            lbl.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)

        self.tags_block = QWidget()
        self.tags_block.setObjectName("Tags")
        self._grid = QGridLayout(self.tags_block)
        self._grid.setContentsMargins(0, 6, 0, 0)
        self._grid.setHorizontalSpacing(0)
        self._grid.setVerticalSpacing(2)

        self.orientation = TagOrientation.HORIZONTAL
        self._place_tags()

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(self.cover, 0, Qt.AlignmentFlag.AlignHCenter)
        root.addWidget(self.tags_block, 0, Qt.AlignmentFlag.AlignHCenter)

    # -------------------------
    # Render targets
    # -------------------------
    def show_tag(self, tag: TrackTag) -> None:
        self.lbl_artist.setText(tag.artist or "")
        self.lbl_album.setText(tag.album or "")
        self.lbl_title.setText(tag.title or "")

    def relayout_tags(self) -> None:
        # measure against the text just set, not the last layout pass
        self._grid.invalidate()
        cover_w = self.cover.width()
        tags_w = self.tags_block.sizeHint().width()
        wanted = next_orientation(self.orientation, cover_w, tags_w)
        if wanted is not self.orientation:
            logger.debug("Tag layout %s -> %s (cover=%d, tags=%d)", self.orientation.value, wanted.value, cover_w, tags_w)
            self.orientation = wanted
            self._place_tags()

    def set_cover(self, asset_path: str) -> None:
        self._cover_path = asset_path
        pm = QPixmap(asset_path)
        if pm.isNull():
            logger.warning("Cannot load cover image %s", asset_path)
            self.cover.clear()
            return
        self.cover.setPixmap(
            pm.scaled(COVER_SIZE, COVER_SIZE, Qt.AspectRatioMode.KeepAspectRatio, Qt.TransformationMode.SmoothTransformation)
        )

    @property
    def cover_path(self) -> str | None:
        return self._cover_path

    # -------------------------
    # Layout
    # -------------------------
    def _place_tags(self):
        for w in (self.lbl_artist, self.lbl_sep, self.lbl_album, self.lbl_title):
            self._grid.removeWidget(w)

        center = Qt.AlignmentFlag.AlignHCenter
        if self.orientation is TagOrientation.HORIZONTAL:
            # <artist> - <album>
            #      <title>
            self._grid.addWidget(self.lbl_artist, 0, 0, Qt.AlignmentFlag.AlignRight)
            self._grid.addWidget(self.lbl_sep, 0, 1)
            self._grid.addWidget(self.lbl_album, 0, 2, Qt.AlignmentFlag.AlignLeft)
            self._grid.addWidget(self.lbl_title, 1, 0, 1, 3, center)
            self.lbl_sep.setVisible(True)
        else:
            # <artist>
            # <album>
            # <title>
            self._grid.addWidget(self.lbl_artist, 0, 0, 1, 3, center)
            self._grid.addWidget(self.lbl_album, 1, 0, 1, 3, center)
            self._grid.addWidget(self.lbl_title, 2, 0, 1, 3, center)
            self.lbl_sep.setVisible(False)
