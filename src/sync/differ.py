from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from core.models import CoverResolution, PlaybackSnapshot, TrackTag
from library.cover import CoverResolver

logger = logging.getLogger(__name__)


class TagOrientation(Enum):
    HORIZONTAL = "horizontal"   # "artist - album" over "title"
    VERTICAL = "vertical"       # artist / album / title stacked


def next_orientation(current: TagOrientation, cover_width: int, tags_width: int) -> TagOrientation:
    """
    Switch only when the current layout disagrees with the widths; equal
    widths keep whatever is on screen.
    """
    if current is TagOrientation.HORIZONTAL and cover_width < tags_width:
        return TagOrientation.VERTICAL
    if current is TagOrientation.VERTICAL and cover_width > tags_width:
        return TagOrientation.HORIZONTAL
    return current


class NowPlayingView(Protocol):
    def show_tag(self, tag: TrackTag) -> None: ...
    def relayout_tags(self) -> None: ...
    def set_cover(self, asset_path: str) -> None: ...
    def set_active_index(self, index: int) -> None: ...


class CoverListener(Protocol):
    def on_cover(self, resolution: CoverResolution) -> None: ...


class SnapshotDiffer:
    """
    Decides what a fresh snapshot actually changes on screen.

    Tag, cover and queue marker are handled independently: a snapshot that
    only moves the queue position still refreshes the marker.
    """

    def __init__(self, view: NowPlayingView, covers: CoverResolver, theme: CoverListener):
        self.view = view
        self.covers = covers
        self.theme = theme
        self._tag: TrackTag | None = None

    @property
    def last_tag(self) -> TrackTag | None:
        return self._tag

    def apply(self, snapshot: PlaybackSnapshot) -> None:
        self._apply_tag(snapshot.tag)
        self._apply_cover(snapshot.path)
        self.view.set_active_index(snapshot.queue_position)

    def _apply_tag(self, tag: TrackTag | None) -> None:
        if tag is None:
            return
        if tag.same_as(self._tag):
            return
        self._tag = tag
        logger.debug("Now playing: %s / %s / %s", tag.artist, tag.album, tag.title)
        self.view.show_tag(tag)
        self.view.relayout_tags()

    def _apply_cover(self, path: str | None) -> None:
        resolution = self.covers.resolve(path)
        if not resolution.changed:
            return
        # cover and theme move together
        self.view.set_cover(resolution.state.asset_path)
        self.theme.on_cover(resolution)
