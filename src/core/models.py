# core/models.py
from __future__ import annotations
from dataclasses import dataclass

Rgb = tuple[int, int, int]

@dataclass(frozen=True)
class TrackTag:
    artist: str | None
    album: str | None
    title: str | None

    def same_as(self, other: TrackTag | None) -> bool:
        if other is None:
            return False
        return (
            self.artist == other.artist
            and self.album == other.album
            and self.title == other.title
        )

@dataclass(frozen=True)
class PlaybackSnapshot:
    tag: TrackTag | None
    path: str | None
    queue_position: int          # -1 when nothing is current
    paused: bool | None = None   # engine transport state, None if unknown

@dataclass(frozen=True)
class QueueEntry:
    title: str
    artist: str
    album: str
    source_path: str

@dataclass(frozen=True)
class CoverState:
    resolved_source_path: str | None
    asset_path: str
    found: bool

@dataclass(frozen=True)
class CoverResolution:
    state: CoverState
    changed: bool   # False when the memoized state was returned as-is

@dataclass(frozen=True)
class ThemeState:
    background: Rgb
    highlight: Rgb
