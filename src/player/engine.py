# src/player/engine.py
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional

from core.models import PlaybackSnapshot, QueueEntry, TrackTag
from library.playlist_import import parse_m3u
from library.tags import queue_entry_from_tag, read_track_tag

from .mpv_ipc import MpvBackendConfig, MpvIpcBackend

logger = logging.getLogger(__name__)

# properties whose change means "the presentation may be stale"
WATCHED_PROPERTIES = ("path", "playlist-pos", "pause")

# tags kept in memory at once, least recently used first out
TAG_CACHE_SIZE = 1024

class EngineFacade:
    """
    Pull-style view of the playback engine (mpv).

    Nothing here pushes to the UI. Observed mpv properties only set a dirty
    flag that changed() hands out once (edge-triggered) and clears.

    Engine failures (OSError, TimeoutError, RuntimeError from the IPC layer)
    are not caught here.
    """

    def __init__(
        self,
        config: Optional[MpvBackendConfig] = None,
        backend_factory: Callable[[MpvBackendConfig], Any] = MpvIpcBackend,
        tag_reader: Callable[[str], TrackTag] = read_track_tag,
        tag_cache_size: int = TAG_CACHE_SIZE,
    ):
        self.config = config or MpvBackendConfig()
        self._backend_factory = backend_factory
        self._tag_for = functools.lru_cache(maxsize=tag_cache_size)(tag_reader)

        self._backend = None
        self._changed = False

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def init(self) -> None:
        if self._backend is not None:
            return

        backend = self._backend_factory(self.config)
        backend.start()
        for name in WATCHED_PROPERTIES:
            backend.observe_property(name, self._mark_changed)

        self._backend = backend
        # the engine starts paused whatever mpv was told
        backend.pause()
        logger.info("Playback engine ready (%s)", getattr(backend, "ipc", "?"))

    def shutdown(self) -> None:
        if self._backend is None:
            return
        self._backend.stop()
        self._backend = None

    def is_ready(self) -> bool:
        return self._backend is not None

    def _require(self):
        if self._backend is None:
            raise RuntimeError("playback engine not initialized")
        return self._backend

    def _mark_changed(self, _value: Any) -> None:
        self._changed = True

    # ----------------------------
    # Transport
    # ----------------------------

    def play(self) -> None:
        self._require().play()

    def pause(self) -> None:
        self._require().pause()

    def skip(self) -> None:
        self._require().playlist_next()

    def prev(self) -> None:
        self._require().playlist_prev()

    def skip_to(self, index: int) -> None:
        # range checks belong to the engine
        self._require().set_playlist_pos(index)

    # ----------------------------
    # Queue mutation
    # ----------------------------

    def enqueue_tail(self, path: str) -> None:
        self._require().append(path, play_if_idle=True)

    def enqueue_next(self, path: str) -> None:
        """
        Play `path` now; the interrupted track moves right behind it.
        """
        backend = self._require()
        pos = backend.get_property("playlist-pos")
        if pos is None or int(pos) < 0:
            backend.append(path, play_if_idle=True)
            return

        backend.append(path, play_if_idle=False)
        count = int(backend.get_property("playlist-count") or 0)
        backend.playlist_move(count - 1, int(pos))
        backend.set_playlist_pos(int(pos))

    def import_playlist(self, path: str) -> int:
        entries = parse_m3u(path)
        for entry in entries:
            self.enqueue_tail(entry)
        logger.info("Imported %d entries from %s", len(entries), path)
        return len(entries)

    # ----------------------------
    # Accessors
    # ----------------------------

    def changed(self) -> bool:
        self._require().process_messages()
        c = self._changed
        self._changed = False
        return c

    def current_snapshot(self) -> PlaybackSnapshot:
        backend = self._require()
        path = backend.cached("path")
        pos = backend.cached("playlist-pos")
        paused = backend.cached("pause")

        tag = self._tag_for(path) if path else None
        return PlaybackSnapshot(
            tag=tag,
            path=path or None,
            queue_position=int(pos) if pos is not None else -1,
            paused=bool(paused) if paused is not None else None,
        )

    def queue(self) -> list[QueueEntry]:
        return self.entries_for(self.playlist_paths())

    def playlist_paths(self) -> list[str]:
        """The engine's playlist filenames, in order. One IPC round trip."""
        playlist = self._require().get_property("playlist") or []
        paths: list[str] = []
        for item in playlist:
            filename = item.get("filename") if isinstance(item, dict) else None
            if filename:
                paths.append(filename)
        return paths

    def entries_for(self, paths: list[str]) -> list[QueueEntry]:
        """
        Queue rows for `paths`. Only reads tags (memoized), never talks to
        mpv, so it may run on a worker thread.
        """
        return [queue_entry_from_tag(p, self._tag_for(p)) for p in paths]
