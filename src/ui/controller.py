# ui/controller.py
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, Slot

from core.config import AppConfig
from core.models import PlaybackSnapshot
from library.cover import CoverResolver
from sync.differ import SnapshotDiffer
from sync.scheduler import RefreshScheduler
from sync.theme import ThemeDeriver
from ui.dialogs.file_picker import FilePicker
from ui.workers.queue_loader import QueueLoader

logger = logging.getLogger(__name__)

# what a failing engine call may raise from a user action
ENGINE_ERRORS = (OSError, TimeoutError, RuntimeError)


class PlaybackController(QObject):
    """
    Glue between the engine and the window.

    Inbound: the scheduler polls the engine and hands fresh snapshots to the
    differ, which updates tag, cover, theme and queue marker. Outbound: user
    actions call the engine and then pull the next snapshot forward with
    accelerate().
    """

    def __init__(self, app_state, window, config: AppConfig | None = None, picker: FilePicker | None = None, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self.engine = app_state.engine
        self.window = window
        self.config = config or AppConfig()

        self.covers = CoverResolver(self.config.cover.candidates, self.config.cover.fallback_asset)
        self.theme = ThemeDeriver(self.config.theme, parent=self)
        self.differ = SnapshotDiffer(window, self.covers, self.theme)
        self.scheduler = RefreshScheduler(self.engine, self.on_snapshot, self.config.refresh, parent=self)
        self.picker = picker or FilePicker(window)

        self._queue_generation = 0
        self._loaders: set[QueueLoader] = set()

        control = window.control
        control.nextClicked.connect(self.next)
        control.prevClicked.connect(self.prev)
        control.addNextClicked.connect(lambda: self.picker.choose(self.enqueue_next_files))
        control.addQueueClicked.connect(lambda: self.picker.choose(self.enqueue_tail_files))
        control.importClicked.connect(lambda: self.picker.choose(self.import_playlists, playlist=True))

        window.queue_list.entryActivated.connect(self.activate)
        self.theme.themeChanged.connect(window.set_theme)

    # -------------------------
    # Lifecycle
    # -------------------------
    def start(self) -> None:
        self.window.set_theme(self.theme.current)
        if not self.app_state.engine_ready:
            logger.warning("Engine not ready, polling disabled")
            self.window.control.set_enabled(False)
            return
        self.rebuild_queue()
        self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.stop()
        # late queue loads are dropped from here on
        self._queue_generation += 1
        self.wait_for_workers()

    def wait_for_workers(self, timeout_ms: int = 2000) -> None:
        for loader in list(self._loaders):
            loader.wait(timeout_ms)
        self.theme.wait_for_workers(timeout_ms)

    # -------------------------
    # Inbound
    # -------------------------
    def on_snapshot(self, snapshot: PlaybackSnapshot) -> None:
        self.differ.apply(snapshot)
        self.window.control.sync_transport(snapshot.paused)
        self.window.set_info_path(snapshot.path)

    def rebuild_queue(self) -> None:
        """
        Snapshot the playlist now, read its tags on a QueueLoader and swap
        the rows in when they arrive. Only the newest load is shown.
        """
        self._queue_generation += 1
        loader = QueueLoader(self.engine.playlist_paths(), self._queue_generation, self.engine.entries_for, parent=self)
        loader.queueLoaded.connect(self._on_queue_loaded)
        loader.finished.connect(self._on_loader_finished)
        self._loaders.add(loader)
        loader.start()

    @Slot(int, object)
    def _on_queue_loaded(self, generation: int, queue) -> None:
        if generation != self._queue_generation:
            logger.debug("Dropping stale queue load (generation %d, current %d)", generation, self._queue_generation)
            return
        # the position is read live: the track may have moved since the last tick
        position = self.engine.current_snapshot().queue_position
        self.window.queue_list.rebuild(queue, position)

    @Slot()
    def _on_loader_finished(self) -> None:
        loader = self.sender()
        if loader is None:
            return
        self._loaders.discard(loader)
        loader.deleteLater()

    # -------------------------
    # Outbound
    # -------------------------
    def next(self) -> None:
        self.engine.skip()
        self.scheduler.accelerate()

    def prev(self) -> None:
        self.engine.prev()
        self.scheduler.accelerate()

    def activate(self, index: int) -> None:
        self.engine.skip_to(index)
        self.scheduler.accelerate()

    def enqueue_next_files(self, paths: list[str]) -> None:
        self._run_file_action("Play next", self.engine.enqueue_next, paths)

    def enqueue_tail_files(self, paths: list[str]) -> None:
        self._run_file_action("Add to queue", self.engine.enqueue_tail, paths)

    def import_playlists(self, paths: list[str]) -> None:
        def _import(path: str) -> None:
            count = self.engine.import_playlist(path)
            self.app_state.notify(f"Imported {count} track(s)", "success")

        self._run_file_action("Import", _import, paths)

    def _run_file_action(self, label: str, action: Callable[[str], None], paths: list[str]) -> None:
        path = None
        try:
            for path in paths:
                action(path)
                self.rebuild_queue()
        except ENGINE_ERRORS as e:
            logger.exception("%s failed for %s", label, path)
            self.app_state.notify(f"{label} failed: {e}", "error")
        finally:
            self.scheduler.accelerate()
