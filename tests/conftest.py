import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from core.models import PlaybackSnapshot, QueueEntry, TrackTag


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


class FakeEngine:
    """Engine facade stand-in: records calls, serves canned snapshots."""

    def __init__(self, snapshots=None, queue=None):
        self.calls: list[tuple] = []
        self.snapshots = list(snapshots or [])
        self.queue_entries: list[QueueEntry] = list(queue or [])
        self.dirty = False
        self.fail_with: Exception | None = None
        self.probes = 0
        self.fetches = 0

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    # change probe
    def changed(self) -> bool:
        self.probes += 1
        c = self.dirty
        self.dirty = False
        return c

    def current_snapshot(self) -> PlaybackSnapshot:
        self.fetches += 1
        if self.snapshots:
            return self.snapshots.pop(0)
        return PlaybackSnapshot(tag=None, path=None, queue_position=-1)

    def queue(self):
        return list(self.queue_entries)

    def playlist_paths(self):
        return [e.source_path for e in self.queue_entries]

    def entries_for(self, paths):
        by_path = {e.source_path: e for e in self.queue_entries}
        return [by_path[p] for p in paths]

    # transport
    def play(self):
        self._record("play")

    def pause(self):
        self._record("pause")

    def skip(self):
        self._record("skip")

    def prev(self):
        self._record("prev")

    def skip_to(self, index):
        self._record("skip_to", index)

    # queue mutation
    def enqueue_next(self, path):
        self._record("enqueue_next", path)

    def enqueue_tail(self, path):
        self._record("enqueue_tail", path)
        self.queue_entries.append(QueueEntry(title=os.path.basename(path), artist="", album="", source_path=path))

    def import_playlist(self, path):
        self._record("import_playlist", path)
        return 2


class RecordingView:
    def __init__(self):
        self.events: list[tuple] = []

    def show_tag(self, tag: TrackTag) -> None:
        self.events.append(("show_tag", tag))

    def relayout_tags(self) -> None:
        self.events.append(("relayout_tags",))

    def set_cover(self, asset_path: str) -> None:
        self.events.append(("set_cover", asset_path))

    def set_active_index(self, index: int) -> None:
        self.events.append(("set_active_index", index))

    def of(self, kind: str) -> list[tuple]:
        return [e for e in self.events if e[0] == kind]


class RecordingTheme:
    def __init__(self):
        self.resolutions = []

    def on_cover(self, resolution) -> None:
        self.resolutions.append(resolution)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def theme_sink():
    return RecordingTheme()
