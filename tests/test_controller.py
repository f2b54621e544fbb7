import os

import pytest
from PIL import Image
from PySide6.QtCore import QCoreApplication

from core.config import load_config
from core.models import PlaybackSnapshot, QueueEntry, TrackTag
from core.state import AppState
from ui.controller import PlaybackController
from ui.main_window import MainWindow
from ui.player_bar import TransportState


@pytest.fixture
def app_state(qapp, fake_engine):
    state = AppState()
    state.config = load_config({})
    state.engine = fake_engine
    state.engine_ready = True
    return state


@pytest.fixture
def notes(app_state):
    got = []
    app_state.notification.connect(got.append)
    return got


@pytest.fixture
def window(app_state):
    w = MainWindow(app_state)
    yield w
    w.close()


@pytest.fixture
def controller(app_state, window):
    c = PlaybackController(app_state, window, app_state.config)
    yield c
    c.shutdown()


def entries(n, base="/m"):
    return [QueueEntry(title=f"T{i}", artist="A", album="B", source_path=f"{base}/{i}.opus") for i in range(n)]


def settle(controller):
    """Let queue loads finish and deliver their rows."""
    controller.wait_for_workers()
    QCoreApplication.processEvents()


def test_start_rebuilds_queue_and_polls_immediately(controller, window, fake_engine):
    fake_engine.queue_entries = entries(3)
    controller.start()
    assert controller.scheduler.pending_interval_ms() == 0
    settle(controller)
    assert window.queue_list.count() == 3
    assert window.theme.background == (216, 191, 216)


def test_engine_not_ready_disables_controls(app_state, controller, window):
    app_state.engine_ready = False
    controller.start()
    assert not window.control.btn_play.isEnabled()
    assert not controller.scheduler.is_pending()


def test_next_skips_then_accelerates(controller, fake_engine):
    controller.scheduler.tick()
    assert controller.scheduler.pending_interval_ms() == 3000

    controller.window.control.btn_next.click()
    assert fake_engine.calls == [("skip",)]
    assert controller.scheduler.pending_interval_ms() == 100


def test_prev_skips_back_then_accelerates(controller, fake_engine):
    controller.window.control.btn_prev.click()
    assert fake_engine.calls == [("prev",)]
    assert controller.scheduler.pending_interval_ms() == 100


def test_clicking_a_queue_row_jumps_there(controller, window, fake_engine):
    fake_engine.queue_entries = entries(4)
    controller.rebuild_queue()
    settle(controller)
    window.queue_list.list.itemClicked.emit(window.queue_list.list.item(3))
    assert fake_engine.calls == [("skip_to", 3)]
    assert controller.scheduler.pending_interval_ms() == 100


def test_snapshot_renders_tag_cover_and_marker(controller, window, fake_engine, tmp_path):
    album = tmp_path / "x"
    album.mkdir()
    Image.new("RGB", (32, 32), (210, 200, 190)).save(album / "cover.jpg")
    song = str(album / "song.opus")

    fake_engine.queue_entries = entries(3)
    controller.rebuild_queue()
    settle(controller)

    controller.on_snapshot(PlaybackSnapshot(tag=TrackTag("A", "B", "C"), path=song, queue_position=2, paused=False))

    np = window.now_playing
    assert (np.lbl_artist.text(), np.lbl_album.text(), np.lbl_title.text()) == ("A", "B", "C")
    assert np.cover_path == os.path.join(str(album), "cover.jpg")
    assert window.queue_list.bolded_rows() == [2]
    assert window.control.state is TransportState.PLAYING


def test_same_snapshot_twice_keeps_marker(controller, window, fake_engine):
    fake_engine.queue_entries = entries(3)
    controller.rebuild_queue()
    settle(controller)
    snap = PlaybackSnapshot(tag=TrackTag("A", "B", "C"), path="/nowhere/song.opus", queue_position=2)
    controller.on_snapshot(snap)
    controller.on_snapshot(snap)
    assert window.queue_list.bolded_rows() == [2]
    assert window.now_playing.cover_path.endswith("blank_cd.svg")


def test_enqueue_tail_rebuilds_after_each_file(controller, window, fake_engine):
    controller.enqueue_tail_files(["/a.mp3", "/b.mp3"])
    assert fake_engine.calls == [("enqueue_tail", "/a.mp3"), ("enqueue_tail", "/b.mp3")]
    assert controller.scheduler.pending_interval_ms() == 100
    settle(controller)
    assert window.queue_list.count() == 2


def test_rebuild_marks_the_live_position_not_the_last_tick(controller, window, fake_engine):
    # the track advanced on its own; no tick has run since
    fake_engine.queue_entries = entries(2)
    fake_engine.snapshots = [PlaybackSnapshot(tag=None, path="/m/1.opus", queue_position=1)]

    controller.enqueue_tail_files(["/m/2.opus"])
    settle(controller)

    assert window.queue_list.count() == 3
    assert window.queue_list.bolded_rows() == [1]


def test_only_the_newest_queue_load_is_shown(controller, window, fake_engine):
    fake_engine.queue_entries = entries(2)
    controller.rebuild_queue()
    fake_engine.queue_entries = entries(5)
    controller.rebuild_queue()
    settle(controller)
    assert window.queue_list.count() == 5


def test_queue_load_after_shutdown_is_dropped(controller, window, fake_engine):
    fake_engine.queue_entries = entries(3)
    controller.rebuild_queue()
    controller.shutdown()
    QCoreApplication.processEvents()
    assert window.queue_list.count() == 0


def test_enqueue_next_calls_engine(controller, fake_engine):
    controller.enqueue_next_files(["/a.mp3"])
    assert fake_engine.calls == [("enqueue_next", "/a.mp3")]


def test_import_reports_count(controller, fake_engine, notes):
    controller.import_playlists(["/lists/mix.m3u"])
    assert fake_engine.calls == [("import_playlist", "/lists/mix.m3u")]
    assert notes[-1].notify_type == "success"
    assert "2" in notes[-1].message


def test_failing_file_action_notifies_and_still_accelerates(controller, fake_engine, notes):
    fake_engine.fail_with = OSError("mpv went away")
    controller.enqueue_tail_files(["/a.mp3", "/b.mp3"])

    assert fake_engine.calls == [("enqueue_tail", "/a.mp3")]
    assert notes[-1].notify_type == "error"
    assert "mpv went away" in notes[-1].message
    assert controller.scheduler.pending_interval_ms() == 100


def test_queued_notifications_become_toasts(app_state, window):
    app_state.queue_notification("Failed to start playback engine: no mpv", "error")
    window.show_queued_notifications()
    assert [t.lbl.text() for t in window.toasts.toasts] == ["Failed to start playback engine: no mpv"]
    assert app_state.queued_notifications == []


def test_theme_applies_hover_highlight(window):
    from core.models import ThemeState

    window.set_theme(ThemeState(background=(216, 191, 216), highlight=(181, 160, 181)))
    css = window.central_widget.styleSheet()
    assert "rgb(216, 191, 216)" in css
    assert "rgb(181, 160, 181)" in css


def test_info_toggle_swaps_queue_for_info(controller, window):
    window.show()
    window.control.btn_info.click()
    assert window.info_panel.isVisible()
    assert not window.queue_list.isVisible()
    window.control.btn_info.click()
    assert not window.info_panel.isVisible()
