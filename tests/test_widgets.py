import pytest

from core.models import QueueEntry, TrackTag
from sync.differ import TagOrientation
from ui.dialogs.file_picker import FilePicker
from ui.player_bar import ControlSurface, TransportState
from ui.widgets.now_playing_widget import NowPlayingWidget
from ui.widgets.queue_list_widget import QueueListWidget
from ui.widgets.toast import ToastManager, normalize_kind


def entries(n):
    return [QueueEntry(title=f"T{i}", artist=f"A{i}", album=f"B{i}", source_path=f"/m/{i}.mp3") for i in range(n)]


# ---- queue ----

def test_rebuild_shows_title_album_artist(qapp):
    w = QueueListWidget()
    w.rebuild(entries(3), 1)
    assert w.count() == 3
    assert w.list.item(0).text().splitlines() == ["T0", "B0", "A0"]
    assert w.bolded_rows() == [1]


def test_rebuild_swaps_in_a_fresh_list(qapp):
    w = QueueListWidget()
    first = w.list
    w.rebuild(entries(2), 0)
    assert w.list is not first
    assert w.list.objectName() == "Queue"


def test_active_index_bolds_exactly_one_row(qapp):
    w = QueueListWidget()
    w.rebuild(entries(4), 0)
    w.set_active_index(2)
    assert w.bolded_rows() == [2]
    w.set_active_index(2)
    assert w.bolded_rows() == [2]


@pytest.mark.parametrize("index", [-1, 4, 99])
def test_out_of_range_index_bolds_nothing(qapp, index):
    w = QueueListWidget()
    w.rebuild(entries(4), 1)
    w.set_active_index(index)
    assert w.bolded_rows() == []


def test_empty_queue(qapp):
    w = QueueListWidget()
    w.rebuild([], -1)
    assert w.count() == 0
    w.set_active_index(0)
    assert w.bolded_rows() == []


def test_click_emits_entry_index(qapp):
    w = QueueListWidget()
    w.rebuild(entries(3), 0)
    got = []
    w.entryActivated.connect(got.append)
    w.list.itemClicked.emit(w.list.item(2))
    assert got == [2]


# ---- control surface ----

def test_play_pause_state_machine(qapp, fake_engine):
    c = ControlSurface(fake_engine)
    assert c.state is TransportState.PAUSED

    c.btn_play.click()
    assert fake_engine.calls == [("play",)]
    assert c.state is TransportState.PLAYING

    c.btn_play.click()
    assert fake_engine.calls == [("play",), ("pause",)]
    assert c.state is TransportState.PAUSED


def test_rebinding_leaves_one_handler(qapp, fake_engine):
    c = ControlSurface(fake_engine)
    for _ in range(4):
        c.btn_play.click()
    assert fake_engine.calls == [("play",), ("pause",), ("play",), ("pause",)]


def test_sync_transport_follows_engine(qapp, fake_engine):
    c = ControlSurface(fake_engine)
    c.sync_transport(False)
    assert c.state is TransportState.PLAYING
    c.sync_transport(None)
    assert c.state is TransportState.PLAYING
    c.sync_transport(True)
    assert c.state is TransportState.PAUSED
    assert fake_engine.calls == []

    # the button is bound to the handler matching the reconciled state
    c.sync_transport(False)
    c.btn_play.click()
    assert fake_engine.calls == [("pause",)]


def test_action_buttons_emit_signals(qapp, fake_engine):
    c = ControlSurface(fake_engine)
    got = []
    c.nextClicked.connect(lambda: got.append("next"))
    c.prevClicked.connect(lambda: got.append("prev"))
    c.addNextClicked.connect(lambda: got.append("add_next"))
    c.addQueueClicked.connect(lambda: got.append("add_queue"))
    c.importClicked.connect(lambda: got.append("import"))

    for btn in (c.btn_next, c.btn_prev, c.btn_add_next, c.btn_add_queue, c.btn_import):
        btn.click()
    assert got == ["next", "prev", "add_next", "add_queue", "import"]


def test_info_toggle_flips_label(qapp, fake_engine):
    c = ControlSurface(fake_engine)
    states = []
    c.infoToggled.connect(states.append)
    c.btn_info.click()
    assert c.btn_info.text() == "close"
    c.btn_info.click()
    assert c.btn_info.text() == "info"
    assert states == [True, False]


def test_set_enabled(qapp, fake_engine):
    c = ControlSurface(fake_engine)
    c.set_enabled(False)
    assert not c.btn_play.isEnabled()
    assert not c.btn_import.isEnabled()
    assert c.btn_info.isEnabled()


# ---- now playing ----

def test_show_tag_fills_labels(qapp):
    w = NowPlayingWidget()
    w.show_tag(TrackTag(artist="A", album=None, title="C"))
    assert (w.lbl_artist.text(), w.lbl_album.text(), w.lbl_title.text()) == ("A", "", "C")


def test_long_tags_switch_to_vertical_and_back(qapp):
    w = NowPlayingWidget()
    w.show()
    w.show_tag(TrackTag(artist="A" * 80, album="B" * 80, title="C"))
    w.relayout_tags()
    assert w.orientation is TagOrientation.VERTICAL
    assert not w.lbl_sep.isVisibleTo(w)

    w.show_tag(TrackTag(artist="A", album="B", title="C"))
    w.relayout_tags()
    assert w.orientation is TagOrientation.HORIZONTAL
    w.close()


def test_set_cover_loads_svg_fallback(qapp):
    from core.config import CoverConfig

    w = NowPlayingWidget()
    w.set_cover(CoverConfig().fallback_asset)
    assert w.cover_path.endswith("blank_cd.svg")
    assert w.cover.pixmap() is not None and not w.cover.pixmap().isNull()


def test_set_cover_with_unreadable_file_clears(qapp, tmp_path):
    bad = tmp_path / "cover.jpg"
    bad.write_bytes(b"nope")
    w = NowPlayingWidget()
    w.set_cover(str(bad))
    assert w.cover.pixmap().isNull()


# ---- file picker ----

def test_picker_drops_superseded_completion(qapp):
    picker = FilePicker()
    got = []
    first = picker.choose(got.append)
    gen_first = picker.generation
    second = picker.choose(got.append)

    assert picker.complete(gen_first, ["/old.mp3"], got.append) is False
    assert picker.complete(picker.generation, ["/new.mp3"], got.append) is True
    assert got == [["/new.mp3"]]
    first.reject()
    second.reject()


def test_picker_cancel_calls_nothing(qapp):
    picker = FilePicker()
    got = []
    dlg = picker.choose(got.append, playlist=True)
    dlg.reject()
    assert got == []
    assert picker.complete(picker.generation, [], got.append) is False


def test_picker_uses_existing_files_mode(qapp):
    from PySide6.QtWidgets import QFileDialog

    picker = FilePicker()
    dlg = picker.choose(lambda files: None, playlist=True)
    assert dlg.fileMode() == QFileDialog.FileMode.ExistingFiles
    assert any("m3u" in f for f in dlg.nameFilters())
    dlg.reject()


# ---- toast ----

def test_normalize_kind():
    assert normalize_kind("warn") == "warning"
    assert normalize_kind("ERROR") == "error"
    assert normalize_kind(None) == "info"
    assert normalize_kind("weird") == "info"


def test_toasts_stack_and_cap(qapp):
    from PySide6.QtWidgets import QWidget

    host = QWidget()
    host.resize(400, 300)
    mgr = ToastManager(host, max_visible=2)
    for i in range(3):
        mgr.show_toast(f"msg {i}", "info", timeout_ms=10_000)
    assert [t.lbl.text() for t in mgr.toasts] == ["msg 1", "msg 2"]
