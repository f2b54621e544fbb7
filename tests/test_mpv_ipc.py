import warnings

import pytest

from player.mpv_ipc import MpvBackendConfig, MpvIpcBackend, _find_mpv_binary


class ScriptedTransport:
    def __init__(self):
        self.sent = []
        self.inbox = []

    def send(self, payload):
        self.sent.append(payload)

    def recv_nowait(self):
        return self.inbox.pop(0) if self.inbox else None

    def is_open(self):
        return True

    def close(self):
        pass


@pytest.fixture
def backend():
    b = MpvIpcBackend(MpvBackendConfig(mpv_path="/nonexistent/mpv", ipc_endpoint="/tmp/coverdeck-test.sock"))
    b._transport = ScriptedTransport()
    return b


def test_explicit_binary_wins(tmp_path):
    exe = tmp_path / "mpv"
    exe.write_bytes(b"")
    assert _find_mpv_binary(str(exe)) == str(exe)


def test_binary_falls_back_to_path_lookup(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _find_mpv_binary(None) == "mpv"


def test_observe_sends_one_command_per_property(backend):
    seen = []
    backend.observe_property("path", seen.append)
    backend.observe_property("path", seen.append)
    cmds = [p["command"] for p in backend._transport.sent]
    assert len(cmds) == 1
    assert cmds[0][0] == "observe_property" and cmds[0][2] == "path"


def test_property_change_updates_cache_and_observers(backend):
    seen = []
    backend.observe_property("pause", seen.append)
    backend._transport.inbox += [
        {"event": "property-change", "name": "pause", "data": False},
        {"event": "property-change", "name": "volume", "data": 50},
        {"event": "start-file"},
    ]
    assert backend.process_messages() == 3
    assert seen == [False]
    assert backend.cached("pause") is False
    assert backend.cached("volume") is None


def test_get_property_matches_reply(backend):
    def reply_later(payload):
        backend._transport.sent.append(payload)
        backend._transport.inbox.append({"request_id": payload["request_id"], "error": "success", "data": 7})

    backend._transport.send = reply_later
    assert backend.get_property("playlist-count") == 7


def test_get_property_error_is_none(backend):
    def reply_later(payload):
        backend._transport.inbox.append({"request_id": payload["request_id"], "error": "property unavailable"})

    backend._transport.send = reply_later
    assert backend.get_property("path") is None


def test_command_wait_times_out(backend):
    with pytest.raises(TimeoutError):
        backend.command_wait("get_property", "path", timeout_s=0.05)


def test_transport_commands(backend):
    backend.play()
    backend.pause()
    backend.playlist_next()
    backend.playlist_prev()
    backend.set_playlist_pos(3)
    assert [p["command"] for p in backend._transport.sent] == [
        ["set_property", "pause", False],
        ["set_property", "pause", True],
        ["playlist-next", "force"],
        ["playlist-prev"],
        ["set_property", "playlist-pos", 3],
    ]


def test_start_without_binary_raises(tmp_path):
    b = MpvIpcBackend(MpvBackendConfig(mpv_path=str(tmp_path / "missing-mpv"), ipc_endpoint=str(tmp_path / "s.sock")))
    b._mpv_bin = str(tmp_path / "missing-mpv")
    with pytest.raises(FileNotFoundError):
        b.start()


def test_module_compiles_without_escape_warnings():
    import player.mpv_ipc as mod

    with open(mod.__file__, encoding="utf-8") as fh:
        source = fh.read()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(source, mod.__file__, "exec")
