from __future__ import annotations

import json
import logging
import os
import platform
import queue
import socket
import subprocess
import tempfile
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


# -----------------------------
# Utilities
# -----------------------------

def _is_windows() -> bool:
    return os.name == "nt"


def _default_ipc_endpoint(app_name: str = "coverdeck-mpv") -> str:
    r"""
    Windows: named pipe (\\.\pipe\<name>-<pid>)
    Unix:    unix socket in the temp dir (<tmp>/<name>-<pid>.sock)
    """
    name = f"{app_name}-{os.getpid()}"
    if _is_windows():
        return rf"\\.\pipe\{name}"
    return os.path.join(tempfile.gettempdir(), f"{name}.sock")


def _remove_unix_socket_if_exists(path: str) -> None:
    if _is_windows():
        return
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError:
        # a stale socket that cannot be removed makes mpv fail to bind; start() reports that
        logger.warning("Could not remove stale mpv socket %s", path)


def _find_mpv_binary(preferred_path: Optional[str] = None) -> Optional[str]:
    """
    Priority:
      1) preferred_path if it is a file
      2) bundled third_party/mpv/<os>/mpv[.exe] relative to cwd
      3) "mpv" resolved from PATH by subprocess
    """
    if preferred_path and os.path.isfile(preferred_path):
        return preferred_path

    cwd = os.getcwd()
    sys_name = platform.system().lower()
    exe = "mpv.exe" if _is_windows() else "mpv"
    sub = "windows" if _is_windows() else ("macos" if sys_name == "darwin" else "linux")

    for c in (
        os.path.join(cwd, "third_party", "mpv", sub, exe),
        os.path.join(cwd, "third_party", "mpv", exe),
    ):
        if os.path.isfile(c):
            return c

    return "mpv"


# -----------------------------
# IPC transport
# -----------------------------

class _MpvJsonIpcTransport:
    """
    Line-delimited JSON over the mpv IPC endpoint.

    Unix: AF_UNIX stream socket.
    Windows: the named pipe opened as a binary file handle.

    A daemon reader thread parses incoming lines into a queue; the owner drains
    it with recv_nowait() from its own thread.
    """

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        self._stop = threading.Event()

        self._rx_thread: Optional[threading.Thread] = None
        self._rx_queue: "queue.Queue[dict[str, Any]]" = queue.Queue()
        self._tx_lock = threading.Lock()

        self._pipe_fh = None
        self._sock: Optional[socket.socket] = None

    def connect(self, timeout_s: float = 3.0) -> None:
        deadline = time.time() + timeout_s
        last_err: Optional[Exception] = None

        # mpv creates the endpoint a little after spawning; retry until it shows up
        while time.time() < deadline and not self._stop.is_set():
            try:
                if _is_windows():
                    self._pipe_fh = open(self.endpoint, "r+b", buffering=0)
                else:
                    s = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
                    try:
                        s.connect(self.endpoint)
                    except OSError:
                        s.close()
                        raise
                    self._sock = s
                last_err = None
                break
            except OSError as e:
                last_err = e
                time.sleep(0.05)

        if self._pipe_fh is None and self._sock is None:
            raise OSError(f"Failed to connect to mpv IPC endpoint {self.endpoint}: {last_err!r}")

        self._rx_thread = threading.Thread(target=self._rx_loop, name="mpv-ipc-rx", daemon=True)
        self._rx_thread.start()

    def close(self) -> None:
        self._stop.set()
        if self._sock is not None:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._sock.close()
            self._sock = None
        if self._pipe_fh is not None:
            try:
                self._pipe_fh.close()
            except OSError:
                pass
            self._pipe_fh = None

    def is_open(self) -> bool:
        return not self._stop.is_set()

    def send(self, payload: dict[str, Any]) -> None:
        line = (json.dumps(payload) + "\n").encode("utf-8")

        with self._tx_lock:
            if self._sock is not None:
                self._sock.sendall(line)
            elif self._pipe_fh is not None:
                self._pipe_fh.write(line)
                self._pipe_fh.flush()
            else:
                raise RuntimeError("mpv IPC is not connected")

    def recv_nowait(self) -> Optional[dict[str, Any]]:
        try:
            return self._rx_queue.get_nowait()
        except queue.Empty:
            return None

    def _read_chunk(self) -> bytes:
        if self._sock is not None:
            return self._sock.recv(4096)
        if self._pipe_fh is not None:
            return self._pipe_fh.read(4096)
        return b""

    def _rx_loop(self) -> None:
        buf = b""
        try:
            while not self._stop.is_set():
                try:
                    chunk = self._read_chunk()
                except OSError:
                    break
                if not chunk:
                    break

                buf += chunk
                while b"\n" in buf:
                    line, buf = buf.split(b"\n", 1)
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        msg = json.loads(line.decode("utf-8", errors="replace"))
                    except ValueError:
                        logger.debug("Dropping malformed mpv line: %r", line[:200])
                        continue
                    if isinstance(msg, dict):
                        self._rx_queue.put(msg)
        finally:
            self._stop.set()


# -----------------------------
# Backend (mpv process + JSON protocol)
# -----------------------------

@dataclass(frozen=True)
class MpvBackendConfig:
    mpv_path: Optional[str] = None
    ipc_endpoint: Optional[str] = None
    start_paused: bool = True

    audio_only: bool = True
    # stay alive with an empty / finished playlist
    idle: bool = True

    cwd: Optional[str] = None
    connect_timeout_s: float = 3.0


class MpvIpcBackend:
    """
    mpv child process controlled through JSON IPC.

    Observed properties are cached as they change; callers pump
    process_messages() from the GUI thread (the engine facade does it on
    every change probe).
    """

    def __init__(self, config: Optional[MpvBackendConfig] = None):
        self.config = config or MpvBackendConfig()

        self._mpv_bin = _find_mpv_binary(self.config.mpv_path)
        self.ipc = self.config.ipc_endpoint or _default_ipc_endpoint()

        self._proc: Optional[subprocess.Popen] = None

        # request/response correlation
        self._req_id = 0
        self._pending: dict[int, "queue.Queue[dict[str, Any]]"] = {}

        # name -> callbacks(value); name -> last value seen
        self._observers: dict[str, list[Callable[[Any], None]]] = {}
        self._props: dict[str, Any] = {}

        self._transport = _MpvJsonIpcTransport(self.ipc)

    # ---- lifecycle ----

    def start(self) -> None:
        if self._proc is not None:
            return

        _remove_unix_socket_if_exists(self.ipc)

        args = [self._mpv_bin]
        if self.config.audio_only:
            args += ["--no-video", "--audio-display=no"]
        args += [f"--idle={'yes' if self.config.idle else 'no'}"]
        args += ["--keep-open=no"]
        args += [f"--input-ipc-server={self.ipc}"]
        args += ["--terminal=no", "--msg-level=all=warn"]
        if self.config.start_paused:
            args += ["--pause=yes"]

        creationflags = getattr(subprocess, "CREATE_NO_WINDOW", 0) if _is_windows() else 0

        logger.info("Starting mpv: %s", " ".join(args))
        # FileNotFoundError here means no mpv binary; the caller reports it
        self._proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            cwd=self.config.cwd or None,
            creationflags=creationflags,
        )

        try:
            self._transport.connect(timeout_s=self.config.connect_timeout_s)
        except OSError:
            self._kill()
            raise

    def stop(self) -> None:
        if self._transport.is_open():
            try:
                self.command("quit")
            except (OSError, RuntimeError) as e:
                logger.debug("mpv quit command failed: %s", e)
        self._transport.close()
        self._kill()

    def _kill(self) -> None:
        if self._proc is None:
            return
        try:
            self._proc.terminate()
            self._proc.wait(timeout=2.0)
        except subprocess.TimeoutExpired:
            self._proc.kill()
        except OSError as e:
            logger.debug("Could not stop mpv: %s", e)
        self._proc = None
        _remove_unix_socket_if_exists(self.ipc)

    # ---- protocol ----

    def _next_id(self) -> int:
        self._req_id += 1
        return self._req_id

    def command(self, *args: Any) -> None:
        """Fire-and-forget command."""
        self._transport.send({"command": list(args)})

    def command_wait(self, *args: Any, timeout_s: float = 1.0) -> dict[str, Any]:
        """
        Send a command tagged with a request_id and pump messages until the
        matching reply arrives. mpv answers in order, so a read issued after
        a mutating command observes its effect.
        """
        rid = self._next_id()
        q: "queue.Queue[dict[str, Any]]" = queue.Queue()
        self._pending[rid] = q

        self._transport.send({"command": list(args), "request_id": rid})

        deadline = time.time() + timeout_s
        while time.time() < deadline:
            self.process_messages(max_messages=50)
            try:
                return q.get_nowait()
            except queue.Empty:
                time.sleep(0.005)

        self._pending.pop(rid, None)
        raise TimeoutError(f"mpv command timed out: {args!r}")

    def get_property(self, name: str, timeout_s: float = 1.0) -> Any:
        resp = self.command_wait("get_property", name, timeout_s=timeout_s)
        if resp.get("error") == "success":
            return resp.get("data")
        return None

    def set_property(self, name: str, value: Any) -> None:
        self.command("set_property", name, value)

    def observe_property(self, name: str, on_change: Callable[[Any], None]) -> None:
        if name not in self._observers:
            self._observers[name] = []
            self.command("observe_property", self._next_id(), name)
        self._observers[name].append(on_change)

    def cached(self, name: str, default: Any = None) -> Any:
        """Last value an observed property reported (default until the first event)."""
        return self._props.get(name, default)

    def process_messages(self, max_messages: int = 200) -> int:
        """
        Drain queued replies and property-change events. Returns how many
        messages were handled.
        """
        handled = 0
        for _ in range(max_messages):
            msg = self._transport.recv_nowait()
            if msg is None:
                break
            handled += 1

            if "request_id" in msg:
                rid = msg.get("request_id")
                if isinstance(rid, int):
                    q = self._pending.pop(rid, None)
                    if q is not None:
                        q.put_nowait(msg)
                continue

            if msg.get("event") != "property-change":
                continue

            name = msg.get("name")
            if not isinstance(name, str) or name not in self._observers:
                continue
            data = msg.get("data")
            self._props[name] = data
            for cb in list(self._observers[name]):
                try:
                    cb(data)
                except Exception:
                    logger.exception("mpv observer for %r failed", name)
        return handled

    # ---- transport / playlist controls ----

    def set_paused(self, paused: bool) -> None:
        self.set_property("pause", bool(paused))

    def play(self) -> None:
        self.set_paused(False)

    def pause(self) -> None:
        self.set_paused(True)

    def append(self, path: str, *, play_if_idle: bool = True) -> None:
        mode = "append-play" if play_if_idle else "append"
        self.command_wait("loadfile", path, mode)

    def playlist_next(self) -> None:
        self.command("playlist-next", "force")

    def playlist_prev(self) -> None:
        self.command("playlist-prev")

    def playlist_move(self, index_from: int, index_to: int) -> None:
        self.command_wait("playlist-move", int(index_from), int(index_to))

    def set_playlist_pos(self, index: int) -> None:
        self.set_property("playlist-pos", int(index))
