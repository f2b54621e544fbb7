# src/library/playlist_import.py
from __future__ import annotations

import logging
import os
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)

def _entry_to_path(entry: str, base_dir: str) -> str | None:
    parsed = urlparse(entry)
    if parsed.scheme == "file":
        return os.path.normpath(unquote(parsed.path))
    # "C:\..." parses with a one-letter scheme; treat it as a path
    if parsed.scheme and len(parsed.scheme) > 1:
        return None
    if os.path.isabs(entry):
        return os.path.normpath(entry)
    return os.path.normpath(os.path.join(base_dir, entry))

def parse_m3u(playlist_path: str) -> list[str]:
    """
    Absolute paths of the existing files an .m3u/.m3u8 playlist lists, in order.

    - '#' lines (#EXTM3U, #EXTINF, ...) and blank lines are skipped
    - relative entries resolve against the playlist's directory
    - file:// URLs are accepted, other URL schemes are skipped
    - entries whose file is missing are skipped with a warning

    OSError propagates when the playlist itself cannot be read.
    """
    base_dir = os.path.dirname(os.path.abspath(playlist_path))

    with open(playlist_path, "r", encoding="utf-8-sig", errors="replace") as f:
        lines = f.read().splitlines()

    paths: list[str] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        path = _entry_to_path(line, base_dir)
        if path is None:
            logger.info("Skipping non-file playlist entry: %s", line)
            continue
        if not os.path.isfile(path):
            logger.warning("Playlist %s lists a missing file: %s", playlist_path, path)
            continue
        paths.append(path)

    return paths
