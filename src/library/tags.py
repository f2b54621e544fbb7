# src/library/tags.py
from __future__ import annotations

import logging
import os

from mutagen import File as MutagenFile
from mutagen import MutagenError

from core.models import QueueEntry, TrackTag

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".oga", ".opus", ".wav"}
PLAYLIST_EXTS = {".m3u", ".m3u8"}

def _first(easy, key: str) -> str | None:
    v = easy.get(key)
    if not v:
        return None
    if isinstance(v, list):
        return (str(v[0]).strip() if v else None) or None
    s = str(v).strip()
    return s or None

def read_track_tag(path: str) -> TrackTag:
    """
    artist/album/title via mutagen's easy interface; blank values are None.
    A file mutagen cannot parse still gets a tag, titled after the file stem.
    """
    stem = os.path.splitext(os.path.basename(path))[0]
    try:
        audio = MutagenFile(path, easy=True)
    except (MutagenError, OSError) as e:
        logger.warning("Cannot read tags from %s: %s", path, e)
        audio = None

    if audio is None:
        return TrackTag(artist=None, album=None, title=stem or None)

    return TrackTag(
        artist=_first(audio, "artist"),
        album=_first(audio, "album"),
        title=_first(audio, "title"),
    )

def queue_entry_from_tag(path: str, tag: TrackTag) -> QueueEntry:
    title = tag.title or os.path.splitext(os.path.basename(path))[0]
    return QueueEntry(
        title=title,
        artist=tag.artist or "",
        album=tag.album or "",
        source_path=path,
    )
