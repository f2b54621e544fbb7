# src/library/cover.py
from __future__ import annotations

import logging
import os
from typing import Callable, Iterable

from core.models import CoverResolution, CoverState

logger = logging.getLogger(__name__)

class CoverResolver:
    """
    Finds the artwork that sits next to a track (folder.jpg, cover.jpg, ...).

    The last result is memoized by source path: asking again for the same
    path returns it without touching the filesystem. Only a different path,
    including a switch to or from None, probes again.
    """

    def __init__(
        self,
        candidates: Iterable[str],
        fallback_asset: str,
        exists: Callable[[str], bool] = os.path.isfile,
    ):
        self.candidates = tuple(candidates)
        self.fallback_asset = fallback_asset
        self._exists = exists

        self._resolved = False
        self._state = CoverState(resolved_source_path=None, asset_path=fallback_asset, found=False)

    @property
    def state(self) -> CoverState:
        return self._state

    def resolve(self, source_path: str | None) -> CoverResolution:
        if self._resolved and source_path == self._state.resolved_source_path:
            return CoverResolution(state=self._state, changed=False)

        self._resolved = True
        self._state = self._probe(source_path)
        return CoverResolution(state=self._state, changed=True)

    def _probe(self, source_path: str | None) -> CoverState:
        if source_path:
            directory = os.path.dirname(source_path)
            for name in self.candidates:
                candidate = os.path.join(directory, name)
                if self._exists(candidate):
                    logger.debug("Cover for %s: %s", source_path, candidate)
                    return CoverState(resolved_source_path=source_path, asset_path=candidate, found=True)

        logger.debug("No cover for %s, using fallback", source_path)
        return CoverState(resolved_source_path=source_path, asset_path=self.fallback_asset, found=False)
