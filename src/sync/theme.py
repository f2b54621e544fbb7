from __future__ import annotations

import logging
import math
from typing import Callable

from PySide6.QtCore import QObject, QThread, Signal, Slot

from core.config import ThemeConfig
from core.models import CoverResolution, Rgb, ThemeState

from .palette import extract_light_muted

logger = logging.getLogger(__name__)


def highlight_for(rgb: Rgb, factor: float = 0.7) -> Rgb:
    """Hover colour of a background: round(sqrt(c^2 * factor)) per channel."""
    return tuple(
        max(0, min(255, int(round(math.sqrt(c * c * factor)))))
        for c in rgb
    )  # type: ignore[return-value]


def rgb_css(rgb: Rgb) -> str:
    r, g, b = rgb
    return f"rgb({r}, {g}, {b})"


class PaletteWorker(QThread):
    paletteReady = Signal(int, object)   # generation, (r, g, b)
    paletteFailed = Signal(int, str)     # generation, message

    def __init__(self, image_path: str, generation: int, extractor: Callable[[str], Rgb], parent=None):
        super().__init__(parent)
        self.image_path = image_path
        self.generation = generation
        self._extractor = extractor

    def run(self):
        try:
            rgb = self._extractor(self.image_path)
        except (OSError, ValueError) as e:
            self.paletteFailed.emit(self.generation, str(e))
            return
        self.paletteReady.emit(self.generation, tuple(int(c) for c in rgb))


class ThemeDeriver(QObject):
    """
    Background + hover colours derived from the current cover.

    Every cover outcome bumps a generation counter. An extraction that
    finishes after a newer cover was resolved carries an old generation and
    is dropped, so the theme always belongs to the cover on screen.
    """

    themeChanged = Signal(object)   # ThemeState

    def __init__(self, config: ThemeConfig | None = None, extractor: Callable[[str], Rgb] = extract_light_muted, parent=None):
        super().__init__(parent)
        self.config = config or ThemeConfig()
        self._extractor = extractor
        self._generation = 0
        self._workers: set[PaletteWorker] = set()
        self._current = self._state_for(self.config.default_background)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current(self) -> ThemeState:
        return self._current

    def _state_for(self, background: Rgb) -> ThemeState:
        return ThemeState(
            background=tuple(background),  # type: ignore[arg-type]
            highlight=highlight_for(background, self.config.highlight_factor),
        )

    def on_cover(self, resolution: CoverResolution) -> None:
        self._generation += 1
        cover = resolution.state
        if cover.found:
            self._start_extraction(cover.asset_path, self._generation)
        else:
            self.apply_default()

    def apply_default(self) -> None:
        self.apply(self.config.default_background)

    def apply(self, background: Rgb) -> None:
        self._current = self._state_for(background)
        self.themeChanged.emit(self._current)

    def _start_extraction(self, image_path: str, generation: int) -> None:
        worker = PaletteWorker(image_path, generation, self._extractor, parent=self)
        worker.paletteReady.connect(self._on_palette_ready)
        worker.paletteFailed.connect(self._on_palette_failed)
        worker.finished.connect(self._on_worker_finished)
        self._workers.add(worker)
        worker.start()

    @Slot()
    def _on_worker_finished(self) -> None:
        worker = self.sender()
        if worker is None:
            return
        self._workers.discard(worker)
        worker.deleteLater()

    def _on_palette_ready(self, generation: int, rgb) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale palette (generation %d, current %d)", generation, self._generation)
            return
        self.apply(tuple(rgb))

    def _on_palette_failed(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        logger.warning("Palette extraction failed, using default theme: %s", message)
        self.apply_default()

    def wait_for_workers(self, timeout_ms: int = 2000) -> None:
        for worker in list(self._workers):
            worker.wait(timeout_ms)
