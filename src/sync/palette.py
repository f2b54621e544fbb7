from __future__ import annotations

import colorsys
from dataclasses import dataclass

from PIL import Image

from core.models import Rgb

# "light muted" swatch targets: (min, target, max)
LIGHT_MUTED_LUMA = (0.55, 0.74, 1.0)
LIGHT_MUTED_SAT = (0.0, 0.30, 0.40)

WEIGHT_SAT = 3.0
WEIGHT_LUMA = 6.5
WEIGHT_POPULATION = 0.5


@dataclass(frozen=True)
class Swatch:
    rgb: Rgb
    population: int

    @property
    def hls(self) -> tuple[float, float, float]:
        r, g, b = (c / 255.0 for c in self.rgb)
        return colorsys.rgb_to_hls(r, g, b)


def quantize_swatches(image_path: str, max_colors: int = 16, sample: int = 128) -> list[Swatch]:
    """Median-cut the image down to at most `max_colors` swatches."""
    with Image.open(image_path) as img:
        img = img.convert("RGB")
        img.thumbnail((sample, sample))
        quant = img.quantize(colors=max_colors)
        palette = quant.getpalette() or []
        counts = quant.getcolors(maxcolors=256) or []

    swatches = []
    for count, index in counts:
        r, g, b = palette[index * 3: index * 3 + 3]
        swatches.append(Swatch(rgb=(int(r), int(g), int(b)), population=int(count)))
    return swatches


def _score(swatch: Swatch, max_population: int) -> float:
    _h, luma, sat = swatch.hls
    sat_score = 1.0 - abs(sat - LIGHT_MUTED_SAT[1])
    luma_score = 1.0 - abs(luma - LIGHT_MUTED_LUMA[1])
    pop_score = swatch.population / max_population if max_population else 0.0
    total = WEIGHT_SAT + WEIGHT_LUMA + WEIGHT_POPULATION
    return (sat_score * WEIGHT_SAT + luma_score * WEIGHT_LUMA + pop_score * WEIGHT_POPULATION) / total


def _in_range(swatch: Swatch) -> bool:
    _h, luma, sat = swatch.hls
    return (
        LIGHT_MUTED_LUMA[0] <= luma <= LIGHT_MUTED_LUMA[2]
        and LIGHT_MUTED_SAT[0] <= sat <= LIGHT_MUTED_SAT[2]
    )


def pick_light_muted(swatches: list[Swatch]) -> Rgb:
    if not swatches:
        raise ValueError("no swatches to pick from")

    max_population = max(s.population for s in swatches)
    # prefer swatches inside the light-muted window, else the closest overall
    pool = [s for s in swatches if _in_range(s)] or swatches
    best = max(pool, key=lambda s: _score(s, max_population))
    return best.rgb


def extract_light_muted(image_path: str) -> Rgb:
    """
    Light, low-saturation colour of an image. Raises OSError (or PIL's
    UnidentifiedImageError, an OSError subclass) for unreadable images.
    """
    return pick_light_muted(quantize_swatches(image_path))
