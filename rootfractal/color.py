# color.py

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
from PIL import ImageColor

RGB = Tuple[int, int, int]

BLACK: RGB = (0, 0, 0)


def read_color(value: Any) -> RGB:
    """Parse ``"red"``, ``"#ff0000"``, ``"0xff0000"``, an int or an ``[r, g, b]`` list."""
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return tuple(int(c) for c in value)
    if isinstance(value, int):
        return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    s = str(value).strip()
    if s.lower().startswith("0x"):
        return read_color(int(s, 16))
    try:
        return ImageColor.getrgb(s)[:3]
    except ValueError as e:
        raise ValueError(f"unknown color '{value}'") from e


def gradient(steps: np.ndarray, num_steps: int, start: RGB, end: RGB) -> np.ndarray:
    """Linear gradient: step ``num_steps`` (or more) lands on ``end``."""
    ratio = np.minimum(steps, num_steps).astype(np.float64) / float(num_steps)
    ratio = ratio[..., None]
    rgb = np.asarray(end, dtype=np.float64) * ratio + np.asarray(start, dtype=np.float64) * (1.0 - ratio)
    return rgb.astype(np.uint8)


class Palette:
    """Maps iteration counts to colours; counts <= 0 (failures) are black."""

    def colors_for(self, counts: np.ndarray) -> np.ndarray:
        counts = np.asarray(counts)
        out = np.zeros(counts.shape + (3,), dtype=np.uint8)
        found = counts > 0
        if found.any():
            out[found] = self._colors(counts[found])
        return out

    def color(self, count: int) -> RGB:
        return tuple(int(c) for c in self.colors_for(np.array([count]))[0])

    def _colors(self, counts: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class GradientPalette(Palette):
    def __init__(self, max_iterations: int, start: Any = "red", end: Any = "blue"):
        self.num_steps = max_iterations if max_iterations > 0 else 10
        self.start = read_color(start)
        self.end = read_color(end)

    def _colors(self, counts):
        return gradient(counts, self.num_steps, self.start, self.end)


class MultiGradientPalette(Palette):
    """Split the iteration range into buckets, one gradient per pair of colours."""

    DEFAULT_COLORS = ("red", "cyan", "blue", "magenta", "lime", "yellow")

    def __init__(self, max_iterations: int, colors: Optional[Iterable[Any]] = None):
        if isinstance(colors, str):
            colors = colors.replace(";", ",").replace(" ", ",").split(",")
        parsed = [read_color(c) for c in (colors or ()) if str(c).strip()]
        if len(parsed) < 2:
            parsed = [read_color(c) for c in self.DEFAULT_COLORS]
        self.colors = parsed
        self.max_steps = max_iterations

        pairs = len(self.colors) - 1
        bucket = max(1, self.max_steps // pairs)
        if self.max_steps % pairs > 0:
            # left-overs go in a last bucket
            bucket += 1
        self.bucket_size = bucket

    def _colors(self, counts):
        steps = np.minimum(counts, self.max_steps) - 1
        idx = np.minimum(steps // self.bucket_size, len(self.colors) - 2)
        within = steps - idx * self.bucket_size + 1
        starts = np.asarray(self.colors, dtype=np.float64)[idx]
        ends = np.asarray(self.colors, dtype=np.float64)[idx + 1]
        ratio = (np.minimum(within, self.bucket_size) / float(self.bucket_size))[..., None]
        return (ends * ratio + starts * (1.0 - ratio)).astype(np.uint8)


class RandomPalette(Palette):
    """A random colour per distinct count, stable for the palette's lifetime."""

    def __init__(self, max_iterations: int, seed: Optional[int] = None):
        self._rng = np.random.default_rng(None if seed is None else int(seed))
        self._cache: Dict[int, RGB] = {}

    def _colors(self, counts):
        unique = np.unique(counts)
        for n in unique:
            n = int(n)
            if n not in self._cache:
                self._cache[n] = tuple(int(c) for c in self._rng.integers(0, 256, size=3))
        table = np.array([self._cache[int(n)] for n in unique], dtype=np.uint8)
        return table[np.searchsorted(unique, counts)]


_PALETTES = {
    "gradient": GradientPalette,
    "multi-gradient": MultiGradientPalette,
    "random": RandomPalette,
}


def palette_names() -> Sequence[str]:
    return sorted(_PALETTES)


def make_palette(name: Optional[str], options: Optional[Dict[str, Any]], max_iterations: int) -> Palette:
    key = (name or "gradient").strip().lower()
    if key == "default":
        key = "gradient"
    if key not in _PALETTES:
        raise ValueError(f"unknown palette '{name}', expected one of: {', '.join(palette_names())}")
    try:
        return _PALETTES[key](max_iterations, **(options or {}))
    except TypeError as e:
        raise ValueError(f"invalid options for palette '{key}': {e}") from e
