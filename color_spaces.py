"""Color helpers: hex encoding, luma brightness and RGB distances."""

from __future__ import annotations

import re
from typing import Iterable, Tuple

import numpy as np

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Encode 0-255 channels as lowercase ``#rrggbb``."""
    return "#{:02x}{:02x}{:02x}".format(int(r), int(g), int(b))


def hex_to_rgb(value: str) -> RGB | None:
    """Decode ``#rrggbb`` (prefix optional, any case). Returns None when malformed."""
    match = _HEX_RE.match(value.strip())
    if match is None:
        return None
    return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]


def luma_brightness(r: float, g: float, b: float) -> float:
    """Perceptual brightness in [0, 1]."""
    w_r, w_g, w_b = LUMA_WEIGHTS
    return (r * w_r + g * w_g + b * w_b) / 255.0


def palette_to_array(colors: Iterable[RGB]) -> np.ndarray:
    """Stack RGB triples into an ``(N, 3)`` int64 array."""
    arr = np.asarray(list(colors), dtype=np.int64)
    return arr.reshape(-1, 3)


def squared_rgb_distances(pixels: np.ndarray, palette_rgb: np.ndarray) -> np.ndarray:
    """Squared Euclidean RGB distance matrix of shape ``(pixels, palette)``.

    Integer arithmetic keeps ties exact so ``argmin`` picks the first palette
    entry that reaches the minimum.
    """
    px = pixels.reshape(-1, 3).astype(np.int64, copy=False)
    diff = px[:, None, :] - palette_rgb[None, :, :]
    return np.sum(diff * diff, axis=2)
