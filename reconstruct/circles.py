"""Stochastic circle stippling: random samples drawn as brightness-sized discs."""

from __future__ import annotations

import logging
import math
from typing import Generator

import numpy as np

from color_spaces import luma_brightness
from .errors import PerPixelReadFailure
from .models import PixelBuffer
from .progress import CancelCheck, ProgressCb, _check_cancelled, _report, cancellable
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

BACKGROUND = (0x11, 0x18, 0x27)  # #111827
CHECKPOINTS = 200


def circle_radius(color: tuple[int, int, int], min_radius: float, max_radius: float) -> float:
    """Interpolate between the radii by luma; brighter pixels get bigger circles."""
    brightness = luma_brightness(*color)
    return min_radius + (max_radius - min_radius) * brightness


@cancellable
def reconstruct_circles(
    buffer: PixelBuffer,
    surface: DrawingSurface,
    num_circles: int,
    min_radius: float,
    max_radius: float,
    progress_callback: ProgressCb | None = None,
    is_cancelled: CancelCheck | None = None,
    rng: np.random.Generator | None = None,
) -> Generator[None, None, None]:
    """Clear to the background, then draw ``num_circles`` randomly placed circles."""
    num_circles = int(num_circles)
    if num_circles < 1:
        raise ValueError("num_circles must be at least 1")
    if min_radius > max_radius:
        raise ValueError("min_radius must not exceed max_radius")
    rng = rng if rng is not None else np.random.default_rng()

    surface.clear(BACKGROUND)
    if buffer.pixel_count == 0:
        _report(progress_callback, 1.0, is_cancelled)
        return

    image = buffer.as_array()
    batch_size = math.ceil(num_circles / CHECKPOINTS)

    for i in range(num_circles):
        _check_cancelled(is_cancelled)
        x = int(rng.integers(0, buffer.width))
        y = int(rng.integers(0, buffer.height))
        try:
            r, g, b = (int(v) for v in image[y, x, :3])
            surface.fill_circle(x, y, circle_radius((r, g, b), min_radius, max_radius), (r, g, b))
        except PerPixelReadFailure as exc:
            logger.warning("Skipping circle at %d,%d: %s", x, y, exc)

        if i % batch_size == 0:
            _report(progress_callback, i / num_circles, is_cancelled)
            yield

    _report(progress_callback, 1.0, is_cancelled)
