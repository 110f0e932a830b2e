"""Block-average mosaic reconstruction."""

from __future__ import annotations

import logging
from typing import Generator

import numpy as np

from .errors import PerPixelReadFailure
from .models import PixelBuffer
from .progress import CancelCheck, ProgressCb, _check_cancelled, _report, cancellable
from .surface import DrawingSurface

logger = logging.getLogger(__name__)


def block_mean(block: np.ndarray) -> tuple[int, int, int]:
    """Floor mean of R, G, B over an ``(h, w, 4)`` block."""
    flat = block.reshape(-1, 4)[:, :3].astype(np.int64)
    n = flat.shape[0]
    if n == 0:
        raise PerPixelReadFailure("Empty block")
    r, g, b = (int(v) // n for v in flat.sum(axis=0))
    return r, g, b


@cancellable
def reconstruct_mosaic(
    buffer: PixelBuffer,
    surface: DrawingSurface,
    block_size: int,
    progress_callback: ProgressCb | None = None,
    is_cancelled: CancelCheck | None = None,
) -> Generator[None, None, None]:
    """Fill each ``block_size`` cell with its mean color, one row of cells per step."""
    block_size = int(block_size)
    if block_size < 1:
        raise ValueError("block_size must be at least 1")

    image = buffer.as_array()
    h, w = buffer.height, buffer.width
    total_rows = -(-h // block_size)
    if total_rows == 0 or w == 0:
        _report(progress_callback, 1.0, is_cancelled)
        return

    for row, y0 in enumerate(range(0, h, block_size)):
        _check_cancelled(is_cancelled)
        y1 = min(h, y0 + block_size)
        row_slice = image[y0:y1]
        for x0 in range(0, w, block_size):
            x1 = min(w, x0 + block_size)
            try:
                color = block_mean(row_slice[:, x0:x1])
                surface.fill_rect(x0, y0, x1 - x0, y1 - y0, color)
            except PerPixelReadFailure as exc:
                logger.warning("Skipping mosaic cell at %d,%d: %s", x0, y0, exc)
        _report(progress_callback, (row + 1) / total_rows)
        yield
