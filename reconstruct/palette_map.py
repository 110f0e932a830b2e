"""Requantize an image onto the dominant palette, revealed a batch of rows at a time."""

from __future__ import annotations

import logging
from typing import Generator, Iterable, Sequence, Tuple

import numpy as np

from color_spaces import RGB, hex_to_rgb, palette_to_array, squared_rgb_distances
from .errors import PerPixelReadFailure
from .models import ColorPaletteItem, PixelBuffer
from .progress import CancelCheck, ProgressCb, _check_cancelled, _report, cancellable
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

ROWS_PER_BATCH = 10
PaletteEntry = ColorPaletteItem | str | Tuple[int, int, int]


def palette_rgb(palette: Iterable[PaletteEntry]) -> list[RGB]:
    """Normalize palette entries to RGB triples, dropping malformed hex codes."""
    colors: list[RGB] = []
    for entry in palette:
        if isinstance(entry, ColorPaletteItem):
            rgb = hex_to_rgb(entry.hex)
        elif isinstance(entry, str):
            rgb = hex_to_rgb(entry)
        else:
            r, g, b = entry[:3]
            rgb = (int(r), int(g), int(b))
        if rgb is None:
            logger.warning("Ignoring malformed palette entry %r", entry)
            continue
        colors.append(rgb)
    return colors


def nearest_palette_indices(pixels: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Index of the closest palette color per pixel; ties go to the earliest entry."""
    return np.argmin(squared_rgb_distances(pixels, palette), axis=1)


def map_row(row: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Replace the RGB of an ``(w, 4)`` row with its nearest palette colors, keeping alpha."""
    mapped = row.copy()
    if row.shape[0]:
        idx = nearest_palette_indices(row[:, :3], palette)
        mapped[:, :3] = palette[idx].astype(np.uint8)
    return mapped


def _push(surface: DrawingSurface, work: np.ndarray) -> None:
    try:
        surface.blit(PixelBuffer.from_array(work), 0, 0)
    except PerPixelReadFailure as exc:
        logger.warning("Skipping partial palette update: %s", exc)


@cancellable
def reconstruct_palette(
    buffer: PixelBuffer,
    surface: DrawingSurface,
    palette: Sequence[PaletteEntry],
    progress_callback: ProgressCb | None = None,
    is_cancelled: CancelCheck | None = None,
) -> Generator[None, None, None]:
    """Map every pixel to its nearest palette color, pushing the result every 10 rows."""
    colors = palette_rgb(palette)
    if not colors:
        logger.info("Empty palette; nothing to draw")
        return
    palette_arr = palette_to_array(colors)

    work = buffer.as_array().copy()
    total_rows = buffer.height
    for y in range(total_rows):
        _check_cancelled(is_cancelled)
        work[y] = map_row(work[y], palette_arr)
        rows_done = y + 1
        if rows_done % ROWS_PER_BATCH == 0 and rows_done < total_rows:
            _push(surface, work)
            _report(progress_callback, rows_done / total_rows, is_cancelled)
            yield

    _check_cancelled(is_cancelled)
    _push(surface, work)
    _report(progress_callback, 1.0, is_cancelled)
