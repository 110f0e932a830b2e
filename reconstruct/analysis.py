"""Histogram, dominant-color palette and basic properties of a pixel buffer."""

from __future__ import annotations

import logging
from typing import List, Tuple

import numpy as np

from color_spaces import rgb_to_hex
from .errors import AnalysisError, EmptyImageError
from .io_utils import decode
from .models import (
    AnalysisResult,
    ColorPaletteItem,
    HistogramDataPoint,
    ImageProperties,
    PixelBuffer,
)

logger = logging.getLogger(__name__)

PALETTE_SAMPLE_TARGET = 20000  # sampled pixels stay around this count
PALETTE_SIZE = 10
QUANT_SHIFT = 4  # 16 buckets per channel


def _histogram(rgb: np.ndarray) -> Tuple[HistogramDataPoint, ...]:
    """Full-resolution 256-bin counts per channel."""
    counts = [np.bincount(rgb[:, c], minlength=256) for c in range(3)]
    return tuple(
        HistogramDataPoint(intensity=i, r=int(counts[0][i]), g=int(counts[1][i]), b=int(counts[2][i]))
        for i in range(256)
    )


def palette_sample_rate(pixel_count: int) -> int:
    """Stride between sampled pixels for palette extraction."""
    return max(1, pixel_count // PALETTE_SAMPLE_TARGET)


def _dominant_palette(rgb: np.ndarray) -> Tuple[ColorPaletteItem, ...]:
    """Count quantized colors on a strided sample and keep the most frequent."""
    if rgb.shape[0] == 0:
        raise EmptyImageError("No pixels to sample")
    sample_rate = palette_sample_rate(rgb.shape[0])
    sampled = rgb[::sample_rate].astype(np.int64) >> QUANT_SHIFT
    keys = (sampled[:, 0] << 8) | (sampled[:, 1] << 4) | sampled[:, 2]
    buckets, first_seen, counts = np.unique(keys, return_index=True, return_counts=True)
    # lexsort: last key is primary -> descending count, then first-seen order
    order = np.lexsort((first_seen, -counts))[:PALETTE_SIZE]

    palette: List[ColorPaletteItem] = []
    for idx in order:
        key = int(buckets[idx])
        r, g, b = (key >> 8) & 0xF, (key >> 4) & 0xF, key & 0xF
        palette.append(
            ColorPaletteItem(
                hex=rgb_to_hex(r << QUANT_SHIFT, g << QUANT_SHIFT, b << QUANT_SHIFT),
                count=int(counts[idx]),
            )
        )
    logger.debug(
        "Palette: sample_rate=%d sampled=%d buckets=%d kept=%d",
        sample_rate, sampled.shape[0], buckets.size, len(palette),
    )
    return tuple(palette)


def analyze(buffer: PixelBuffer) -> AnalysisResult:
    """Compute properties, histogram and dominant palette of ``buffer``."""
    if not isinstance(buffer, PixelBuffer):
        raise AnalysisError(f"Expected PixelBuffer, got {type(buffer).__name__}")
    properties = ImageProperties(
        width=buffer.width,
        height=buffer.height,
        pixel_count=buffer.pixel_count,
    )
    rgb = buffer.samples.reshape(-1, 4)[:, :3]
    histogram = _histogram(rgb)
    try:
        palette = _dominant_palette(rgb)
    except EmptyImageError:
        logger.info("Image has no pixels; returning an empty palette")
        palette = ()
    return AnalysisResult(properties=properties, histogram=histogram, palette=palette)


def analyze_bytes(source: bytes) -> AnalysisResult:
    """Decode then analyze. DecodeError propagates with no partial result."""
    return analyze(decode(source))
