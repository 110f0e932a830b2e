"""Reconstruction dispatch: build the task that matches a style."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

import numpy as np

from .circles import reconstruct_circles
from .models import CircleParameters, MosaicParameters, PaletteParameters, PixelBuffer, ReconstructionParameters
from .mosaic import reconstruct_mosaic
from .palette_map import PaletteEntry, reconstruct_palette
from .progress import CancelCheck, ProgressCb, ReconstructionTask
from .surface import DrawingSurface


class ReconstructionStyle(str, Enum):
    MOSAIC = "mosaic"
    CIRCLES = "circles"
    PALETTE = "paletteQuantization"

    @classmethod
    def parse(cls, value: "str | ReconstructionStyle") -> "ReconstructionStyle":
        """Accept enum members, values or a few short aliases."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {"palette": cls.PALETTE, "palettequantization": cls.PALETTE, "circle": cls.CIRCLES}
        if key in aliases:
            return aliases[key]
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown reconstruction style: {value!r}")


_PARAMETER_TYPES = {
    ReconstructionStyle.MOSAIC: MosaicParameters,
    ReconstructionStyle.CIRCLES: CircleParameters,
    ReconstructionStyle.PALETTE: PaletteParameters,
}


def default_parameters(style: ReconstructionStyle) -> ReconstructionParameters:
    return _PARAMETER_TYPES[ReconstructionStyle.parse(style)]()


def build_task(
    style: ReconstructionStyle | str,
    buffer: PixelBuffer,
    surface: DrawingSurface,
    parameters: ReconstructionParameters | None = None,
    palette: Sequence[PaletteEntry] = (),
    progress_callback: ProgressCb | None = None,
    is_cancelled: CancelCheck | None = None,
    rng: np.random.Generator | None = None,
) -> ReconstructionTask:
    """Return the not-yet-started task for ``style``."""
    style = ReconstructionStyle.parse(style)
    if parameters is None:
        parameters = default_parameters(style)
    expected = _PARAMETER_TYPES[style]
    if not isinstance(parameters, expected):
        raise TypeError(f"{style.value} expects {expected.__name__}, got {type(parameters).__name__}")

    if style is ReconstructionStyle.MOSAIC:
        return reconstruct_mosaic(buffer, surface, parameters.block_size, progress_callback, is_cancelled)
    if style is ReconstructionStyle.CIRCLES:
        return reconstruct_circles(
            buffer,
            surface,
            parameters.num_circles,
            parameters.min_radius,
            parameters.max_radius,
            progress_callback,
            is_cancelled,
            rng=rng,
        )
    return reconstruct_palette(buffer, surface, palette, progress_callback, is_cancelled)
