"""Value types shared by the analyzer and the reconstructors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from color_spaces import RGB, hex_to_rgb
from .errors import AnalysisError


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Decoded image: row-major RGBA bytes, read-only once built.

    Fields:
        width: Width in pixels.
        height: Height in pixels.
        samples: Flat ``uint8`` array of length ``width * height * 4``.
    """

    width: int
    height: int
    samples: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise AnalysisError(f"Invalid dimensions: {self.width}x{self.height}")
        if isinstance(self.samples, (bytes, bytearray, memoryview)):
            samples = np.frombuffer(self.samples, dtype=np.uint8).copy()
        else:
            samples = np.array(self.samples, dtype=np.uint8).reshape(-1)
        expected = self.width * self.height * 4
        if samples.size != expected:
            raise AnalysisError(f"Expected {expected} samples for {self.width}x{self.height}, got {samples.size}")
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelBuffer":
        """Build from an ``(h, w, 3)`` RGB or ``(h, w, 4)`` RGBA array."""
        arr = np.asarray(image, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise AnalysisError(f"Expected an (h, w, 3|4) array, got shape {arr.shape}")
        h, w = arr.shape[:2]
        if arr.shape[2] == 3:
            alpha = np.full((h, w, 1), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        return cls(width=w, height=h, samples=arr.reshape(-1))

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def as_array(self) -> np.ndarray:
        """Read-only ``(h, w, 4)`` view of the samples."""
        return self.samples.reshape(self.height, self.width, 4)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        i = (y * self.width + x) * 4
        r, g, b, a = self.samples[i:i + 4]
        return int(r), int(g), int(b), int(a)


@dataclass(frozen=True)
class ImageProperties:
    width: int
    height: int
    pixel_count: int


@dataclass(frozen=True)
class HistogramDataPoint:
    intensity: int
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class ColorPaletteItem:
    """Dominant color bucket and the number of sampled pixels that fell in it."""

    hex: str
    count: int

    @property
    def rgb(self) -> RGB:
        rgb = hex_to_rgb(self.hex)
        if rgb is None:
            raise ValueError(f"Malformed hex color: {self.hex!r}")
        return rgb


@dataclass(frozen=True)
class AnalysisResult:
    properties: ImageProperties
    histogram: Tuple[HistogramDataPoint, ...]
    palette: Tuple[ColorPaletteItem, ...]


@dataclass(frozen=True)
class MosaicParameters:
    block_size: int = 20

    def __post_init__(self) -> None:
        if int(self.block_size) < 1:
            raise ValueError("block_size must be at least 1")


@dataclass(frozen=True)
class CircleParameters:
    num_circles: int = 15000
    min_radius: float = 1.0
    max_radius: float = 5.0

    def __post_init__(self) -> None:
        if int(self.num_circles) < 1:
            raise ValueError("num_circles must be at least 1")
        if float(self.min_radius) > float(self.max_radius):
            raise ValueError("min_radius must not exceed max_radius")
        if float(self.min_radius) < 0:
            raise ValueError("radii must be non-negative")


@dataclass(frozen=True)
class PaletteParameters:
    """Palette requantization takes its colors from the analysis result."""


ReconstructionParameters = MosaicParameters | CircleParameters | PaletteParameters
