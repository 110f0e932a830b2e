"""Drawing surfaces that receive reconstruction output."""

from __future__ import annotations

import math
from typing import Protocol, Tuple

import numpy as np
from PIL import Image

from .models import PixelBuffer

Color = Tuple[int, int, int]


class DrawingSurface(Protocol):
    """Sink for the drawing commands emitted by reconstructors."""

    def fill_rect(self, x: int, y: int, w: int, h: int, color: Color) -> None: ...

    def fill_circle(self, x: int, y: int, r: float, color: Color) -> None: ...

    def clear(self, color: Color) -> None: ...

    def blit(self, buffer: PixelBuffer, x: int, y: int) -> None: ...


class ArraySurface:
    """In-memory RGBA canvas backed by a numpy array."""

    def __init__(self, width: int, height: int, background: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> None:
        if width < 0 or height < 0:
            raise ValueError("Surface dimensions must be non-negative")
        self.width = int(width)
        self.height = int(height)
        self.canvas = np.empty((self.height, self.width, 4), dtype=np.uint8)
        self.canvas[:] = background

    def fill_rect(self, x: int, y: int, w: int, h: int, color: Color) -> None:
        x0, y0 = max(0, int(x)), max(0, int(y))
        x1, y1 = min(self.width, int(x) + int(w)), min(self.height, int(y) + int(h))
        if x1 <= x0 or y1 <= y0:
            return
        self.canvas[y0:y1, x0:x1] = (*_rgb(color), 255)

    def fill_circle(self, x: int, y: int, r: float, color: Color) -> None:
        r = max(0.0, float(r))
        x0, y0 = max(0, math.floor(x - r)), max(0, math.floor(y - r))
        x1 = min(self.width, math.floor(x + r) + 1)
        y1 = min(self.height, math.floor(y + r) + 1)
        if x1 <= x0 or y1 <= y0:
            return
        yy, xx = np.ogrid[y0:y1, x0:x1]
        mask = (xx - x) ** 2 + (yy - y) ** 2 <= r * r
        self.canvas[y0:y1, x0:x1][mask] = (*_rgb(color), 255)

    def clear(self, color: Color) -> None:
        self.canvas[:] = (*_rgb(color), 255)

    def blit(self, buffer: PixelBuffer, x: int, y: int) -> None:
        src = buffer.as_array()
        x0, y0 = max(0, int(x)), max(0, int(y))
        x1 = min(self.width, int(x) + buffer.width)
        y1 = min(self.height, int(y) + buffer.height)
        if x1 <= x0 or y1 <= y0:
            return
        self.canvas[y0:y1, x0:x1] = src[y0 - int(y):y1 - int(y), x0 - int(x):x1 - int(x)]

    def snapshot(self) -> PixelBuffer:
        return PixelBuffer.from_array(self.canvas)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.canvas.copy())


def _rgb(color: Color) -> Color:
    r, g, b = color[:3]
    return int(r), int(g), int(b)
