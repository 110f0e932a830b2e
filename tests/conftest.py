"""Shared fixtures: synthetic buffers and a surface that records draw calls."""

from __future__ import annotations

from typing import List, Tuple

import numpy as np
import pytest

from reconstruct import PixelBuffer


class RecordingSurface:
    """Drawing surface that keeps every command for inspection."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = width
        self.height = height
        self.calls: List[Tuple] = []

    def fill_rect(self, x, y, w, h, color) -> None:
        self.calls.append(("fill_rect", x, y, w, h, tuple(color)))

    def fill_circle(self, x, y, r, color) -> None:
        self.calls.append(("fill_circle", x, y, r, tuple(color)))

    def clear(self, color) -> None:
        self.calls.append(("clear", tuple(color)))

    def blit(self, buffer, x, y) -> None:
        self.calls.append(("blit", buffer, x, y))

    def of(self, kind: str) -> List[Tuple]:
        return [c for c in self.calls if c[0] == kind]


def solid_buffer(width: int, height: int, color=(10, 20, 30)) -> PixelBuffer:
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[:, :] = color
    return PixelBuffer.from_array(arr)


def random_buffer(width: int, height: int, seed: int = 0) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    return PixelBuffer.from_array(rng.integers(0, 256, (height, width, 3), dtype=np.uint8))


@pytest.fixture
def recording_surface():
    return RecordingSurface()


@pytest.fixture
def four_color_buffer() -> PixelBuffer:
    """2x2 image: red, green / blue, white."""
    arr = np.array(
        [
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ],
        dtype=np.uint8,
    )
    return PixelBuffer.from_array(arr)


@pytest.fixture
def make_solid():
    return solid_buffer


@pytest.fixture
def make_random():
    return random_buffer
