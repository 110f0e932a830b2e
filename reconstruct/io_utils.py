"""I/O utilities: decode encoded images into pixel buffers."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .errors import DecodeError
from .models import PixelBuffer

logger = logging.getLogger(__name__)


def _require_cv2():
    try:
        import cv2  # type: ignore
    except Exception as exc:
        raise RuntimeError("OpenCV (cv2) is required. pip install opencv-python") from exc
    return cv2


def _to_rgba(cv2, image: np.ndarray) -> np.ndarray:
    """Convert an OpenCV BGR/BGRA/gray image to RGBA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    raise DecodeError(f"Unsupported channel count: {channels}")


def decode(source: bytes) -> PixelBuffer:
    """Decode PNG/JPEG/etc. bytes into an RGBA pixel buffer."""
    if not source:
        raise DecodeError("Empty image data")
    cv2 = _require_cv2()
    data = np.frombuffer(source, dtype=np.uint8)
    try:
        image = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise DecodeError(f"Could not decode image: {exc}") from exc
    if image is None:
        raise DecodeError("Could not decode image: unsupported or corrupt data")
    if image.dtype != np.uint8:
        # 16-bit PNG/TIFF: keep the high byte
        image = (image >> 8).astype(np.uint8) if image.dtype == np.uint16 else image.astype(np.uint8)
    rgba = _to_rgba(cv2, image)
    logger.debug("Decoded %dx%d image", rgba.shape[1], rgba.shape[0])
    return PixelBuffer.from_array(rgba)


def load_image(path: str | Path) -> PixelBuffer:
    """Read and decode an image file. Unicode paths are supported."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    # np.fromfile sidesteps cv2.imread's trouble with non-ASCII paths
    data = np.fromfile(str(path), dtype=np.uint8)
    return decode(data.tobytes())
