"""Image analysis and progressive reconstruction engine."""

from __future__ import annotations

from .analysis import analyze, analyze_bytes
from .errors import (
    AnalysisError,
    DecodeError,
    EmptyImageError,
    PerPixelReadFailure,
    ReconstructError,
    ReconstructionCancelled,
    SurfaceUnavailableError,
)
from .io_utils import decode, load_image
from .models import (
    AnalysisResult,
    CircleParameters,
    ColorPaletteItem,
    HistogramDataPoint,
    ImageProperties,
    MosaicParameters,
    PaletteParameters,
    PixelBuffer,
    ReconstructionParameters,
)
from .pipeline import ReconstructionStyle, build_task, default_parameters
from .progress import CancelCheck, ProgressCb, ReconstructionTask
from .scheduler import HostLoop, Task, run_to_completion
from .surface import ArraySurface, DrawingSurface

__all__ = [
    "analyze",
    "analyze_bytes",
    "decode",
    "load_image",
    "build_task",
    "default_parameters",
    "AnalysisError",
    "DecodeError",
    "EmptyImageError",
    "PerPixelReadFailure",
    "ReconstructError",
    "ReconstructionCancelled",
    "SurfaceUnavailableError",
    "AnalysisResult",
    "CircleParameters",
    "ColorPaletteItem",
    "HistogramDataPoint",
    "ImageProperties",
    "MosaicParameters",
    "PaletteParameters",
    "PixelBuffer",
    "ReconstructionParameters",
    "ReconstructionStyle",
    "CancelCheck",
    "ProgressCb",
    "ReconstructionTask",
    "HostLoop",
    "Task",
    "run_to_completion",
    "ArraySurface",
    "DrawingSurface",
]
