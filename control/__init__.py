"""Run control for progressive reconstructions."""

from __future__ import annotations

from .controller import ReconstructionController, SurfaceFactory
from .models import RunHandle
from .settings import ReconstructionDefaults, load_defaults, save_defaults

__all__ = [
    "ReconstructionController",
    "SurfaceFactory",
    "RunHandle",
    "ReconstructionDefaults",
    "load_defaults",
    "save_defaults",
]
