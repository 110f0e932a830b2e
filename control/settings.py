"""Reconstruction defaults loaded from a JSON settings file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from reconstruct import (
    CircleParameters,
    MosaicParameters,
    PaletteParameters,
    ReconstructionParameters,
    ReconstructionStyle,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconstructionDefaults:
    """Initial style and parameters for a fresh controller."""

    style: str = ReconstructionStyle.MOSAIC.value
    block_size: int = 20
    num_circles: int = 15000
    min_radius: float = 1.0
    max_radius: float = 5.0
    seed: Optional[int] = None

    def parameters_for(self, style: ReconstructionStyle | str) -> ReconstructionParameters:
        style = ReconstructionStyle.parse(style)
        if style is ReconstructionStyle.MOSAIC:
            return MosaicParameters(block_size=self.block_size)
        if style is ReconstructionStyle.CIRCLES:
            return CircleParameters(
                num_circles=self.num_circles,
                min_radius=self.min_radius,
                max_radius=self.max_radius,
            )
        return PaletteParameters()


def load_defaults(path: str | Path | None) -> ReconstructionDefaults:
    """Read defaults from JSON. Missing or malformed files fall back to built-ins."""
    if path is None:
        return ReconstructionDefaults()
    path = Path(path)
    if not path.exists():
        logger.debug("Settings file %s not found; using defaults", path)
        return ReconstructionDefaults()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read settings %s: %s", path, exc)
        return ReconstructionDefaults()
    if not isinstance(data, dict):
        logger.warning("Settings %s is not a JSON object; using defaults", path)
        return ReconstructionDefaults()

    known = {f.name for f in fields(ReconstructionDefaults)}
    values = {k: v for k, v in data.items() if k in known}
    try:
        defaults = ReconstructionDefaults(**values)
        ReconstructionStyle.parse(defaults.style)
        defaults.parameters_for(ReconstructionStyle.MOSAIC)
        defaults.parameters_for(ReconstructionStyle.CIRCLES)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid settings in %s: %s", path, exc)
        return ReconstructionDefaults()
    return defaults


def save_defaults(path: str | Path, defaults: ReconstructionDefaults) -> None:
    payload = {f.name: getattr(defaults, f.name) for f in fields(ReconstructionDefaults)}
    Path(path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
