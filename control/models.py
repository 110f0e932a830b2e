"""Run bookkeeping shared by the controller and its observers."""

from __future__ import annotations

from dataclasses import dataclass

from reconstruct import ReconstructionParameters, ReconstructionStyle


@dataclass(eq=False)
class RunHandle:
    """One reconstruction run. Identity is its generation number."""

    generation: int
    style: ReconstructionStyle
    parameters: ReconstructionParameters
    progress: float = 0.0
    cancelled: bool = False
    finished: bool = False
    failed: bool = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished or self.failed)
