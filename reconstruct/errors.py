"""Exceptions raised by the analysis and reconstruction engine."""

from __future__ import annotations


class ReconstructError(Exception):
    """Base class for engine errors."""


class DecodeError(ReconstructError):
    """The source bytes could not be decoded into a pixel buffer."""


class AnalysisError(ReconstructError):
    """The pixel buffer is not usable for analysis."""


class EmptyImageError(AnalysisError):
    """The pixel buffer holds zero pixels."""


class SurfaceUnavailableError(ReconstructError):
    """A drawing surface could not be acquired for a run."""


class PerPixelReadFailure(ReconstructError):
    """A single cell, circle or row could not be read or drawn."""


class ReconstructionCancelled(Exception):
    """Internal signal that a run observed its cancellation."""
