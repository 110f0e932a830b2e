"""Controller that owns the active reconstruction run."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from reconstruct import (
    AnalysisResult,
    DrawingSurface,
    HostLoop,
    PixelBuffer,
    ReconstructionParameters,
    ReconstructionStyle,
    SurfaceUnavailableError,
    Task,
    build_task,
)
from reconstruct.palette_map import PaletteEntry
from .models import RunHandle
from .settings import ReconstructionDefaults

logger = logging.getLogger(__name__)

SurfaceFactory = Callable[[int, int], Optional[DrawingSurface]]


class _GuardedSurface:
    """Forwards drawing only while the owning run is still current."""

    def __init__(self, surface: DrawingSurface, is_current: Callable[[], bool]) -> None:
        self._surface = surface
        self._is_current = is_current

    def fill_rect(self, x, y, w, h, color) -> None:
        if self._is_current():
            self._surface.fill_rect(x, y, w, h, color)

    def fill_circle(self, x, y, r, color) -> None:
        if self._is_current():
            self._surface.fill_circle(x, y, r, color)

    def clear(self, color) -> None:
        if self._is_current():
            self._surface.clear(color)

    def blit(self, buffer, x, y) -> None:
        if self._is_current():
            self._surface.blit(buffer, x, y)


class ReconstructionController:
    """Starts, supersedes and cancels reconstruction runs on a host loop.

    Every run gets a fresh generation number. Draw and progress callbacks are
    dropped unless their generation still matches the controller's, so a run
    that resumes after being superseded can never touch the surface.
    """

    def __init__(
        self,
        host: HostLoop,
        acquire_surface: SurfaceFactory,
        defaults: ReconstructionDefaults | None = None,
        on_progress: Callable[[float], None] | None = None,
        on_state_change: Callable[[bool], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._host = host
        self._acquire_surface = acquire_surface
        self._defaults = defaults or ReconstructionDefaults()
        self.on_progress = on_progress
        self.on_state_change = on_state_change
        self.on_error = on_error

        self._generation = 0
        self._current: Optional[RunHandle] = None
        self._task: Optional[Task] = None
        self._surface: Optional[DrawingSurface] = None
        self._progress = 0.0
        self._animating = False

        self._buffer: Optional[PixelBuffer] = None
        self._analysis: Optional[AnalysisResult] = None
        self._style = ReconstructionStyle.parse(self._defaults.style)
        self._parameters: Dict[ReconstructionStyle, ReconstructionParameters] = {
            style: self._defaults.parameters_for(style) for style in ReconstructionStyle
        }

    # ---- State ----
    @property
    def progress(self) -> float:
        return self._progress

    @property
    def is_animating(self) -> bool:
        return self._animating

    @property
    def current_handle(self) -> Optional[RunHandle]:
        return self._current

    @property
    def surface(self) -> Optional[DrawingSurface]:
        """Surface of the most recent run."""
        return self._surface

    @property
    def style(self) -> ReconstructionStyle:
        return self._style

    def parameters(self, style: ReconstructionStyle | str | None = None) -> ReconstructionParameters:
        return self._parameters[ReconstructionStyle.parse(style or self._style)]

    # ---- Runs ----
    def start_reconstruction(
        self,
        buffer: PixelBuffer,
        style: ReconstructionStyle | str,
        parameters: ReconstructionParameters | None = None,
        palette: Sequence[PaletteEntry] = (),
    ) -> RunHandle:
        """Cancel any in-flight run, then start ``style`` against ``buffer``.

        Returns the run that is current once observers have been notified,
        which is a newer one if an observer restarted in between.
        """
        style = ReconstructionStyle.parse(style)
        if parameters is None:
            parameters = self._parameters[style]

        self.cancel()
        self._generation += 1
        generation = self._generation

        surface = self._acquire(buffer)
        handle = RunHandle(generation=generation, style=style, parameters=parameters)

        def is_current() -> bool:
            return self._generation == generation and handle.active

        task = build_task(
            style,
            buffer,
            _GuardedSurface(surface, is_current),
            parameters,
            palette=palette,
            progress_callback=lambda value: self._run_progress(handle, value),
            is_cancelled=lambda: not is_current(),
            rng=self._make_rng(),
        )
        self._current = handle
        self._surface = surface
        self._task = self._host.spawn(
            task,
            name=f"{style.value}#{generation}",
            on_done=lambda completed: self._run_done(handle, bool(completed)),
            on_error=lambda exc: self._run_failed(handle, exc),
        )
        logger.info("Starting %s run #%d (%s)", style.value, generation, parameters)

        # observers may restart from inside these notifications
        self._set_progress(0.0)
        if self._generation == generation:
            self._set_animating(True)
        return self._current

    def cancel(self, handle: RunHandle | None = None) -> bool:
        """Cancel ``handle`` (or the current run). Returns False if there was nothing to cancel."""
        target = handle if handle is not None else self._current
        if target is None or not target.active:
            return False
        target.cancelled = True
        logger.debug("Cancelled %s run #%d at %.2f", target.style.value, target.generation, target.progress)
        if target is self._current:
            if self._task is not None:
                self._task.close()
                self._task = None
            self._set_animating(False)
        return True

    # ---- Interactions ----
    def load(self, buffer: PixelBuffer, analysis: AnalysisResult | None = None) -> None:
        """Replace the source image. The caller starts a run when ready."""
        self.cancel()
        self._buffer = buffer
        self._analysis = analysis

    def reset(self) -> None:
        self.cancel()
        self._buffer = None
        self._analysis = None
        self._set_progress(0.0)

    def set_style(self, style: ReconstructionStyle | str) -> Optional[RunHandle]:
        self._style = ReconstructionStyle.parse(style)
        return self.replay()

    def update_parameters(self, parameters: ReconstructionParameters) -> Optional[RunHandle]:
        """Store parameters for their style; restarts when that style is selected."""
        for style, current in self._parameters.items():
            if type(current) is type(parameters):
                self._parameters[style] = parameters
                if style is self._style:
                    return self.replay()
                return None
        raise TypeError(f"Unsupported parameters: {type(parameters).__name__}")

    def replay(self) -> Optional[RunHandle]:
        """Restart the selected style on the loaded image."""
        if self._buffer is None:
            return None
        palette = self._analysis.palette if self._analysis is not None else ()
        return self.start_reconstruction(self._buffer, self._style, palette=palette)

    # ---- Callbacks from runs ----
    def _run_progress(self, handle: RunHandle, value: float) -> None:
        if handle is not self._current or not handle.active:
            return
        value = min(1.0, max(handle.progress, float(value)))
        handle.progress = value
        self._set_progress(value)

    def _run_done(self, handle: RunHandle, completed: bool) -> None:
        if handle is not self._current or not handle.active or not completed:
            return
        handle.finished = True
        handle.progress = 1.0
        self._task = None
        self._set_progress(1.0)
        self._set_animating(False)
        logger.info("Finished %s run #%d", handle.style.value, handle.generation)

    def _run_failed(self, handle: RunHandle, exc: Exception) -> None:
        if handle is not self._current or not handle.active:
            return
        handle.failed = True
        self._task = None
        self._set_animating(False)
        logger.error("%s run #%d failed: %s", handle.style.value, handle.generation, exc)
        if self.on_error is not None:
            self.on_error(exc)

    # ---- Helpers ----
    def _acquire(self, buffer: PixelBuffer) -> DrawingSurface:
        try:
            surface = self._acquire_surface(buffer.width, buffer.height)
        except SurfaceUnavailableError:
            raise
        except Exception as exc:
            raise SurfaceUnavailableError(f"Could not acquire a drawing surface: {exc}") from exc
        if surface is None:
            raise SurfaceUnavailableError("No drawing surface available")
        return surface

    def _make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self._defaults.seed)

    def _set_progress(self, value: float) -> None:
        changed = value != self._progress
        self._progress = value
        if changed and self.on_progress is not None:
            self.on_progress(value)

    def _set_animating(self, animating: bool) -> None:
        if animating == self._animating:
            return
        self._animating = animating
        if self.on_state_change is not None:
            self.on_state_change(animating)
