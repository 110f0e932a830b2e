"""Tests for run ownership, supersession and cancellation."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import RecordingSurface
from control import ReconstructionController, ReconstructionDefaults
from reconstruct import (
    ArraySurface,
    CircleParameters,
    HostLoop,
    MosaicParameters,
    ReconstructionStyle,
    SurfaceUnavailableError,
    analyze,
)


class _Harness:
    def __init__(self, defaults=None, surface_cls=RecordingSurface):
        self.host = HostLoop()
        self.surfaces = []
        self.progress = []
        self.states = []
        self.errors = []
        self._surface_cls = surface_cls
        self.controller = ReconstructionController(
            self.host,
            acquire_surface=self.acquire,
            defaults=defaults,
            on_progress=self.progress.append,
            on_state_change=self.states.append,
            on_error=self.errors.append,
        )

    def acquire(self, width, height):
        surface = self._surface_cls(width, height)
        self.surfaces.append(surface)
        return surface


def test_mosaic_run_completes(make_solid):
    h = _Harness()
    buffer = make_solid(8, 8, color=(1, 2, 3))

    handle = h.controller.start_reconstruction(buffer, "mosaic", MosaicParameters(block_size=4))
    assert h.controller.is_animating
    h.host.run_until_idle()

    assert handle.finished and not handle.cancelled
    assert h.controller.progress == 1.0
    assert not h.controller.is_animating
    assert h.states == [True, False]
    assert h.progress == [0.5, 1.0]
    assert len(h.surfaces[0].of("fill_rect")) == 4


def test_new_run_cancels_previous(make_solid):
    h = _Harness()
    buffer = make_solid(10, 10)

    first = h.controller.start_reconstruction(buffer, "mosaic", MosaicParameters(block_size=1))
    h.host.tick()
    drawn_before = len(h.surfaces[0].calls)
    second = h.controller.start_reconstruction(buffer, "mosaic", MosaicParameters(block_size=5))
    h.host.run_until_idle()

    assert first.cancelled and not first.finished
    assert second.finished
    assert len(h.surfaces[0].calls) == drawn_before
    assert h.controller.current_handle is second
    assert first.generation < second.generation


def test_stale_run_is_silenced_even_if_host_keeps_stepping(make_solid):
    class StubbornTask:
        def __init__(self, generator):
            self.generator = generator

        def close(self):
            pass

    class StubbornHost:
        def __init__(self):
            self.tasks = []

        def spawn(self, generator, name="task", on_done=None, on_error=None):
            task = StubbornTask(generator)
            self.tasks.append(task)
            return task

    host = StubbornHost()
    surfaces, progress = [], []

    def acquire(w, h):
        surfaces.append(RecordingSurface(w, h))
        return surfaces[-1]

    controller = ReconstructionController(host, acquire_surface=acquire, on_progress=progress.append)
    buffer = make_solid(6, 6)
    controller.start_reconstruction(buffer, "mosaic", MosaicParameters(block_size=2))
    next(host.tasks[0].generator)
    controller.start_reconstruction(buffer, "mosaic", MosaicParameters(block_size=3))
    observed = list(progress)

    # the superseded generator resumes anyway: it must neither draw nor report
    assert list(host.tasks[0].generator) == []
    assert len(surfaces[0].of("fill_rect")) == 3
    assert progress == observed


def test_reentrant_restart_from_progress_observer(make_solid):
    h = _Harness()
    buffer = make_solid(6, 6)
    fired = []
    restarted = []

    def on_progress(value):
        if not fired:
            fired.append(value)
            restarted.append(h.controller.replay())

    h.controller.on_progress = on_progress
    h.controller.load(buffer, analyze(buffer))
    first = h.controller.update_parameters(MosaicParameters(block_size=2))
    h.host.run_until_idle()

    second = restarted[0]
    assert first.cancelled
    assert second.finished
    assert second is h.controller.current_handle
    assert len(h.surfaces[0].of("fill_rect")) == 3
    assert len(h.surfaces[1].of("fill_rect")) == 9


def test_restart_from_progress_reset_returns_current_run(make_solid):
    h = _Harness()
    h.controller.load(make_solid(6, 6))
    h.controller.update_parameters(MosaicParameters(block_size=3))
    h.host.run_until_idle()
    assert h.controller.progress == 1.0

    nested = []

    def on_progress(value):
        if value == 0.0 and not nested:
            nested.append(None)
            nested[0] = h.controller.replay()

    h.controller.on_progress = on_progress
    outer = h.controller.replay()

    assert outer is nested[0]
    assert outer is h.controller.current_handle
    assert outer.active and h.controller.is_animating
    assert h.host.pending == 1

    h.host.run_until_idle()

    assert outer.finished
    assert h.surfaces[1].calls == []
    assert len(h.surfaces[2].of("fill_rect")) == 4
    assert h.states == [True, False, True, False]

    assert h.controller.replay() is h.controller.current_handle
    assert h.controller.cancel() is True
    assert h.host.pending == 0


def test_cancel_is_silent(make_solid):
    h = _Harness()
    handle = h.controller.start_reconstruction(make_solid(10, 10), "mosaic", MosaicParameters(block_size=2))
    h.host.tick()

    assert h.controller.cancel() is True
    h.host.run_until_idle()

    assert handle.cancelled
    assert h.controller.progress < 1.0
    assert 1.0 not in h.progress
    assert not h.controller.is_animating
    assert h.errors == []
    assert h.controller.cancel() is False
    assert h.controller.cancel(handle) is False


def test_progress_is_monotonic_per_run(make_random):
    h = _Harness()
    h.controller.start_reconstruction(make_random(30, 30), "circles", CircleParameters(500, 1.0, 2.0))
    h.host.run_until_idle()

    assert h.progress == sorted(h.progress)
    assert h.progress[-1] == 1.0


def test_surface_unavailable(make_solid):
    host = HostLoop()
    progress = []
    controller = ReconstructionController(host, acquire_surface=lambda w, h: None, on_progress=progress.append)

    with pytest.raises(SurfaceUnavailableError):
        controller.start_reconstruction(make_solid(2, 2), "mosaic")

    def broken(w, h):
        raise RuntimeError("display gone")

    controller = ReconstructionController(host, acquire_surface=broken, on_progress=progress.append)
    with pytest.raises(SurfaceUnavailableError):
        controller.start_reconstruction(make_solid(2, 2), "circles")

    assert progress == []
    assert host.pending == 0
    assert not controller.is_animating


def test_parameter_changes_restart_selected_style(make_solid):
    h = _Harness()
    h.controller.load(make_solid(4, 4), None)

    assert h.controller.style is ReconstructionStyle.MOSAIC
    handle = h.controller.update_parameters(MosaicParameters(block_size=2))
    assert handle is not None and handle.parameters.block_size == 2

    assert h.controller.update_parameters(CircleParameters(10, 1.0, 1.0)) is None
    assert handle.active
    assert h.controller.parameters("circles").num_circles == 10


def test_palette_style_uses_analysis_palette(make_random):
    h = _Harness(surface_cls=ArraySurface)
    buffer = make_random(12, 12, seed=6)
    analysis = analyze(buffer)
    h.controller.load(buffer, analysis)

    handle = h.controller.set_style("palette")
    h.host.run_until_idle()

    assert handle.finished
    colors = {tuple(int(v) for v in px) for px in h.surfaces[-1].canvas[:, :, :3].reshape(-1, 3)}
    assert colors <= {item.rgb for item in analysis.palette}


def test_replay_without_image():
    h = _Harness()
    assert h.controller.replay() is None
    assert h.surfaces == []


def test_unexpected_failure_returns_to_idle(make_solid):
    class BrokenSurface(RecordingSurface):
        def fill_rect(self, *args):
            raise RuntimeError("boom")

    h = _Harness(surface_cls=BrokenSurface)
    handle = h.controller.start_reconstruction(make_solid(4, 4), "mosaic")
    h.host.run_until_idle()

    assert handle.failed
    assert not h.controller.is_animating
    assert len(h.errors) == 1 and str(h.errors[0]) == "boom"


def test_seeded_defaults_make_replays_identical(make_random):
    h = _Harness(defaults=ReconstructionDefaults(style="circles", num_circles=200, seed=3), surface_cls=ArraySurface)
    h.controller.load(make_random(16, 16, seed=1))

    h.controller.replay()
    h.host.run_until_idle()
    h.controller.replay()
    h.host.run_until_idle()

    assert np.array_equal(h.surfaces[0].canvas, h.surfaces[1].canvas)


def test_load_cancels_active_run(make_solid):
    h = _Harness()
    handle = h.controller.start_reconstruction(make_solid(8, 8), "mosaic", MosaicParameters(block_size=1))
    h.controller.load(make_solid(2, 2))

    assert handle.cancelled
    assert not h.controller.is_animating


def test_reset_drops_image(make_solid):
    h = _Harness()
    h.controller.load(make_solid(4, 4))
    handle = h.controller.replay()
    h.controller.reset()

    assert handle.cancelled
    assert h.controller.progress == 0.0
    assert h.controller.replay() is None
