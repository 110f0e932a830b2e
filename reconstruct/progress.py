"""Progress reporting and cooperative cancellation shared by every reconstructor."""

from __future__ import annotations

import functools
import logging
from typing import Callable, Generator

from .errors import ReconstructionCancelled

logger = logging.getLogger(__name__)

ProgressCb = Callable[[float], None]
CancelCheck = Callable[[], bool]
# Each yield is a suspension point; the return value tells whether the run completed.
ReconstructionTask = Generator[None, None, bool]


def _check_cancelled(is_cancelled: CancelCheck | None) -> None:
    if is_cancelled is not None and is_cancelled():
        raise ReconstructionCancelled()


def _report(progress_callback: ProgressCb | None, value: float, is_cancelled: CancelCheck | None = None) -> None:
    """Check cancellation, then publish progress."""
    _check_cancelled(is_cancelled)
    if progress_callback:
        progress_callback(value)


def cancellable(func: Callable[..., Generator[None, None, None]]) -> Callable[..., ReconstructionTask]:
    """Turn a drawing generator into a task that ends quietly when cancelled."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> ReconstructionTask:
        try:
            yield from func(*args, **kwargs)
        except ReconstructionCancelled:
            logger.debug("%s cancelled", func.__name__)
            return False
        return True

    return wrapper
