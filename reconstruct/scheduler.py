"""Single-threaded cooperative host loop for generator-based tasks."""

from __future__ import annotations

import inspect
import logging
from typing import Callable, Generator, List, Optional

logger = logging.getLogger(__name__)


class Task:
    """A generator advanced one suspension point at a time."""

    def __init__(
        self,
        generator: Generator,
        name: str = "task",
        on_done: Optional[Callable[[object], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._generator = generator
        self.name = name
        self._on_done = on_done
        self._on_error = on_error
        self.done = False
        self.result: object = None

    def step(self) -> bool:
        """Run until the next suspension point. Returns False once finished."""
        if self.done:
            return False
        try:
            next(self._generator)
        except StopIteration as stop:
            self.done = True
            self.result = stop.value
            if self._on_done is not None:
                self._on_done(stop.value)
            return False
        except Exception as exc:
            self.done = True
            if self._on_error is None:
                raise
            logger.exception("Task %s failed", self.name)
            self._on_error(exc)
            return False
        return not self.done

    def close(self) -> None:
        """Drop the task without running it further."""
        if self.done:
            return
        self.done = True
        # closed from inside its own step: the generator is abandoned at its next yield
        if inspect.getgeneratorstate(self._generator) != inspect.GEN_RUNNING:
            self._generator.close()


class HostLoop:
    """Round-robin scheduler: each tick advances every live task by one step."""

    def __init__(self) -> None:
        self._tasks: List[Task] = []

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.done)

    def spawn(
        self,
        generator: Generator,
        name: str = "task",
        on_done: Optional[Callable[[object], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Task:
        task = Task(generator, name=name, on_done=on_done, on_error=on_error)
        self._tasks.append(task)
        logger.debug("Spawned %s", name)
        return task

    def tick(self) -> int:
        """Advance each live task once; returns how many remain alive."""
        for task in list(self._tasks):
            task.step()
        self._tasks = [t for t in self._tasks if not t.done]
        return len(self._tasks)

    def run_until_idle(self, max_ticks: int | None = None) -> int:
        """Tick until no task remains (or ``max_ticks`` is hit). Returns ticks run."""
        ticks = 0
        while self._tasks and (max_ticks is None or ticks < max_ticks):
            self.tick()
            ticks += 1
        return ticks


def run_to_completion(generator: Generator) -> object:
    """Drive a task synchronously and return its result."""
    task = Task(generator)
    while task.step():
        pass
    return task.result
