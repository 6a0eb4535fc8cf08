from typing import Any, Callable

from bufstream.core.ports.scheduler import Scheduler


class TurnCounter:
    """
    Scheduler decorator that counts the deferred steps it runs.

    It forwards every `call_soon()` to the wrapped scheduler and increments
    `executed` when the callback actually runs. Sampling `executed` twice with
    time in between tells whether anything keeps rescheduling itself, which is
    how idle streams are checked for busy loops.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self.scheduled = 0
        self.executed = 0

    @property
    def pending(self) -> int:
        """Number of callbacks scheduled but not run yet."""
        return self.scheduled - self.executed

    def call_soon(self, callback: Callable[[], None]) -> Any:
        def step() -> None:
            self.executed += 1
            callback()

        self.scheduled += 1
        return self._scheduler.call_soon(step)
