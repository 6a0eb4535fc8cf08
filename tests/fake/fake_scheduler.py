from collections import deque
from typing import Callable


class ManualScheduler:
    """
    A turn-based stand-in for the event loop, intended for tests.

    Callbacks passed to `call_soon()` are queued and only run when the test
    calls `run_turn()`. A turn runs exactly the callbacks that were pending
    when it started; anything scheduled while it runs waits for the next
    turn, like `loop.call_soon()` does.
    """

    def __init__(self) -> None:
        self._pending: deque[Callable[[], None]] = deque()
        self.turns = 0
        self.executed = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._pending.append(callback)

    def run_turn(self) -> int:
        batch = len(self._pending)
        for _ in range(batch):
            callback = self._pending.popleft()
            self.executed += 1
            callback()

        self.turns += 1
        return batch

    def run_until_idle(self, max_turns: int = 1000) -> int:
        """
        Run turns until nothing is pending and return how many were needed.

        Fails if work is still pending after `max_turns`, which is what a
        self-rescheduling busy loop looks like.
        """
        turns = 0
        while self._pending:
            if turns >= max_turns:
                raise AssertionError(f"Still busy after {max_turns} turns")
            self.run_turn()
            turns += 1
        return turns
