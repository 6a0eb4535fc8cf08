from typing import Any, Callable, Protocol


class Scheduler(Protocol):
    """
    Deferred execution capability used by BufferedStream.

    `call_soon(callback)` must run `callback` on a later turn of the event
    loop, never synchronously inside the call. Callbacks scheduled from the
    same turn run in scheduling order.

    asyncio.AbstractEventLoop satisfies this interface as is. Tests inject a
    manual scheduler to drive turns deterministically.
    """

    def call_soon(self, callback: Callable[[], None]) -> Any:
        """Schedule `callback` to run on the next turn."""
