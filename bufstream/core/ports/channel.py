from typing import Any, Callable, Protocol, runtime_checkable

Listener = Callable[..., Any]
"""
Callable registered for a named signal. Its arguments depend on the signal:
`data` listeners receive the chunk, other signals carry no argument.
"""


@runtime_checkable
class Readable(Protocol):
    """
    Upstream side of a byte channel.

    A Readable produces `data(chunk)` signals followed by a single `end`
    signal. Consumers subscribe with `on()` and apply backpressure with
    `pause()` / `resume()`. Any object offering these three methods can be
    piped into a Writable, no inheritance required.
    """

    def on(self, event: str, listener: Listener) -> Any:
        """Subscribe `listener` to the named signal."""

    def pause(self) -> None:
        """Stop emitting `data` signals until `resume()` is called."""

    def resume(self) -> None:
        """Resume emitting `data` signals."""


@runtime_checkable
class Writable(Protocol):
    """
    Downstream side of a byte channel.

    `write()` returns False when the receiver would like the producer to
    pause; the receiver then emits `drain` once it has room again. `end()`
    closes the channel, optionally with a last payload.
    """

    writable: bool

    def on(self, event: str, listener: Listener) -> Any:
        """Subscribe `listener` to the named signal."""

    def write(self, data: Any, encoding: str | None = None) -> bool:
        """Accept a chunk. Return False to ask the producer to pause."""

    def end(self, data: Any = None, encoding: str | None = None) -> None:
        """Close the channel after an optional last chunk."""
