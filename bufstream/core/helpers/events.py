from collections import defaultdict
from typing import Any

from bufstream.core.ports.channel import Listener


class EventEmitter:
    """
    Minimal synchronous signal dispatcher.

    Listeners are called in registration order, on the caller's stack, each
    time the signal is emitted. Exceptions raised by a listener propagate out
    of `emit()` to whoever triggered the signal.

    A snapshot of the listener list is taken before dispatching, so a listener
    that subscribes or unsubscribes during an emit does not change which
    listeners receive that emit.
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners[event].append(listener)
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        """Subscribe `listener` for the next emit of `event` only."""
        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        wrapper.listener = listener  # type: ignore[attr-defined]
        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        listeners = self._listeners.get(event)
        if not listeners:
            return self

        for i, registered in enumerate(listeners):
            if registered is listener or getattr(registered, "listener", None) is listener:
                del listeners[i]
                break

        return self

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener of `event` with `args`.

        Return True if at least one listener was registered.
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return False

        for listener in list(listeners):
            listener(*args)

        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
