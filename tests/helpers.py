from typing import Any

from bufstream.core.helpers.events import EventEmitter

SIGNALS = ("data", "drain", "pause", "resume", "end")


class Recorder:
    """
    Subscribes to every signal of a stream and records them in order.
    """

    def __init__(self, emitter: EventEmitter) -> None:
        self.events: list[tuple[str, Any]] = []
        for name in SIGNALS:
            emitter.on(name, self._listener(name))

    def _listener(self, name: str):
        def record(*args: Any) -> None:
            self.events.append((name, args[0] if args else None))
        return record

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    @property
    def data(self) -> list[Any]:
        return [arg for name, arg in self.events if name == "data"]

    def count(self, name: str) -> int:
        return self.names.count(name)

    def clear(self) -> None:
        self.events.clear()
