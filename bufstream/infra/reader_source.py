import asyncio
import logging

from bufstream.core.buffer.pipe import pipe
from bufstream.core.helpers.events import EventEmitter
from bufstream.core.helpers.spawn import TaskSpawner
from bufstream.core.ports.channel import Writable


class StreamReaderSource(EventEmitter):
    """
    Exposes an asyncio.StreamReader as a Readable channel.

    A pump task reads up to `read_size` bytes at a time and emits each read
    as a `data` signal, then emits `end` once the reader reaches EOF. The
    pump waits on an asyncio.Event before every read, so `pause()` stops
    reading from the underlying transport (letting its own flow control push
    back on the peer) and `resume()` continues where it left off.

    The pump starts on the first call to `start()` or `pipe()`. Listeners
    must be registered before that, because data read from the reader is
    not kept anywhere.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        spawner: TaskSpawner,
        read_size: int = 64 * 1024,
    ) -> None:
        super().__init__()
        if read_size < 1:
            raise ValueError(f"read_size must be >= 1, got {read_size}")

        self._reader = reader
        self._spawner = spawner
        self._read_size = read_size
        self._resumed = asyncio.Event()
        self._resumed.set()
        self._task: asyncio.Task[None] | None = None
        self.readable = True
        self._logger = logging.getLogger("infra.reader")

    @property
    def paused(self) -> bool:
        return not self._resumed.is_set()

    def pause(self) -> None:
        self._resumed.clear()

    def resume(self) -> None:
        self._resumed.set()

    def pipe(self, dest: Writable, end: bool = True) -> Writable:
        pipe(self, dest, end=end)
        self.start()
        return dest

    def start(self) -> asyncio.Task[None]:
        if self._task is None:
            self._task = self._spawner.spawn(self._pump(), name="reader-source")
        return self._task

    async def _pump(self) -> None:
        total = 0
        try:
            while True:
                await self._resumed.wait()
                data = await self._reader.read(self._read_size)
                if not data:
                    break

                total += len(data)
                self.emit("data", data)
        finally:
            self.readable = False

        self._logger.debug(f"Reader reached EOF after {total} bytes")
        self.emit("end")
