import asyncio
import logging
from typing import Any

from bufstream.core.buffer.pipe import pipe
from bufstream.core.buffer.queue import ChunkQueue
from bufstream.core.errors import IllegalStateError
from bufstream.core.helpers.codec import ChunkDecoder, to_chunk
from bufstream.core.helpers.events import EventEmitter
from bufstream.core.models.config import StreamConfig
from bufstream.core.ports.channel import Readable, Writable
from bufstream.core.ports.scheduler import Scheduler

Payload = str | bytes | bytearray | memoryview


class BufferedStream(EventEmitter):
    """
    A readable/writable byte channel that buffers writes and emits them on a
    later turn of the event loop.

    Producers call `write()` at their own pace. Each write is queued and a
    drain chain is started on the scheduler; every step of the chain emits
    the queued chunks as `data` signals, in write order, until the queue is
    empty or the consumer has paused. A step that leaves data behind while
    unpaused schedules another step instead of looping, so a large backlog is
    spread across turns. A paused stream schedules nothing at all: `resume()`
    restarts the chain.

    `max_size` is a soft limit used only for backpressure signalling. When a
    write leaves more than `max_size` bytes queued, `write()` returns False;
    once a drain pass brings the size back under the limit, a single `drain`
    signal is emitted. Writes are never rejected because of size.

    `end()` marks the stream as ended and starts a finalization watcher that
    waits, with the same cooperative rescheduling, for the queue to empty.
    It then destroys the stream and emits `end` exactly once.

    The constructor arguments are positionally overloaded: when the first
    argument is not an integer, it is taken as `source` and the second one as
    `source_encoding`. A Readable source is piped into the new stream; a
    literal str/bytes source becomes the whole content of the stream, as if
    passed to `end()`.

    Deferred steps go through `scheduler`. When it is omitted, the running
    asyncio loop is used, so the stream must then be created from within a
    coroutine or loop callback.

    Signals: `data(chunk)`, `drain`, `pause`, `resume`, `end`.
    """

    def __init__(
        self,
        max_size: Any = None,
        source: Any = None,
        source_encoding: str | None = None,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__()

        if max_size is not None and (not isinstance(max_size, int) or isinstance(max_size, bool)):
            source_encoding = source
            source = max_size
            max_size = None

        self._max_size = -1 if max_size is None else max_size
        self._scheduler = scheduler if scheduler is not None else asyncio.get_running_loop()
        self._queue = ChunkQueue()
        self._decoder: ChunkDecoder | None = None

        self._readable = True
        self._writable = True
        self._ended = False
        self._paused = False
        self._was_full = False

        self._draining = False
        self._flush_scheduled = False
        self._finish_scheduled = False
        self._end_emitted = False

        self._logger = logging.getLogger("core.buffer.stream")

        if source is None:
            return

        if isinstance(source, (str, bytes, bytearray, memoryview)):
            self.end(source, source_encoding)
        elif isinstance(source, Readable):
            source_pipe = getattr(source, "pipe", None)
            if callable(source_pipe):
                source_pipe(self)
            else:
                pipe(source, self)
        else:
            raise TypeError(
                f"Source must be a Readable or a str/bytes payload, got {type(source).__name__}"
            )

    @classmethod
    def from_config(
        cls,
        config: StreamConfig,
        source: Any = None,
        scheduler: Scheduler | None = None,
    ) -> "BufferedStream":
        stream = cls(config.max_size, source, config.source_encoding, scheduler=scheduler)
        if config.encoding:
            stream.set_encoding(config.encoding)
        return stream

    @property
    def size(self) -> int:
        """Number of bytes written but not emitted yet."""
        return self._queue.size

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def empty(self) -> bool:
        """True when there is no chunk left to emit."""
        return self._queue.is_empty()

    @property
    def full(self) -> bool:
        """True when more than `max_size` bytes are queued."""
        return self._max_size >= 0 and self._queue.size > self._max_size

    @property
    def readable(self) -> bool:
        return self._readable

    @property
    def writable(self) -> bool:
        return self._writable

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def encoding(self) -> str | None:
        return self._decoder.encoding if self._decoder is not None else None

    def set_encoding(self, encoding: str | None) -> None:
        """
        Emit `data` as text decoded with `encoding` from now on.
        Passing None switches back to raw bytes.
        """
        if encoding is None:
            self._decoder = None
        else:
            self._decoder = ChunkDecoder(encoding)

    def write(self, data: Payload, encoding: str | None = None) -> bool:
        """
        Queue `data` for emission on a later turn.

        Return False when the stream is full after queuing, meaning the
        producer should pause until `drain` is emitted, True otherwise.
        """
        if not self._writable or self._ended:
            raise IllegalStateError("Stream is not writable")

        chunk = to_chunk(data, encoding)
        self._queue.enqueue(chunk)

        if not self._draining:
            self._schedule_flush()

        if self.full:
            self._was_full = True
            return False

        return True

    def end(self, data: Payload | None = None, encoding: str | None = None) -> None:
        """
        Queue an optional last chunk and emit `end` once everything queued
        has been emitted.
        """
        if self._ended:
            raise IllegalStateError("Stream is already ended")

        if data is not None:
            self.write(data, encoding)

        self._ended = True
        self._logger.debug(f"End requested with {self._queue.size} bytes pending")
        self._schedule_finish()

    def pause(self) -> None:
        """
        Stop emitting `data` until `resume()` is called.
        Writes are still accepted and queued.
        """
        self._paused = True
        if self._readable:
            self.emit("pause")

    def resume(self) -> None:
        self._paused = False
        if self._readable:
            self.emit("resume")

        if not self._queue.is_empty():
            self._schedule_flush()
        if self._ended and not self._end_emitted:
            self._schedule_finish()

    def flush(self) -> None:
        """
        Emit every queued chunk right now, in order, unless paused.

        This bypasses the cooperative scheduling: the whole backlog is emitted
        within the current call. On a very large queue that is a long,
        uninterrupted burst of work, which the drain chain otherwise avoids.
        """
        queue = self._queue
        decoder = self._decoder

        while not self._paused and self._readable and not queue.is_empty():
            chunk = queue.dequeue()
            if decoder is not None:
                self.emit("data", decoder.decode(chunk))
            else:
                self.emit("data", chunk)

            # a listener may have switched text mode
            decoder = self._decoder

        if self._was_full and not self.full:
            self._was_full = False
            self.emit("drain")

    def destroy(self) -> None:
        """
        Tear the stream down immediately: queued data is discarded and the
        stream is neither readable nor writable anymore.

        This is called automatically once an ended stream is drained and is
        rarely needed directly.
        """
        self._queue.clear()
        self._readable = False
        self._writable = False
        self._was_full = False
        self._logger.debug("Stream destroyed")

    def pipe(self, dest: Writable, end: bool = True) -> Writable:
        """Forward everything emitted by this stream into `dest`."""
        return pipe(self, dest, end=end)

    def _schedule_flush(self) -> None:
        self._draining = True
        if not self._flush_scheduled:
            self._flush_scheduled = True
            self._scheduler.call_soon(self._flush_step)

    def _flush_step(self) -> None:
        self._flush_scheduled = False
        try:
            self.flush()
        except BaseException:
            # the chain is dead; the next write(), resume() or finish step restarts it
            self._draining = False
            raise

        if self._queue.is_empty():
            self._draining = False
        elif self._paused:
            # dormant until resume(); rescheduling here would spin forever
            return
        else:
            self._schedule_flush()

    def _schedule_finish(self) -> None:
        if not self._finish_scheduled:
            self._finish_scheduled = True
            self._scheduler.call_soon(self._finish_step)

    def _finish_step(self) -> None:
        self._finish_scheduled = False
        if self._end_emitted:
            return

        if self._queue.is_empty():
            self._finish()
        elif self._paused:
            return
        else:
            # waiting is only safe while a drain chain is alive to empty the queue
            self._schedule_flush()
            self._schedule_finish()

    def _finish(self) -> None:
        tail = self._decoder.finish() if self._decoder is not None and self._readable else ""
        if tail:
            self.emit("data", tail)

        self.destroy()
        self._end_emitted = True
        self._logger.debug("Stream drained, emitting end")
        self.emit("end")

    def __repr__(self) -> str:
        state = "ended" if self._ended else "open"
        if not self._readable:
            state = "destroyed"
        limit = self._max_size if self._max_size >= 0 else "inf"
        return f"<BufferedStream {state} {self._queue.size}/{limit} bytes>"
