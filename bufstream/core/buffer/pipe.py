import logging
from typing import Any

from bufstream.core.ports.channel import Readable, Writable

logger = logging.getLogger("core.buffer.pipe")


def pipe(source: Readable, dest: Writable, end: bool = True) -> Writable:
    """
    Forward every `data` signal of `source` into `dest.write()`.

    Backpressure is propagated both ways: when `dest.write()` returns False
    the source is paused, and it is resumed when `dest` emits `drain`.
    Unless `end` is False, the first `end` signal of the source ends `dest`
    and the pipe detaches itself from both sides.

    Return `dest` so pipes can be chained.
    """
    def on_data(chunk: Any) -> None:
        if dest.writable and dest.write(chunk) is False:
            source.pause()

    def on_drain() -> None:
        if getattr(source, "readable", True):
            source.resume()

    def on_end() -> None:
        cleanup()
        if getattr(dest, "ended", False):
            logger.debug("Destination already ended, skipping end")
            return
        dest.end()

    def cleanup() -> None:
        off_source = getattr(source, "off", None)
        if off_source is not None:
            off_source("data", on_data)
            off_source("end", on_end)

        off_dest = getattr(dest, "off", None)
        if off_dest is not None:
            off_dest("drain", on_drain)

    source.on("data", on_data)
    dest.on("drain", on_drain)
    if end:
        source.on("end", on_end)

    return dest
