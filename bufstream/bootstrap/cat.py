import asyncio
import dataclasses
import logging
import sys
from typing import Any, BinaryIO, Callable

from bufstream.bootstrap.config.loader import build_parser
from bufstream.bootstrap.deps import get_stream_config
from bufstream.core.buffer.stream import BufferedStream
from bufstream.core.helpers.codec import check_encoding
from bufstream.core.helpers.spawn import TaskSpawner
from bufstream.core.helpers.utils import setup_logging, stop_on_signals
from bufstream.core.models.config import StreamConfig
from bufstream.infra.reader_source import StreamReaderSource

logger = logging.getLogger("bootstrap.cat")


def parse_args(argv: list[str] | None = None):
    parser = build_parser(
        prog="bufcat",
        description=(
            "Copy standard input to standard output through a BufferedStream.\n\n"
            "Input is read as fast as the buffer accepts it; reading pauses\n"
            "whenever more than --max-size bytes are waiting to be written."
        )
    )

    parser.add_argument(
        "-m", "--max-size",
        type=int,
        default=None,
        help="Soft buffer capacity in bytes (overrides the config file)."
    )

    parser.add_argument(
        "-e", "--encoding",
        type=str,
        default=None,
        help=(
            "Decode output with this encoding before writing it.\n"
            "Example: --encoding hex"
        )
    )

    return parser.parse_args(argv)


async def feed_from_file(reader: asyncio.StreamReader, file: BinaryIO, read_size: int) -> None:
    """Feed a regular file into `reader` from a worker thread."""
    try:
        while data := await asyncio.to_thread(file.read, read_size):
            reader.feed_data(data)
    finally:
        reader.feed_eof()


async def open_input(
    file: Any,
    spawner: TaskSpawner,
    read_size: int,
) -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)

    try:
        await loop.connect_read_pipe(lambda: protocol, file)
    except ValueError:
        # regular files have no pipe transport
        spawner.spawn(feed_from_file(reader, file.buffer, read_size), name="file-feeder")

    return reader


async def copy(
    reader: asyncio.StreamReader,
    output: Callable[[Any], Any],
    config: StreamConfig,
    spawner: TaskSpawner,
    stop_event: asyncio.Event | None = None,
) -> int:
    """
    Pipe `reader` through a BufferedStream into `output`.

    Return how much went through the buffer (bytes, or characters when the
    config sets an output encoding) once the input is exhausted, or earlier
    if `stop_event` is set.
    """
    loop = asyncio.get_running_loop()
    done: asyncio.Future[None] = loop.create_future()
    copied = 0

    def on_data(chunk: Any) -> None:
        nonlocal copied
        copied += len(chunk)
        output(chunk)

    def on_end() -> None:
        if not done.done():
            done.set_result(None)

    source = StreamReaderSource(reader, spawner, read_size=config.read_size)
    stream = BufferedStream.from_config(config, scheduler=loop)
    stream.on("data", on_data)
    stream.on("end", on_end)
    source.pipe(stream)

    waiters: list[asyncio.Future[Any]] = [done]
    stopper: asyncio.Future[Any] | None = None
    if stop_event is not None:
        stopper = asyncio.ensure_future(stop_event.wait())
        waiters.append(stopper)

    await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    if stopper is not None:
        stopper.cancel()

    if not done.done():
        logger.info(f"Interrupted with {stream.size} bytes still buffered")
        stream.destroy()
        await spawner.cancel_all()

    return copied


async def run(config: StreamConfig) -> int:
    loop = asyncio.get_running_loop()
    spawner = TaskSpawner(loop)

    text = config.encoding is not None
    out = sys.stdout if text else sys.stdout.buffer

    def output(chunk: Any) -> None:
        out.write(chunk)

    reader = await open_input(sys.stdin, spawner, config.read_size)
    try:
        with stop_on_signals(loop) as stop_event:
            return await copy(reader, output, config, spawner, stop_event)
    finally:
        out.flush()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    config = get_stream_config(args.config)
    if args.max_size is not None:
        config = dataclasses.replace(config, max_size=args.max_size)
    if args.encoding is not None:
        try:
            check_encoding(args.encoding)
        except LookupError:
            raise SystemExit(f"Unknown encoding: {args.encoding}")
        config = dataclasses.replace(config, encoding=args.encoding)

    copied = asyncio.run(run(config))

    logger.debug(f"Copied {copied} bytes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
