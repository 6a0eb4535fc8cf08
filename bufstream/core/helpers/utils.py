import asyncio
import contextlib
import logging
import signal
import sys
from typing import Iterator

SHUTDOWN_SIGNALS = (
    signal.SIGINT,
    signal.SIGTERM,
)


@contextlib.contextmanager
def stop_on_signals(loop: asyncio.AbstractEventLoop) -> Iterator[asyncio.Event]:
    """
    Set the yielded event when SIGINT/SIGTERM arrives while the block runs.

    Handlers are installed on `loop` and removed on exit. Loops without signal
    support (Windows) keep the default handlers.
    """
    stop_event = asyncio.Event()
    installed = []

    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            continue
        installed.append(sig)

    try:
        yield stop_event
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )
