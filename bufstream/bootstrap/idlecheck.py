import asyncio
import logging
import sys
from dataclasses import dataclass, field

from bufstream.bootstrap.config.loader import build_parser
from bufstream.core.buffer.stream import BufferedStream
from bufstream.core.helpers.scheduling import TurnCounter
from bufstream.core.helpers.utils import setup_logging
from bufstream.core.ports.scheduler import Scheduler

logger = logging.getLogger("bootstrap.idlecheck")

SIGNALS = ("data", "drain", "end")


@dataclass
class IdleReport:
    """
    Outcome of an idle check.

    `settled_steps` is the number of deferred steps run right after the
    streams were built; `final_steps` is the same counter at the end of the
    observation window. Idle streams must not run anything in between.
    """
    settled_steps: int
    final_steps: int
    signals: list[tuple[int, str]] = field(default_factory=list)
    """Signals observed after settling, as (stream index, signal name)."""

    @property
    def idle(self) -> bool:
        return self.final_steps == self.settled_steps and not self.signals


def build_idle_streams(scheduler: Scheduler) -> list[BufferedStream]:
    """
    Build the six paused streams that must stay idle:
    literal payload, empty literal payload, a write, an empty write,
    `end()` with a payload and `end()` with an empty payload.
    """
    streams = []

    s1 = BufferedStream("Hello world", scheduler=scheduler)
    s1.pause()
    streams.append(s1)

    s2 = BufferedStream("", scheduler=scheduler)
    s2.pause()
    streams.append(s2)

    s3 = BufferedStream(scheduler=scheduler)
    s3.pause()
    s3.write("Hello world")
    streams.append(s3)

    s4 = BufferedStream(scheduler=scheduler)
    s4.pause()
    s4.write("")
    streams.append(s4)

    s5 = BufferedStream(scheduler=scheduler)
    s5.pause()
    s5.end("Hello world")
    streams.append(s5)

    s6 = BufferedStream(scheduler=scheduler)
    s6.pause()
    s6.end("")
    streams.append(s6)

    return streams


async def check(duration: float, settle_turns: int = 3) -> IdleReport:
    """
    Build the idle streams on the running loop and watch them for
    `duration` seconds.
    """
    counter = TurnCounter(asyncio.get_running_loop())
    streams = build_idle_streams(counter)

    for _ in range(settle_turns):
        await asyncio.sleep(0)

    report = IdleReport(settled_steps=counter.executed, final_steps=counter.executed)

    for index, stream in enumerate(streams):
        for name in SIGNALS:
            stream.on(name, lambda *_, i=index, n=name: report.signals.append((i, n)))

    await asyncio.sleep(duration)
    report.final_steps = counter.executed
    return report


def main(argv: list[str] | None = None) -> int:
    parser = build_parser(
        prog="bufstream-idlecheck",
        description=(
            "Verify that paused BufferedStreams stay idle.\n\n"
            "Six paused streams in various states are created and observed.\n"
            "Any deferred step or signal after they settle means a stream\n"
            "keeps rescheduling itself and would peg the CPU."
        ),
        with_config=False
    )
    parser.add_argument(
        "-d", "--duration",
        type=float,
        default=1.0,
        help="Observation window in seconds (default: 1.0)."
    )
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    report = asyncio.run(check(args.duration))

    if report.idle:
        logger.info(f"Streams idle after {report.settled_steps} steps")
        print(f"ok: {report.settled_steps} steps, idle for {args.duration}s")
        return 0

    print(
        f"busy: {report.final_steps - report.settled_steps} steps and "
        f"{len(report.signals)} signals after settling",
        file=sys.stderr
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
