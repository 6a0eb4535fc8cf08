import asyncio

import pytest

from bufstream.core.buffer.stream import BufferedStream
from bufstream.core.helpers.scheduling import TurnCounter
from tests.helpers import Recorder


async def wait_for_end(stream: BufferedStream) -> None:
    done = asyncio.get_running_loop().create_future()
    stream.on("end", lambda: done.set_result(None))
    await asyncio.wait_for(done, timeout=1)


@pytest.mark.asyncio
async def test_defaults_to_running_loop():
    stream = BufferedStream()
    rec = Recorder(stream)

    stream.write(b"hello")
    stream.end(b" world")
    await wait_for_end(stream)

    assert b"".join(rec.data) == b"hello world"
    assert stream.readable is False


@pytest.mark.ut
def test_requires_a_loop_without_scheduler():
    with pytest.raises(RuntimeError):
        BufferedStream()


@pytest.mark.asyncio
async def test_end_is_emitted_within_a_few_turns():
    counter = TurnCounter(asyncio.get_running_loop())
    stream = BufferedStream("payload", scheduler=counter)
    rec = Recorder(stream)

    for _ in range(3):
        await asyncio.sleep(0)

    assert rec.names == ["data", "end"]
    assert counter.executed == 2
    assert counter.pending == 0


@pytest.mark.asyncio
async def test_paused_stream_stays_idle_on_the_loop():
    counter = TurnCounter(asyncio.get_running_loop())
    stream = BufferedStream(scheduler=counter)
    stream.pause()
    stream.end(b"data")

    await asyncio.sleep(0)
    await asyncio.sleep(0)
    settled = counter.executed

    await asyncio.sleep(0.05)
    assert counter.executed == settled
    assert counter.pending == 0

    rec = Recorder(stream)
    stream.resume()
    await wait_for_end(stream)
    assert rec.data == [b"data"]


@pytest.mark.asyncio
async def test_producer_honouring_backpressure():
    stream = BufferedStream(8)
    received = []
    stream.on("data", received.append)
    drained = asyncio.Event()
    stream.on("drain", drained.set)

    payload = [bytes([i]) * 5 for i in range(20)]
    for chunk in payload:
        if not stream.write(chunk):
            await drained.wait()
            drained.clear()
            assert stream.full is False

    stream.end()
    await wait_for_end(stream)

    assert received == payload
