import asyncio

import pytest

from bufstream.core.buffer.stream import BufferedStream
from bufstream.core.helpers.spawn import TaskSpawner
from bufstream.infra.reader_source import StreamReaderSource
from tests.helpers import Recorder


def make_reader(*chunks: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    if eof:
        reader.feed_eof()
    return reader


@pytest.mark.asyncio
async def test_emits_reads_then_end():
    spawner = TaskSpawner(asyncio.get_running_loop())
    source = StreamReaderSource(make_reader(b"hello"), spawner, read_size=2)
    rec = Recorder(source)

    await source.start()

    assert rec.data == [b"he", b"ll", b"o"]
    assert rec.names[-1] == "end"
    assert source.readable is False


@pytest.mark.asyncio
async def test_start_is_idempotent():
    spawner = TaskSpawner(asyncio.get_running_loop())
    source = StreamReaderSource(make_reader(b"x"), spawner)

    assert source.start() is source.start()
    await source.start()
    assert spawner.remaining_tasks == 0


@pytest.mark.asyncio
async def test_pause_stops_reading_until_resume():
    spawner = TaskSpawner(asyncio.get_running_loop())
    source = StreamReaderSource(make_reader(b"abc"), spawner)
    rec = Recorder(source)

    source.pause()
    assert source.paused is True
    task = source.start()

    for _ in range(5):
        await asyncio.sleep(0)
    assert rec.data == []
    assert not task.done()

    source.resume()
    await task
    assert rec.data == [b"abc"]


@pytest.mark.ut
def test_rejects_invalid_read_size():
    with pytest.raises(ValueError):
        StreamReaderSource(None, None, read_size=0)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_piped_into_buffered_stream():
    spawner = TaskSpawner(asyncio.get_running_loop())
    source = StreamReaderSource(make_reader(b"x" * 32), spawner, read_size=8)

    stream = BufferedStream(4, source)
    rec = Recorder(stream)
    done = asyncio.get_running_loop().create_future()
    stream.on("end", lambda: done.set_result(None))

    await asyncio.wait_for(done, timeout=1)

    assert b"".join(rec.data) == b"x" * 32
    assert rec.count("drain") == 4
    assert rec.names[-1] == "end"


@pytest.mark.asyncio
async def test_reading_resumes_after_drain():
    spawner = TaskSpawner(asyncio.get_running_loop())
    reader = make_reader(b"abcdef", eof=False)
    source = StreamReaderSource(reader, spawner, read_size=6)

    stream = BufferedStream(2, scheduler=asyncio.get_running_loop())
    stream.pause()
    source.pipe(stream)

    for _ in range(5):
        await asyncio.sleep(0)
    assert source.paused is True
    assert stream.size == 6

    stream.resume()
    for _ in range(5):
        await asyncio.sleep(0)
    assert source.paused is False
    assert stream.size == 0

    reader.feed_eof()
    await asyncio.wait_for(source.start(), timeout=1)


@pytest.mark.asyncio
async def test_pause_from_data_listener_holds_next_read():
    spawner = TaskSpawner(asyncio.get_running_loop())
    source = StreamReaderSource(make_reader(b"abc"), spawner, read_size=1)
    rec = Recorder(source)
    source.once("data", lambda chunk: source.pause())

    task = source.start()
    for _ in range(5):
        await asyncio.sleep(0)
    assert rec.data == [b"a"]
    assert source.paused is True
    assert source.readable is True

    source.resume()
    source.resume()
    await task
    assert rec.data == [b"a", b"b", b"c"]
    assert rec.count("end") == 1
