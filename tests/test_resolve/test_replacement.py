"""Tests for replacement payload classification and normalization."""

import io
import threading
import pytest
from splice.lib.replacement import replacement_chunks, replacement_classify
from splice.models.dataModel import ReplacementKind


async def chunks(content, **kwargs) -> list[bytes]:
    return [part async for part in replacement_chunks(content, **kwargs)]


class AsyncReader:
    def __init__(self, data: bytes) -> None:
        self.stream = io.BytesIO(data)
        self.closed = False

    async def read(self, n: int) -> bytes:
        return self.stream.read(n)

    def close(self) -> None:
        self.closed = True


class ThreadNotingReader:
    """Blocking reader over a real file that notes which thread reads it."""

    def __init__(self, fileobj) -> None:
        self.fileobj = fileobj
        self.threads: list[threading.Thread] = []

    def read(self, n: int) -> bytes:
        self.threads.append(threading.current_thread())
        return self.fileobj.read(n)

    def close(self) -> None:
        self.fileobj.close()


@pytest.mark.parametrize(
    "content, kind",
    [
        (None, ReplacementKind.EMPTY),
        ("", ReplacementKind.EMPTY),
        (b"", ReplacementKind.EMPTY),
        ("text", ReplacementKind.TEXT),
        (b"raw", ReplacementKind.BYTES),
        (memoryview(b"raw"), ReplacementKind.BYTES),
        (io.BytesIO(b"abc"), ReplacementKind.READER),
        (["a", "b"], ReplacementKind.ITERABLE),
    ],
)
def test_classify(content, kind):
    assert replacement_classify(content) is kind


def test_classify_async_stream():
    async def gen():
        yield "x"

    stream = gen()
    assert replacement_classify(stream) is ReplacementKind.ASYNC_STREAM


def test_classify_unsupported():
    with pytest.raises(TypeError):
        replacement_classify(3.14)


@pytest.mark.asyncio
async def test_empty_yields_nothing():
    assert await chunks(None) == []
    assert await chunks("") == []


@pytest.mark.asyncio
async def test_text_is_encoded():
    assert await chunks("naïve") == ["naïve".encode()]
    assert await chunks("naïve", encoding="latin-1") == ["naïve".encode("latin-1")]


@pytest.mark.asyncio
async def test_reader_in_blocks_and_closed():
    reader = io.BytesIO(b"abcdefghij")
    assert await chunks(reader, chunk_size=4) == [b"abcd", b"efgh", b"ij"]
    assert reader.closed


@pytest.mark.asyncio
async def test_async_reader():
    reader = AsyncReader(b"abcdef")
    assert await chunks(reader, chunk_size=3) == [b"abc", b"def"]
    assert reader.closed


@pytest.mark.asyncio
async def test_iterable_skips_empty_pieces():
    assert await chunks(["a", "", b"b"]) == [b"a", b"b"]


@pytest.mark.asyncio
async def test_bad_piece_type():
    with pytest.raises(TypeError):
        await chunks([1, 2, 3])


@pytest.mark.asyncio
async def test_file_reader(tmp_path):
    path = tmp_path / "part.html"
    path.write_bytes(b"0123456789")
    fileobj = open(path, "rb")
    assert await chunks(fileobj, chunk_size=4) == [b"0123", b"4567", b"89"]
    assert fileobj.closed


@pytest.mark.asyncio
async def test_blocking_reads_run_off_the_event_loop(tmp_path):
    path = tmp_path / "part.html"
    path.write_bytes(b"abcdef")
    reader = ThreadNotingReader(open(path, "rb"))
    assert await chunks(reader, chunk_size=4) == [b"abcd", b"ef"]
    assert reader.fileobj.closed
    assert reader.threads
    assert threading.current_thread() not in reader.threads
