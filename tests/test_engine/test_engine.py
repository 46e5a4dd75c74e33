"""Tests for streaming placeholder substitution."""

import asyncio
import pytest
from unittest.mock import AsyncMock, Mock
from splice.lib.engine import SpliceEngine
from splice.lib.pipeline import text_splice
from splice.models.dataModel import EnginePhase

PLACEHOLDER = '<!-- include "filename" -->'
DOCUMENT = 'foo <!-- include "filename" --> bar'


async def collect(engine: SpliceEngine, chunks) -> str:
    parts = [part async for part in engine.stream(chunks)]
    return b"".join(parts).decode()


def expect_filename(expected: str, content=""):
    def resolve(filename):
        assert filename == expected
        return content

    return resolve


@pytest.fixture
def silent_resolver():
    resolver = Mock()
    resolver.resolve = AsyncMock()
    return resolver


def corruptions(working: str) -> list[str]:
    """Insert an unexpected unit at every literal position of a placeholder.

    Both a foreign unit and the placeholder's own first unit are tried.
    """
    opening = working.index('"')
    closing = working.index('"', opening + 1)
    broken = []
    for unit in ("x", working[0]):
        for i in range(1, len(working)):
            if opening < i <= closing:
                continue  # inside the quotes the unit would just join the filename
            broken.append(working[:i] + unit + working[i:])
        # a prefix, a stray unit, then the prefix again
        for i in range(1, len(working)):
            broken.append(working[: i - 1] + unit + working[:i])
    return broken


@pytest.mark.asyncio
async def test_passthrough():
    engine = SpliceEngine()
    result = await collect(engine, ["this is some data", " written to my stream"])
    assert result == "this is some data written to my stream"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "plain text",
        "a < b and c > d",
        "<!-- a comment -->",
        "<!-- include without quotes -->",
        "ends with a partial <!-- incl",
        '<!-- include "unterminated',
        "été ☃ <html>",
    ],
)
@pytest.mark.asyncio
async def test_identity_without_placeholders(text, silent_resolver):
    assert await text_splice(text, silent_resolver) == text
    silent_resolver.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_single_placeholder_removed():
    result = await text_splice(PLACEHOLDER, expect_filename("filename"))
    assert result == ""


@pytest.mark.parametrize(
    "content, expected",
    [
        ("", "foo  bar"),
        (None, "foo  bar"),
        ("X", "foo X bar"),
        ("replacement", "foo replacement bar"),
        (b"replacement", "foo replacement bar"),
        (bytearray(b"replacement"), "foo replacement bar"),
        (["part 1 ", b"part 2"], "foo part 1 part 2 bar"),
    ],
)
@pytest.mark.asyncio
async def test_replacement_kinds(content, expected):
    assert await text_splice(DOCUMENT, lambda name: content) == expected


@pytest.mark.asyncio
async def test_replacement_async_stream():
    async def parts():
        yield "a"
        await asyncio.sleep(0)
        yield b"b"

    assert await text_splice(DOCUMENT, lambda name: parts()) == "foo ab bar"


@pytest.mark.asyncio
async def test_async_resolver():
    async def resolve(filename):
        await asyncio.sleep(0)
        return filename.upper()

    assert await text_splice(DOCUMENT, resolve) == "foo FILENAME bar"


@pytest.mark.asyncio
async def test_multiple_placeholders_in_order():
    filenames = ["filename1", "filename2"]

    def resolve(filename):
        assert filename == filenames.pop(0)
        return ""

    text = 'foo <!-- include "filename1" --> bar <!-- include "filename2" --> fee'
    assert await text_splice(text, resolve) == "foo  bar  fee"
    assert filenames == []


@pytest.mark.asyncio
async def test_back_to_back_placeholders_never_overlap():
    events = []
    active = 0

    async def resolve(filename):
        nonlocal active
        active += 1
        assert active == 1
        events.append(f"start {filename}")
        await asyncio.sleep(0)
        events.append(f"end {filename}")
        active -= 1

        async def body():
            await asyncio.sleep(0)
            yield f"[{filename}]"
            events.append(f"done {filename}")

        return body()

    text = '<!-- include "a" --><!-- include "b" --><!-- include "c" -->'
    assert await text_splice(text, resolve) == "[a][b][c]"
    assert events == [
        "start a", "end a", "done a",
        "start b", "end b", "done b",
        "start c", "end c", "done c",
    ]


@pytest.mark.parametrize("split_at", range(len(DOCUMENT)))
@pytest.mark.asyncio
async def test_placeholder_across_two_chunks(split_at):
    chunks = [DOCUMENT[:split_at], DOCUMENT[split_at:]]
    result = await text_splice("", expect_filename("filename"), chunks=chunks)
    assert result == "foo  bar", f"split at {split_at}"


@pytest.mark.asyncio
async def test_placeholder_across_three_chunks():
    for i in range(len(DOCUMENT)):
        for m in range(i, len(DOCUMENT)):
            chunks = [DOCUMENT[:i], DOCUMENT[i:m], DOCUMENT[m:]]
            engine = SpliceEngine(expect_filename("filename", "X"))
            result = await collect(engine, chunks)
            assert result == "foo X bar", f"split at {i} and {m}"
            assert engine.state.carry_over is None


@pytest.mark.asyncio
async def test_single_unit_chunks():
    text = 'a<!-- include "one" -->b<!-- include "two" -->c'
    chunks = [ch for ch in text]
    result = await text_splice("", lambda name: name.upper(), chunks=chunks)
    assert result == "aONEbTWOc"


@pytest.mark.parametrize("broken", corruptions(PLACEHOLDER))
@pytest.mark.asyncio
async def test_broken_placeholder_passes_through(broken, silent_resolver):
    assert await text_splice(broken, silent_resolver) == broken
    silent_resolver.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_broken_placeholder_across_chunks(silent_resolver):
    for broken in corruptions(PLACEHOLDER):
        for split_at in range(len(broken)):
            chunks = [broken[:split_at], broken[split_at:]]
            result = await text_splice("", silent_resolver, chunks=chunks)
            assert result == broken, f"{broken!r} split at {split_at}"
    silent_resolver.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_filename_exceeding_bound_passes_through(silent_resolver):
    result = await text_splice(DOCUMENT, silent_resolver, max_filename_length=7)
    assert result == DOCUMENT
    silent_resolver.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_filename_bound_across_chunks(silent_resolver):
    for split_at in range(len(DOCUMENT)):
        chunks = [DOCUMENT[:split_at], DOCUMENT[split_at:]]
        result = await text_splice(
            "", silent_resolver, chunks=chunks, max_filename_length=7
        )
        assert result == DOCUMENT
    silent_resolver.resolve.assert_not_awaited()


@pytest.mark.parametrize(
    "text",
    [
        '<<!-- include "filename" -->',
        '<!-- include <!-- include "a" -->',
        'a <!<!-- include "b" --> c',
    ],
)
@pytest.mark.asyncio
async def test_aborting_unit_is_refunded_as_literal(text, silent_resolver):
    assert await text_splice(text, silent_resolver) == text
    silent_resolver.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_custom_placeholders():
    result = await text_splice(
        '/* include "filename" */',
        expect_filename("filename"),
        placeholder_start="/* include ",
        placeholder_end=" */",
    )
    assert result == ""


@pytest.mark.asyncio
async def test_empty_end_placeholder():
    result = await text_splice(
        '// include "filename" rest',
        expect_filename("filename", "X"),
        placeholder_start="// include ",
        placeholder_end="",
    )
    assert result == "X rest"


@pytest.mark.asyncio
async def test_idempotent_pass_through():
    text = "no placeholders here, just <tags> and <!-- comments -->"
    once = await text_splice(text)
    twice = await text_splice(once)
    assert once == twice == text


@pytest.mark.asyncio
async def test_bytes_input_and_utf8_filename():
    engine = SpliceEngine(lambda name: name)
    data = '<!-- include "café" -->'.encode()
    result = await collect(engine, [data[:17], data[17:]])
    assert result == "café"


@pytest.mark.asyncio
async def test_include_records_and_stats():
    engine = SpliceEngine(lambda name: "12345")
    text = 'ab<!-- include "x" -->cd<!-- include "y" -->'
    await collect(engine, [text[:10], text[10:30], text[30:]])

    assert [r.filename for r in engine.includes] == ["x", "y"]
    assert engine.includes[0].offset == 2
    assert engine.includes[0].length == len('<!-- include "x" -->')
    assert engine.includes[1].offset == text.index('<!-- include "y"')
    assert engine.stats.chunks_in == 3
    assert engine.stats.bytes_in == len(text)
    assert engine.stats.bytes_out == len("ab12345cd12345")
    assert engine.stats.placeholders == 2
    assert engine.stats.replacements_empty == 0


@pytest.mark.asyncio
async def test_phases():
    engine = SpliceEngine()
    assert engine.phase is EnginePhase.IDLE
    out = [part async for part in engine.feed("abc <!-- incl")]
    assert out == [b"abc "]
    assert engine.phase is EnginePhase.IDLE
    assert engine.state.carry_over == b"<!-- incl"
    assert engine.finish() == b"<!-- incl"
    assert engine.phase is EnginePhase.ENDED
    assert engine.finish() == b""


@pytest.mark.asyncio
async def test_large_input_memory_is_bounded():
    block = ("lorem ipsum <dolor> sit amet " * 64).encode()
    chunk_count = 4 * 1024 * 1024 // len(block)
    engine = SpliceEngine()
    total = 0
    largest_chunk = 0

    async for part in engine.stream(block for _ in range(chunk_count)):
        total += len(part)
        largest_chunk = max(largest_chunk, len(engine.state.current_chunk))

    assert total == len(block) * chunk_count
    assert largest_chunk <= len(block)
    assert engine.state.carry_over is None
