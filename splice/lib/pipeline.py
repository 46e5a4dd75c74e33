"""
Pipeline helpers for running splice engines over files and strings.

Provides:
- chunks_read: async block reader over a binary file object
- file_splice: stream one file object into another through an engine
- bytes_splice / text_splice: one-shot helpers for in-memory data
"""

import asyncio
from typing import Any, AsyncIterator, BinaryIO, Iterable, Optional
from contextlib import aclosing
from splice.lib.engine import SpliceEngine
from splice.lib.log import LOG
from splice.models.dataModel import EngineStats


async def chunks_read(fileobj: BinaryIO, chunk_size: int = 65536) -> AsyncIterator[bytes]:
    """Read a binary file object in blocks without blocking the event loop.

    Args:
        fileobj: Object with read(n) returning bytes
        chunk_size: Block size

    Yields:
        Non-empty blocks until end of file
    """
    while True:
        block: bytes = await asyncio.to_thread(fileobj.read, chunk_size)
        if not block:
            break
        yield block


async def file_splice(
    src: BinaryIO,
    dst: BinaryIO,
    engine: SpliceEngine,
    chunk_size: Optional[int] = None,
) -> EngineStats:
    """Stream src through engine into dst.

    Output is written as it is produced, so memory stays proportional to the
    chunk size rather than the input size.

    Args:
        src: Binary input
        dst: Binary output
        engine: A fresh engine
        chunk_size: Read size; the engine's configured chunk size when None

    Returns:
        EngineStats of the finished stream

    Raises:
        ReplacementError: A placeholder could not be resolved
    """
    size: int = chunk_size or engine.config.chunk_size
    async with aclosing(engine.stream(chunks_read(src, size))) as out:
        async for part in out:
            dst.write(part)
    dst.flush()
    LOG(
        f"Spliced {engine.stats.bytes_in} bytes into {engine.stats.bytes_out} "
        f"({engine.stats.placeholders} placeholders)"
    )
    return engine.stats


async def bytes_splice(
    data: bytes | Iterable[bytes], resolver: Any = None, **config: Any
) -> bytes:
    """Run bytes (or an iterable of byte chunks) through a fresh engine."""
    engine: SpliceEngine = SpliceEngine(resolver, **config)
    chunks: Iterable[Any] = [data] if isinstance(data, (bytes, bytearray)) else data
    parts: list[bytes] = [part async for part in engine.stream(chunks)]
    return b"".join(parts)


async def text_splice(
    text: str,
    resolver: Any = None,
    chunks: Optional[Iterable[str]] = None,
    **config: Any,
) -> str:
    """Run text through a fresh engine and decode the result.

    Args:
        text: Input text; ignored when chunks is given
        resolver: Anything resolver_adapt accepts
        chunks: Pre-split input, to exercise chunk boundaries
        **config: PlaceholderConfig fields

    Returns:
        Spliced text
    """
    engine: SpliceEngine = SpliceEngine(resolver, **config)
    source: Iterable[str] = chunks if chunks is not None else [text]
    parts: list[bytes] = [part async for part in engine.stream(source)]
    return b"".join(parts).decode(engine.config.encoding, errors="surrogateescape")
