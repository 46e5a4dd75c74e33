"""
Replacement payload normalization.

A resolver may hand back nothing, text, raw bytes, an async stream, a
file-like reader or a plain iterable of pieces. This module tags the payload
with a ReplacementKind and turns every kind into one async stream of
non-empty byte chunks, so the engine has a single completion signal
(exhaustion of the stream) to resume scanning on.
"""

import asyncio
import inspect
from typing import Any, AsyncIterator
from splice.models.dataModel import Replacement, ReplacementKind

BYTES_LIKE: tuple[type, ...] = (bytes, bytearray, memoryview)


def replacement_classify(content: Replacement) -> ReplacementKind:
    """Tag a resolver result.

    Args:
        content: Whatever the resolver returned

    Returns:
        ReplacementKind for the payload

    Raises:
        TypeError: If the payload has no supported shape
    """
    if content is None:
        return ReplacementKind.EMPTY
    if isinstance(content, str):
        return ReplacementKind.TEXT if content else ReplacementKind.EMPTY
    if isinstance(content, BYTES_LIKE):
        return ReplacementKind.BYTES if len(content) else ReplacementKind.EMPTY
    if hasattr(content, "__aiter__"):
        return ReplacementKind.ASYNC_STREAM
    if callable(getattr(content, "read", None)):
        return ReplacementKind.READER
    if hasattr(content, "__iter__"):
        return ReplacementKind.ITERABLE
    raise TypeError(f"Unsupported replacement type: {type(content).__name__}")


def units_encode(piece: Any, encoding: str) -> bytes:
    """Normalize one piece of content to bytes."""
    if isinstance(piece, str):
        return piece.encode(encoding)
    if isinstance(piece, BYTES_LIKE):
        return bytes(piece)
    raise TypeError(f"Unsupported replacement chunk type: {type(piece).__name__}")


async def replacement_chunks(
    content: Replacement, encoding: str = "utf-8", chunk_size: int = 65536
) -> AsyncIterator[bytes]:
    """Stream a resolver result as non-empty byte chunks.

    Async generators and readers are closed once consumed, and also when the
    consumer stops early.

    Args:
        content: Resolver result of any supported kind
        encoding: Codec for text payloads
        chunk_size: Block size for reader payloads

    Yields:
        Non-empty bytes, in order
    """
    kind: ReplacementKind = replacement_classify(content)

    if kind is ReplacementKind.EMPTY:
        return

    if kind in (ReplacementKind.TEXT, ReplacementKind.BYTES):
        yield units_encode(content, encoding)
        return

    try:
        if kind is ReplacementKind.ASYNC_STREAM:
            async for piece in content:
                data: bytes = units_encode(piece, encoding)
                if data:
                    yield data

        elif kind is ReplacementKind.READER:
            native: bool = inspect.iscoroutinefunction(content.read)
            while True:
                if native:
                    block = await content.read(chunk_size)
                else:
                    block = await asyncio.to_thread(content.read, chunk_size)
                    if inspect.isawaitable(block):
                        block = await block
                if not block:
                    break
                yield units_encode(block, encoding)

        else:
            for piece in content:
                data = units_encode(piece, encoding)
                if data:
                    yield data
    finally:
        await _close(content, kind)


async def _close(content: Any, kind: ReplacementKind) -> None:
    closer = None
    if kind is ReplacementKind.ASYNC_STREAM:
        closer = getattr(content, "aclose", None)
    if closer is None:
        closer = getattr(content, "close", None)
    if callable(closer):
        result = closer()
        if inspect.isawaitable(result):
            await result
