"""
Streaming placeholder engine for splice.

Drives a Matcher over a stream of chunks and substitutes each placeholder
with content supplied by a resolver, without buffering the stream.

The engine handles:
- Literal spans, emitted as soon as they are known not to be placeholders
- Partial matches that straddle a chunk boundary (carry-over)
- Suspension at each full match while the resolver supplies content and
  that content is forwarded, before scanning resumes
- Refunding aborted matches and oversized filenames as literal text
- Halting on resolver, replacement or upstream failure

Only one thing happens at a time: the engine is idle between chunks,
scanning a chunk, or awaiting a replacement, and never scans ahead of an
outstanding resolver call. Placeholders are therefore resolved strictly in
document order.

Example:
    engine = SpliceEngine(resolver={"name": "world"})
    async for part in engine.stream([b'hello <!-- include "na', b'me" -->']):
        sys.stdout.buffer.write(part)
"""

from contextlib import aclosing
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Self
from splice.lib.errors import ReplacementError, StreamHaltedError
from splice.lib.log import LOG
from splice.lib.matcher import Matcher
from splice.lib.replacement import BYTES_LIKE, replacement_chunks
from splice.lib.resolve import ContentResolver, resolver_adapt
from splice.models.dataModel import (
    EnginePhase,
    EngineState,
    EngineStats,
    IncludeRecord,
    MatchResult,
    PlaceholderConfig,
    Replacement,
)


class SpliceEngine:
    """Chunk-boundary-safe placeholder substitution over one stream.

    Attributes:
        config: Placeholder shape and limits
        resolver: Collaborator supplying replacement content
        matcher: State machine reused for the whole stream
        state: Scanning state (see EngineState)
        stats: Running totals
        includes: Every placeholder handed to the resolver, in order
    """

    def __init__(
        self: Self,
        resolver: Any = None,
        config: PlaceholderConfig | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize the engine for one stream.

        Args:
            resolver: Anything resolver_adapt accepts; None deletes placeholders
            config: Placeholder configuration (defaults when None)
            **overrides: PlaceholderConfig fields overriding config

        Raises:
            pydantic.ValidationError: If the configuration is invalid
        """
        if config is None:
            config = PlaceholderConfig(**overrides)
        elif overrides:
            config = PlaceholderConfig(**{**config.model_dump(), **overrides})

        self.config: PlaceholderConfig = config
        self.resolver: ContentResolver = resolver_adapt(resolver)
        self.matcher: Matcher = Matcher(
            config.start_units(), config.end_units(), config.max_filename_length
        )
        self.state: EngineState = EngineState()
        self.stats: EngineStats = EngineStats()
        self.includes: list[IncludeRecord] = []

    @property
    def phase(self: Self) -> EnginePhase:
        return self.state.phase

    def units(self: Self, chunk: Any) -> bytes:
        """Normalize an input chunk to bytes.

        Raises:
            TypeError: If chunk is neither text nor bytes-like
        """
        if isinstance(chunk, str):
            return chunk.encode(self.config.encoding)
        if isinstance(chunk, BYTES_LIKE):
            return bytes(chunk)
        raise TypeError(f"Unsupported chunk type: {type(chunk).__name__}")

    async def feed(self: Self, chunk: Any) -> AsyncIterator[bytes]:
        """Scan one input chunk, yielding output as it becomes available.

        The generator must be exhausted before the next chunk is fed.
        Abandoning it part-way halts the engine.

        Args:
            chunk: Text or bytes-like input

        Yields:
            Output bytes: literal spans and replacement content, in order

        Raises:
            ReplacementError: The resolver or its content failed
            StreamHaltedError: The engine already halted or ended
            RuntimeError: Another chunk is still being processed
        """
        self._guard()
        data: bytes = self.units(chunk)
        st: EngineState = self.state
        st.phase = EnginePhase.SCANNING
        self.stats.chunks_in += 1
        self.stats.bytes_in += len(data)
        self._begin(data)

        completed: bool = False
        try:
            while self._scan():
                record: IncludeRecord = self._record()
                literal: bytes = st.current_chunk[st.literal_start : st.match_prefix_start]
                st.literal_start = st.scan_position
                st.match_prefix_start = None
                if literal:
                    yield self._emit(literal)

                st.phase = EnginePhase.AWAITING
                async with aclosing(self._replace(record)) as parts:
                    async for part in parts:
                        yield self._emit(part)
                st.phase = EnginePhase.SCANNING

            tail: bytes = self._chunk_end()
            completed = True
            if tail:
                yield self._emit(tail)
        finally:
            if completed:
                st.phase = EnginePhase.IDLE
            else:
                self._halt()

    def finish(self: Self) -> bytes:
        """Signal end of input.

        Returns:
            Any carry-over, verbatim: an unfinished placeholder at the end of
            the stream is output as literal text, never dropped

        Raises:
            StreamHaltedError: The engine halted earlier
            RuntimeError: A chunk is still being processed
        """
        st: EngineState = self.state
        if st.phase is EnginePhase.ENDED:
            return b""
        self._guard()

        tail: bytes = st.carry_over or b""
        st.carry_over = None
        st.offset += len(st.current_chunk)
        st.current_chunk = b""
        st.scan_position = st.literal_start = 0
        st.match_prefix_start = None
        self.matcher.reset()
        st.phase = EnginePhase.ENDED

        if tail:
            LOG(f"Flushing unfinished placeholder at end of input ({len(tail)} bytes)")
        return self._emit(tail)

    async def stream(
        self: Self, source: AsyncIterable[Any] | Iterable[Any]
    ) -> AsyncIterator[bytes]:
        """Run a whole stream of chunks through the engine.

        Upstream errors propagate unchanged and halt the engine.

        Args:
            source: Sync or async iterable of text or bytes-like chunks

        Yields:
            Output bytes, in order
        """
        ended: bool = False
        try:
            async with aclosing(_chunks_iter(source)) as chunks:
                async for chunk in chunks:
                    async with aclosing(self.feed(chunk)) as out:
                        async for part in out:
                            yield part
            tail: bytes = self.finish()
            ended = True
            if tail:
                yield tail
        finally:
            if not ended:
                self._halt()

    def _guard(self: Self) -> None:
        phase: EnginePhase = self.state.phase
        if phase is EnginePhase.HALTED:
            raise StreamHaltedError("Stream halted after an earlier error")
        if phase is EnginePhase.ENDED:
            raise StreamHaltedError("Stream already ended")
        if phase is not EnginePhase.IDLE:
            raise RuntimeError(f"Engine busy ({phase.value}); finish the current chunk first")

    def _begin(self: Self, data: bytes) -> None:
        st: EngineState = self.state
        carry: bytes = st.carry_over or b""
        st.offset += len(st.current_chunk) - len(carry)
        if carry:
            # Resume inside the partial match, at the first new unit
            st.current_chunk = carry + data
            st.scan_position = len(carry)
            st.literal_start = 0
            st.match_prefix_start = 0
            st.carry_over = None
        else:
            st.current_chunk = data
            st.scan_position = 0
            st.literal_start = 0
            st.match_prefix_start = None

    def _scan(self: Self) -> bool:
        """Feed units to the matcher until a full match or the chunk ends.

        Returns:
            True with scan_position just past the placeholder on a full
            match, False once the chunk is exhausted
        """
        st: EngineState = self.state
        chunk: bytes = st.current_chunk
        size: int = len(chunk)
        matcher: Matcher = self.matcher
        first: int = matcher.first_unit

        while st.scan_position < size:
            if matcher.idle:
                # Idle units cannot change state; jump to the next candidate
                position: int = chunk.find(first, st.scan_position)
                if position < 0:
                    st.scan_position = size
                    break
                st.scan_position = position

            result: MatchResult = matcher.advance(chunk[st.scan_position])
            st.scan_position += 1

            if result is MatchResult.MATCH_ABORT:
                # Refund the attempt, aborting unit included, as literal
                st.match_prefix_start = None
            elif result is MatchResult.MATCH_START and st.match_prefix_start is None:
                st.match_prefix_start = st.scan_position - 1
            elif result is MatchResult.MATCH_FOUND:
                return True

        return False

    def _chunk_end(self: Self) -> bytes:
        st: EngineState = self.state
        chunk: bytes = st.current_chunk
        if self.matcher.in_progress:
            tail: bytes = chunk[st.literal_start : st.match_prefix_start]
            st.carry_over = chunk[st.match_prefix_start :]
            LOG(f"Carrying {len(st.carry_over)} bytes of partial placeholder")
        else:
            tail = chunk[st.literal_start :]
        st.literal_start = st.scan_position = len(chunk)
        st.match_prefix_start = None
        return tail

    def _record(self: Self) -> IncludeRecord:
        st: EngineState = self.state
        record: IncludeRecord = IncludeRecord(
            filename=self.matcher.filename_decode(self.config.encoding),
            offset=st.offset + st.match_prefix_start,
            length=st.scan_position - st.match_prefix_start,
        )
        self.includes.append(record)
        self.stats.placeholders += 1
        LOG(f"Placeholder matched: '{record.filename}' at offset {record.offset}")
        return record

    async def _replace(self: Self, record: IncludeRecord) -> AsyncIterator[bytes]:
        """Resolve one placeholder and stream its replacement."""
        try:
            content: Replacement = await self.resolver.resolve(record.filename)
        except Exception as e:
            raise self._failure(record, e) from e

        forwarded: int = 0
        async with aclosing(
            replacement_chunks(content, self.config.encoding, self.config.chunk_size)
        ) as parts:
            while True:
                try:
                    part: bytes = await anext(parts)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    raise self._failure(record, e) from e
                forwarded += len(part)
                yield part

        if not forwarded:
            self.stats.replacements_empty += 1

    def _failure(self: Self, record: IncludeRecord, error: Exception) -> ReplacementError:
        record.error = str(error)
        LOG(f"Replacement for '{record.filename}' failed: {error}")
        return ReplacementError(record.filename, error)

    def _emit(self: Self, data: bytes) -> bytes:
        self.stats.bytes_out += len(data)
        return data

    def _halt(self: Self) -> None:
        if self.state.phase is not EnginePhase.HALTED:
            LOG("Stream halted")
        self.state.phase = EnginePhase.HALTED

    def __repr__(self: Self) -> str:
        return f"SpliceEngine(phase={self.state.phase.value}, placeholders={self.stats.placeholders})"


async def _chunks_iter(source: AsyncIterable[Any] | Iterable[Any]) -> AsyncIterator[Any]:
    if hasattr(source, "__aiter__"):
        async for chunk in source:
            yield chunk
    else:
        for chunk in source:
            yield chunk
