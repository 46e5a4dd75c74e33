"""
dataModel.py

This module defines the data models and schemas used throughout the splice
package. Configuration and reporting models leverage Pydantic for validation;
the hot-path state holders are plain dataclasses.

Features:
- Enum classes for matcher transitions, token steps, engine phases and
  replacement payload kinds.
- Placeholder configuration with validated bounds.
- Engine state and statistics.
- Records of resolved placeholders.

Usage:
Import these models to configure and inspect a splice engine.
"""

from pydantic import BaseModel, Field, PositiveInt, field_validator
from typing import Optional, Any, AsyncIterable, Iterable, Union
from enum import Enum
import codecs
from dataclasses import dataclass


class MatchResult(Enum):
    """
    Classification returned by the matcher for every unit it is fed.
    """

    NO_MATCH = "no-match"
    MATCH_START = "match-start"
    MATCHING = "matching"
    MATCH_ABORT = "match-abort"
    MATCH_FOUND = "match-found"


class StepKind(Enum):
    """
    Kind of a single step in a compiled token sequence.
    """

    LITERAL = 1
    BEGIN_CAPTURE = 2
    CAPTURE = 3


class EnginePhase(Enum):
    """
    What a stream engine is doing right now.

    Attributes:
        IDLE: Between chunks, ready for input
        SCANNING: Feeding units of a chunk to the matcher
        AWAITING: Waiting on the resolver or forwarding its replacement
        HALTED: Stopped by an error; no further input accepted
        ENDED: End of input seen and carry-over flushed
    """

    IDLE = "idle"
    SCANNING = "scanning"
    AWAITING = "awaiting"
    HALTED = "halted"
    ENDED = "ended"


class ReplacementKind(Enum):
    """
    Tag for the shapes of content a resolver may hand back.
    """

    EMPTY = "empty"
    TEXT = "text"
    BYTES = "bytes"
    ASYNC_STREAM = "async-stream"
    READER = "reader"
    ITERABLE = "iterable"


# Content a resolver may return for a filename. Objects with read() also work.
Replacement = Union[
    None, str, bytes, bytearray, memoryview, AsyncIterable[Any], Iterable[Any]
]


@dataclass(frozen=True)
class Step:
    """One step of a compiled token sequence.

    Attributes:
        kind: Literal unit, begin-capture marker or capture
        unit: The byte value a LITERAL step expects (None otherwise)
    """

    kind: StepKind
    unit: int | None = None


@dataclass(frozen=True)
class MatcherState:
    """Immutable snapshot of a matcher.

    Attributes:
        cursor: Index into the token sequence, 0 when idle
        filename: Units captured so far (or by the last full match)
    """

    cursor: int
    filename: bytes


@dataclass
class EngineState:
    """Mutable per-stream scanning state.

    Attributes:
        current_chunk: Units being scanned (carry-over + new data)
        scan_position: Index of the next unit to feed the matcher
        literal_start: Start of the not-yet-emitted literal span
        match_prefix_start: Where the current delimiter attempt began
        carry_over: Unresolved partial match kept across a chunk boundary
        phase: Current engine phase
        offset: Stream offset of ``current_chunk[0]``
    """

    current_chunk: bytes = b""
    scan_position: int = 0
    literal_start: int = 0
    match_prefix_start: int | None = None
    carry_over: bytes | None = None
    phase: EnginePhase = EnginePhase.IDLE
    offset: int = 0


class PlaceholderConfig(BaseModel):
    """
    Construction-time configuration of a splice engine.

    Attributes:
        placeholder_start (str): Literal prefix, may be empty.
        placeholder_end (str): Literal suffix, may be empty.
        max_filename_length (int): Longest filename captured before aborting.
        encoding (str): Codec for str input, delimiters and filenames.
        chunk_size (int): Block size used when reading file-like replacements.
    """

    placeholder_start: str = Field(
        default="<!-- include ", description="Literal text opening a placeholder."
    )
    placeholder_end: str = Field(
        default=" -->", description="Literal text closing a placeholder."
    )
    max_filename_length: PositiveInt = Field(
        default=512, description="Maximum captured filename length in units."
    )
    encoding: str = Field(default="utf-8", description="Text codec.")
    chunk_size: PositiveInt = Field(
        default=65536, description="Read size for file-like replacements."
    )

    @field_validator("encoding")
    @classmethod
    def encoding_check(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {value}") from e
        return value

    def start_units(self) -> bytes:
        return self.placeholder_start.encode(self.encoding)

    def end_units(self) -> bytes:
        return self.placeholder_end.encode(self.encoding)


class EngineStats(BaseModel):
    """Running totals for one stream.

    Attributes:
        chunks_in: Number of input chunks fed
        bytes_in: Units received from upstream
        bytes_out: Units emitted downstream, replacements included
        placeholders: Full placeholder matches
        replacements_empty: Matches whose replacement was empty
    """

    chunks_in: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    placeholders: int = 0
    replacements_empty: int = 0


class IncludeRecord(BaseModel):
    """A placeholder that was matched and handed to the resolver.

    Attributes:
        filename: Captured filename
        offset: Byte offset of the placeholder within the input stream
        length: Byte length of the placeholder text
    """

    filename: str
    offset: int
    length: int
    error: Optional[str] = Field(
        default=None, description="Resolver failure, if any."
    )
