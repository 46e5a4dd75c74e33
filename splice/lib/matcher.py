r"""
Incremental placeholder matcher.

A caller-driven state machine that recognizes one placeholder shape:

    <start literal> " <filename> " <end literal>

The shape is compiled once into a flat sequence of steps. The caller feeds
units (byte values) one at a time through `advance`; the matcher moves a
single forward-only cursor through the sequence and reports a MatchResult
for each unit. It never looks backward and owns no I/O, so a partial match
that fails is simply abandoned and the caller refunds the scanned units as
literal text.

Example:
    matcher = Matcher(b"<!-- include ", b" -->")
    for unit in b'<!-- include "header.html" -->':
        result = matcher.advance(unit)
    assert result is MatchResult.MATCH_FOUND
    assert matcher.filename == b"header.html"
"""

from typing import Final, Self
from splice.models.dataModel import MatchResult, MatcherState, Step, StepKind

QUOTE: Final[int] = ord('"')
DEFAULT_MAX_FILENAME_LENGTH: Final[int] = 512


class Matcher:
    """Forward-only matcher over a compiled token sequence.

    Attributes:
        delimiter: Unit that opens and closes the captured filename
        max_filename_length: Capture length that forces an abort when exceeded
        cursor: Index of the next step to satisfy, 0 when idle
    """

    def __init__(
        self: Self,
        start: bytes = b"<!-- include ",
        end: bytes = b" -->",
        max_filename_length: int = DEFAULT_MAX_FILENAME_LENGTH,
        delimiter: int = QUOTE,
    ) -> None:
        """Compile the token sequence.

        Args:
            start: Literal prefix, any length including zero
            end: Literal suffix, any length including zero
            max_filename_length: Positive bound on the captured filename
            delimiter: Quote unit around the filename

        Raises:
            ValueError: If max_filename_length is not positive
        """
        if max_filename_length < 1:
            raise ValueError("max_filename_length must be a positive integer")

        self.delimiter: int = delimiter
        self.max_filename_length: int = max_filename_length
        self.cursor: int = 0
        self._filename: bytearray = bytearray()
        self._sequence: tuple[Step, ...] = self.compile(bytes(start), bytes(end))

    def compile(self: Self, start: bytes, end: bytes) -> tuple[Step, ...]:
        """Build the list of steps to move through."""
        steps: list[Step] = [Step(StepKind.LITERAL, unit) for unit in start]
        steps.append(Step(StepKind.LITERAL, self.delimiter))
        steps.append(Step(StepKind.BEGIN_CAPTURE))
        steps.append(Step(StepKind.CAPTURE))
        steps.extend(Step(StepKind.LITERAL, unit) for unit in end)
        return tuple(steps)

    @property
    def sequence(self: Self) -> tuple[Step, ...]:
        return self._sequence

    @property
    def first_unit(self: Self) -> int:
        """Unit that every placeholder begins with."""
        return self._sequence[0].unit

    @property
    def idle(self: Self) -> bool:
        return self.cursor == 0

    @property
    def in_progress(self: Self) -> bool:
        return self.cursor > 0

    @property
    def filename(self: Self) -> bytes:
        return bytes(self._filename)

    def filename_decode(self: Self, encoding: str = "utf-8") -> str:
        """Captured filename as text; undecodable bytes survive as surrogates."""
        return self._filename.decode(encoding, errors="surrogateescape")

    def snapshot(self: Self) -> MatcherState:
        return MatcherState(cursor=self.cursor, filename=self.filename)

    def reset(self: Self) -> None:
        """Return to the idle state, discarding any capture."""
        self.cursor = 0
        self._filename.clear()

    def advance(self: Self, unit: int) -> MatchResult:
        """Move through the sequence by one unit.

        Args:
            unit: The next input unit (a byte value)

        Returns:
            MatchResult classifying the transition:
                - NO_MATCH: idle and the unit does not begin a placeholder
                - MATCH_START: the unit moved the cursor from 0 to 1
                - MATCHING: progress inside the sequence, capture included
                - MATCH_ABORT: mismatch or oversized filename; back to idle
                - MATCH_FOUND: sequence complete; back to idle, filename kept
        """
        step: Step = self._sequence[self.cursor]

        if step.kind is StepKind.BEGIN_CAPTURE:
            # Entering capture consumes no unit of its own
            self._filename.clear()
            self.cursor += 1
            step = self._sequence[self.cursor]

        if step.kind is StepKind.LITERAL:
            if unit == step.unit:
                self.cursor += 1
            elif self.cursor == 0:
                return MatchResult.NO_MATCH
            else:
                return self._abort()
        elif unit == self.delimiter:
            self.cursor += 1
        else:
            self._filename.append(unit)
            if len(self._filename) > self.max_filename_length:
                return self._abort()

        if self.cursor == len(self._sequence):
            self.cursor = 0
            return MatchResult.MATCH_FOUND
        if self.cursor == 1:
            self._filename.clear()
            return MatchResult.MATCH_START
        return MatchResult.MATCHING

    def _abort(self: Self) -> MatchResult:
        self.reset()
        return MatchResult.MATCH_ABORT

    def __repr__(self: Self) -> str:
        return f"Matcher(cursor={self.cursor}, steps={len(self._sequence)})"
