"""
splice: streaming include processor.

Replaces delimited placeholders such as ``<!-- include "file" -->`` in a
stream with externally supplied content, one chunk at a time.
"""

from splice.lib.engine import SpliceEngine
from splice.lib.errors import (
    SpliceError,
    ResolverError,
    ReplacementError,
    StreamHaltedError,
)
from splice.lib.matcher import Matcher
from splice.lib.pipeline import bytes_splice, file_splice, text_splice
from splice.lib.resolve import (
    CallbackResolver,
    ContentResolver,
    FileResolver,
    FunctionResolver,
    MappingResolver,
    NullResolver,
    resolver_adapt,
)
from splice.models.dataModel import MatchResult, PlaceholderConfig

__all__ = [
    "SpliceEngine",
    "Matcher",
    "MatchResult",
    "PlaceholderConfig",
    "SpliceError",
    "ResolverError",
    "ReplacementError",
    "StreamHaltedError",
    "ContentResolver",
    "NullResolver",
    "MappingResolver",
    "FunctionResolver",
    "CallbackResolver",
    "FileResolver",
    "resolver_adapt",
    "bytes_splice",
    "file_splice",
    "text_splice",
]
