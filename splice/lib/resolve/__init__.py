"""
Resolver package for splice.

Provides the content resolver interface used by the stream engine and the
ready-made resolvers built on it.
"""

from .base import (
    ContentResolver,
    NullResolver,
    MappingResolver,
    FunctionResolver,
    CallbackResolver,
    resolver_adapt,
)
from .resolvers import FileResolver

__all__ = [
    "ContentResolver",
    "NullResolver",
    "MappingResolver",
    "FunctionResolver",
    "CallbackResolver",
    "FileResolver",
    "resolver_adapt",
]
