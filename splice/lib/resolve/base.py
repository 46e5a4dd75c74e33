r"""
Content resolver protocol and adapters.

The engine hands each captured filename to a resolver and forwards whatever
comes back. This module defines the resolver interface and the adapters that
turn ordinary Python callables into resolvers:

- FunctionResolver: fn(filename) returning content, sync or async
- CallbackResolver: fn(filename, supply) that delivers content by calling
  supply(content) exactly once, now, later, or from another thread
- MappingResolver: static lookup table
- NullResolver: every placeholder is deleted

Example:
    resolver = resolver_adapt(lambda name: f"[{name}]")
    content = await resolver.resolve("header.html")
"""

import asyncio
import inspect
from collections.abc import Mapping
from typing import Any, Callable, Protocol, Self, runtime_checkable
from splice.lib.errors import ResolverError
from splice.lib.log import LOG
from splice.models.dataModel import Replacement


@runtime_checkable
class ContentResolver(Protocol):
    """Protocol defining the resolver interface for placeholder substitution.

    Resolvers map a captured filename to replacement content. They may return
    None, text, bytes, an async iterable, a reader with read(n), or an
    iterable of text/bytes pieces. Raising signals failure and halts the
    stream being spliced.
    """

    async def resolve(self: Self, filename: str) -> Replacement:
        """Resolve a filename to its replacement.

        Args:
            filename: Filename captured between the placeholder quotes

        Returns:
            Replacement content of any supported kind
        """
        ...


class NullResolver:
    """Resolver that replaces every placeholder with nothing."""

    async def resolve(self: Self, filename: str) -> Replacement:
        return None


class MappingResolver:
    """Resolver backed by a static mapping of filename to content."""

    def __init__(self: Self, mapping: Mapping[str, Replacement], strict: bool = True) -> None:
        """Initialize with a lookup table.

        Args:
            mapping: Filename to content
            strict: Raise ResolverError for unknown filenames instead of
                    substituting nothing
        """
        self.mapping: Mapping[str, Replacement] = mapping
        self.strict: bool = strict

    async def resolve(self: Self, filename: str) -> Replacement:
        if filename in self.mapping:
            return self.mapping[filename]
        if self.strict:
            msg: str = f"No replacement defined for: {filename}"
            LOG(msg)
            raise ResolverError(msg, filename)
        return None


class FunctionResolver:
    """Resolver wrapping fn(filename); fn may be sync or async."""

    def __init__(self: Self, fn: Callable[[str], Any]) -> None:
        self.fn: Callable[[str], Any] = fn

    async def resolve(self: Self, filename: str) -> Replacement:
        result: Any = self.fn(filename)
        if inspect.isawaitable(result):
            result = await result
        return result


class CallbackResolver:
    """Resolver for the continuation style fn(filename, supply).

    The collaborator must call ``supply(content)`` exactly once; content may
    be omitted for an empty replacement. If it never calls supply, resolution
    never completes.
    """

    def __init__(self: Self, fn: Callable[[str, Callable[..., None]], Any]) -> None:
        self.fn: Callable[[str, Callable[..., None]], Any] = fn

    async def resolve(self: Self, filename: str) -> Replacement:
        loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        supplied: list[bool] = []

        def settle(content: Replacement) -> None:
            if not future.done():
                future.set_result(content)

        def supply(content: Replacement = None) -> None:
            if supplied:
                raise RuntimeError(f"supply() called more than once for '{filename}'")
            supplied.append(True)
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                settle(content)
            else:
                loop.call_soon_threadsafe(settle, content)

        result: Any = self.fn(filename, supply)
        if inspect.isawaitable(result):
            await result
        return await future


def _positional_count(fn: Callable[..., Any]) -> int:
    """Count the positional parameters fn requires; defaulted ones do not count."""
    try:
        signature: inspect.Signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1
    kinds = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return sum(
        1
        for p in signature.parameters.values()
        if p.kind in kinds and p.default is inspect.Parameter.empty
    )


def resolver_adapt(obj: Any) -> ContentResolver:
    """Turn a resolver-ish object into a ContentResolver.

    Args:
        obj: None, a resolver, a mapping, fn(filename) or fn(filename, supply)

    Returns:
        ContentResolver wrapping obj

    Raises:
        TypeError: If obj cannot act as a resolver
    """
    if obj is None:
        return NullResolver()
    if isinstance(obj, ContentResolver):
        return obj
    if isinstance(obj, Mapping):
        return MappingResolver(obj)
    if callable(obj):
        if _positional_count(obj) >= 2:
            return CallbackResolver(obj)
        return FunctionResolver(obj)
    raise TypeError(f"Cannot use {type(obj).__name__} as a content resolver")
