"""
File system resolver for splice.

Resolves placeholder filenames to files on disk and streams their contents
in blocks, so an included file is never read whole into memory. Relative
filenames are taken against a base directory; by default paths escaping that
directory are refused.
"""

import asyncio
import os
from pathlib import Path
from typing import AsyncIterator, Self
from splice.lib.errors import ResolverError
from splice.lib.log import LOG
from splice.models.dataModel import Replacement

DEFAULT_BLOCK_SIZE: int = 65536


class FileResolver:
    """Resolver for file placeholders using the filesystem."""

    def __init__(
        self: Self,
        base_path: str | Path | None = None,
        max_size: int | None = None,
        missing_ok: bool = False,
        restrict: bool = True,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        """Initialize resolver with its base directory and limits.

        Args:
            base_path: Directory relative filenames resolve against
                       (current directory when None)
            max_size: Largest file accepted, in bytes; None for no limit
            missing_ok: Substitute nothing for missing files
            restrict: Refuse paths that resolve outside base_path
            block_size: Read size while streaming a file
        """
        self.base_path: Path = Path(base_path or os.getcwd()).resolve()
        self.max_size: int | None = max_size
        self.missing_ok: bool = missing_ok
        self.restrict: bool = restrict
        self.block_size: int = block_size

    def path_resolve(self: Self, filename: str) -> Path:
        """Map a placeholder filename to an absolute path.

        Raises:
            ResolverError: If the path escapes the base directory
        """
        path: Path = (self.base_path / Path(filename).expanduser()).resolve()

        # Path traversal check
        if self.restrict and not path.is_relative_to(self.base_path):
            msg: str = f"Access denied - path outside base directory: {path}"
            LOG(msg)
            raise ResolverError(msg, filename)
        return path

    async def resolve(self: Self, filename: str) -> Replacement:
        """Check the file and return a stream of its contents.

        Raises:
            ResolverError: For empty names, refused, missing, unreadable or
                           oversized files
        """
        if not filename:
            raise ResolverError("Empty filename in placeholder", filename)

        path: Path = self.path_resolve(filename)

        if not path.is_file():
            if self.missing_ok:
                LOG(f"File not found, substituting nothing: {path}")
                return None
            msg: str = f"File not found: {path}"
            LOG(msg)
            raise ResolverError(msg, filename)

        if not os.access(path, os.R_OK):
            msg = f"File not readable: {path}"
            LOG(msg)
            raise ResolverError(msg, filename)

        if self.max_size is not None:
            size: int = path.stat().st_size
            if size > self.max_size:
                msg = f"File too large: {path} ({size} bytes)"
                LOG(msg)
                raise ResolverError(msg, filename)

        return self._blocks(path)

    async def _blocks(self: Self, path: Path) -> AsyncIterator[bytes]:
        with open(path, "rb") as f:
            while True:
                block: bytes = await asyncio.to_thread(f.read, self.block_size)
                if not block:
                    break
                yield block
