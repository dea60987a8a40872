"""Storage backend abstraction.

Stores address files by path strings and only need four operations:
read, write (creating parent directories, overwriting), list a directory
and delete.  Backends report a missing path with FileNotFoundError and a
denied one with PermissionError; other OSErrors pass through unchanged so
that stores can wrap them with path context.

Implementations:
    LocalFileBackend -- the real filesystem; blocking calls run in a worker
                        thread so the event loop is never blocked.
    MemoryBackend    -- in-process dict, used by tests and as the embedded
                        key-value reference.
"""

from __future__ import annotations

import asyncio
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path


class StorageBackend(ABC):
    """Abstract async key/path store used by SnapshotStore and ChangeLogStore."""

    @abstractmethod
    async def read_text(self, path: str) -> str:
        """Return the full text stored at *path*.

        Raises:
            FileNotFoundError: nothing is stored at *path*.
            PermissionError:   access denied.
        """

    @abstractmethod
    async def write_text(self, path: str, text: str) -> None:
        """Store *text* at *path*, replacing existing content and creating parents."""

    @abstractmethod
    async def list_dir(self, path: str) -> list[str]:
        """Return the names of entries directly under *path*.

        Raises:
            FileNotFoundError: the directory does not exist.
            PermissionError:   access denied.
        """

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the file at *path*."""


class LocalFileBackend(StorageBackend):
    """Filesystem backend using pathlib, offloaded with asyncio.to_thread."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def read_text(self, path: str) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding=self._encoding)

    async def write_text(self, path: str, text: str) -> None:
        def _write() -> None:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding=self._encoding)

        await asyncio.to_thread(_write)

    async def list_dir(self, path: str) -> list[str]:
        def _list() -> list[str]:
            target = Path(path)
            if not target.exists():
                raise FileNotFoundError(path)
            if not target.is_dir():
                raise NotADirectoryError(path)
            return [entry.name for entry in target.iterdir()]

        return await asyncio.to_thread(_list)

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(Path(path).unlink)


class MemoryBackend(StorageBackend):
    """Dict-backed backend keyed by normalised POSIX paths.

    Directories are implicit: a directory exists while at least one file
    lives below it.  Paths listed in ``denied`` raise PermissionError on
    every operation, which lets tests exercise permission handling.
    """

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.denied: set[str] = set()

    @staticmethod
    def _key(path: str) -> str:
        return posixpath.normpath(str(path).replace("\\", "/"))

    def _check(self, key: str) -> None:
        if key in self.denied:
            raise PermissionError(f"Permission denied: {key}")

    async def read_text(self, path: str) -> str:
        key = self._key(path)
        self._check(key)
        try:
            return self.files[key]
        except KeyError:
            raise FileNotFoundError(path) from None

    async def write_text(self, path: str, text: str) -> None:
        key = self._key(path)
        self._check(key)
        self._check(posixpath.dirname(key))
        self.files[key] = text

    async def list_dir(self, path: str) -> list[str]:
        key = self._key(path)
        self._check(key)
        prefix = key.rstrip("/") + "/"
        names = {name[len(prefix) :].split("/", 1)[0] for name in self.files if name.startswith(prefix)}
        if not names:
            raise FileNotFoundError(path)
        return sorted(names)

    async def delete(self, path: str) -> None:
        key = self._key(path)
        self._check(key)
        try:
            del self.files[key]
        except KeyError:
            raise FileNotFoundError(path) from None
