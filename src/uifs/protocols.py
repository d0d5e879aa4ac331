"""Filesystem capabilities consumed and provided by the adapter layer.

Anything with an ``open(path)`` method that raises ``FileNotFoundError`` for
missing paths can be wrapped; no base class is required.
"""
from __future__ import annotations

import stat
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileInfo(Protocol):
    """Metadata reported by an open file."""

    @property
    def name(self) -> str: ...

    @property
    def size(self) -> int: ...

    @property
    def mode(self) -> int: ...

    @property
    def mtime(self) -> datetime: ...

    @property
    def is_dir(self) -> bool: ...


@runtime_checkable
class File(Protocol):
    """An open file or directory handle."""

    def read(self, size: int = -1) -> bytes: ...

    def stat(self) -> FileInfo: ...

    def close(self) -> None: ...


@runtime_checkable
class FileSystem(Protocol):
    """Open-by-path capability.

    ``open`` must raise ``FileNotFoundError`` (or a subclass) when the path
    does not exist, so callers can tell a miss from any other failure.
    """

    def open(self, path: str) -> File: ...


@dataclass(frozen=True)
class StaticFileInfo:
    """Plain immutable FileInfo record used by the bundle adapters."""

    name: str
    size: int
    mode: int
    mtime: datetime
    is_dir: bool = False

    @classmethod
    def for_file(cls, name: str, size: int, mtime: datetime) -> StaticFileInfo:
        return cls(name=name, size=size, mode=stat.S_IFREG | 0o444, mtime=mtime)

    @classmethod
    def for_dir(cls, name: str, mtime: datetime) -> StaticFileInfo:
        return cls(name=name, size=0, mode=stat.S_IFDIR | 0o555, mtime=mtime, is_dir=True)
