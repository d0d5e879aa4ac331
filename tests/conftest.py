from __future__ import annotations

import errno
import io
import os
import socket
from datetime import datetime, timezone
from pathlib import Path

import pytest

from uifs.protocols import StaticFileInfo

BUILD_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
ASSET_MTIME = datetime(2021, 3, 4, 5, 6, 7, tzinfo=timezone.utc)

RESPONSE = b"hello"
INDEX = b"<html>"


def populate_bundle(root: Path) -> Path:
    """Write the sample SPA bundle under root/assets."""
    assets = root / "assets"
    (assets / "nested").mkdir(parents=True)
    (assets / "response.txt").write_bytes(RESPONSE)
    (assets / "index.html").write_bytes(INDEX)
    (assets / "app.js").write_bytes(b"console.log('app')")
    (assets / "nested" / "page.css").write_bytes(b"body{}")

    ts = ASSET_MTIME.timestamp()
    for path in [*assets.rglob("*"), assets]:
        os.utime(path, (ts, ts))
    return root


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def bundle_dir(tmp_path):
    return populate_bundle(tmp_path)


class MemoryFile:
    def __init__(self, name: str, data: bytes, fail_read: bool = False, fail_stat: bool = False) -> None:
        self.name = name
        self.closed = False
        self._stream = io.BytesIO(data)
        self._size = len(data)
        self._fail_read = fail_read
        self._fail_stat = fail_stat

    def read(self, size: int = -1) -> bytes:
        if self._fail_read:
            raise OSError(errno.EIO, "disk on fire", self.name)
        return self._stream.read(size)

    def stat(self) -> StaticFileInfo:
        if self._fail_stat:
            raise OSError(errno.EIO, "stat failed", self.name)
        return StaticFileInfo.for_file(self.name, self._size, ASSET_MTIME)

    def close(self) -> None:
        self.closed = True


class MemoryDir:
    def __init__(self, name: str) -> None:
        self.name = name
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        raise IsADirectoryError(self.name)

    def stat(self) -> StaticFileInfo:
        return StaticFileInfo.for_dir(self.name, ASSET_MTIME)

    def close(self) -> None:
        self.closed = True


class MemoryFS:
    """Dict-backed filesystem that records opens and can inject failures."""

    def __init__(self, files=None, dirs=(), errors=None, broken_reads=(), broken_stats=()) -> None:
        self.files = dict(files or {})
        self.dirs = {"", *dirs}
        self.errors = dict(errors or {})
        self.broken_reads = set(broken_reads)
        self.broken_stats = set(broken_stats)
        self.opened: list[str] = []
        self.handles: list = []

    def open(self, path: str):
        self.opened.append(path)
        if path in self.errors:
            raise self.errors[path]
        if path in self.files:
            handle = MemoryFile(
                path,
                self.files[path],
                fail_read=path in self.broken_reads,
                fail_stat=path in self.broken_stats,
            )
        elif path in self.dirs:
            handle = MemoryDir(path)
        else:
            raise FileNotFoundError(errno.ENOENT, "no such file", path)
        self.handles.append(handle)
        return handle


@pytest.fixture
def memory_fs():
    return MemoryFS(
        files={"assets/response.txt": RESPONSE, "assets/index.html": INDEX},
        dirs={"assets"},
    )
