"""In-memory file handle that reports a fixed modification time."""
from __future__ import annotations

import io
import threading
from datetime import datetime

from uifs.errors import ContentReadError
from uifs.protocols import File, FileInfo


class BuildTimeFileInfo:
    """FileInfo decoration that reports ``build_time`` as the modification time.

    Every other attribute is read from the wrapped metadata.
    """

    __slots__ = ("_info", "_build_time")

    def __init__(self, info: FileInfo, build_time: datetime) -> None:
        self._info = info
        self._build_time = build_time

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def size(self) -> int:
        return self._info.size

    @property
    def mode(self) -> int:
        return self._info.mode

    @property
    def is_dir(self) -> bool:
        return self._info.is_dir

    @property
    def mtime(self) -> datetime:
        return self._build_time

    def __repr__(self) -> str:
        return f"BuildTimeFileInfo(name={self.name!r}, size={self.size}, mtime={self._build_time.isoformat()})"


class EmbeddedFile:
    """Wraps an open file, buffering its whole content on construction.

    The wrapper takes ownership of ``file``: ``close()`` is forwarded to it.
    Reads and seeks share one lock so concurrent callers never observe a
    torn position.

    Two conventions differ from ``io.RawIOBase``:

    - ``seek(offset, SEEK_END)`` lands on ``len(content) - offset``, i.e. the
      offset is a positive distance back from the end.
    - seeks never fail; the result is clamped into ``[0, len(content)]``.
      Reading at the end returns ``b""``.
    """

    def __init__(self, file: File, build_time: datetime) -> None:
        self._file = file
        self._build_time = build_time
        self._lock = threading.Lock()
        self._pos = 0
        try:
            self._content = bytes(file.read())
        except Exception as exc:
            raise ContentReadError(f"reading file content: {exc}") from exc

    @property
    def content(self) -> bytes:
        return self._content

    def stat(self) -> BuildTimeFileInfo:
        return BuildTimeFileInfo(self._file.stat(), self._build_time)

    def close(self) -> None:
        self._file.close()

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        with self._lock:
            return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        with self._lock:
            return self._seek_unlocked(offset, whence)

    def _seek_unlocked(self, offset: int, whence: int) -> int:
        size = len(self._content)
        pos = 0
        if whence == io.SEEK_SET:
            pos = offset
        elif whence == io.SEEK_CUR:
            pos = self._pos + offset
        elif whence == io.SEEK_END:
            pos = size - offset

        self._pos = min(max(pos, 0), size)
        return self._pos

    def _take(self, size: int) -> memoryview:
        start = self._pos
        end = self._seek_unlocked(size, io.SEEK_CUR)
        return memoryview(self._content)[start:end]

    def read(self, size: int | None = -1) -> bytes:
        """Return up to ``size`` bytes from the current position (all remaining when negative)."""
        with self._lock:
            if size is None or size < 0:
                size = len(self._content)
            return self._take(size).tobytes()

    def readinto(self, buffer) -> int:
        """Copy up to ``len(buffer)`` bytes into ``buffer``; returns the count."""
        target = memoryview(buffer).cast("B")
        with self._lock:
            window = self._take(len(target))
            n = len(window)
            target[:n] = window
            return n

    def __enter__(self) -> EmbeddedFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"EmbeddedFile(size={len(self._content)}, pos={self._pos})"
