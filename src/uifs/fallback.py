"""Filesystem wrapper that serves a fallback document for missing paths."""
from __future__ import annotations

import logging
import posixpath
from datetime import datetime

from uifs.embedded import EmbeddedFile
from uifs.errors import FileStatError
from uifs.protocols import File, FileSystem

logger = logging.getLogger(__name__)


def join_path(*elems: str) -> str:
    """Join path elements with "/", skipping empty ones, and clean the result.

    Joining only empty elements yields ``""`` (the bundle root).
    """
    joined = "/".join(e for e in elems if e)
    if not joined:
        return ""
    return posixpath.normpath(joined)


class FallbackFS:
    """Wraps a filesystem for serving a single-page application.

    - every path is looked up under ``prefix``;
    - a path that does not exist is replaced by ``fallback_path``;
    - regular files come back as :class:`EmbeddedFile` reporting
      ``build_time`` as their modification time, directories come back
      untouched.

    Instances hold no mutable state and can be shared between threads.
    """

    def __init__(self, fs: FileSystem, prefix: str, fallback: str, build_time: datetime) -> None:
        self._fs = fs
        self._prefix = prefix
        self._fallback = join_path(prefix, fallback)
        self._build_time = build_time

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def fallback_path(self) -> str:
        return self._fallback

    @property
    def build_time(self) -> datetime:
        return self._build_time

    def open(self, path: str) -> File:
        target = join_path(self._prefix, path)
        try:
            file = self._fs.open(target)
        except FileNotFoundError:
            logger.debug("%r not found, serving %r", target, self._fallback)
            file = self._fs.open(self._fallback)

        try:
            info = file.stat()
        except Exception as exc:
            file.close()
            raise FileStatError(f"stating file: {exc}") from exc
        if info.is_dir:
            return file

        try:
            return EmbeddedFile(file, self._build_time)
        except Exception:
            file.close()
            raise

    def __repr__(self) -> str:
        return f"FallbackFS(prefix={self._prefix!r}, fallback={self._fallback!r})"
