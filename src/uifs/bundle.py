"""Read-only filesystems over common asset bundle layouts.

- :class:`DirectoryFS` serves a build output directory on disk.
- :class:`ZipFS` serves the members of a zip archive.
- :class:`PackageFS` serves package data shipped inside an installed
  Python package. Package resources carry no timestamps, so every entry
  reports the epoch as its modification time.
"""
from __future__ import annotations

import errno
import io
import logging
import os
import posixpath
import zipfile
from datetime import datetime, timezone
from importlib import resources
from pathlib import Path

from uifs.errors import ConfigurationError
from uifs.protocols import File, FileSystem, StaticFileInfo

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
PACKAGE_SCHEME = "pkg:"


def _not_found(path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)


def _clean(path: str) -> str:
    """Normalize a bundle path; ``""`` is the root. Paths leaving the root are refused."""
    cleaned = posixpath.normpath(path) if path else "."
    if cleaned.startswith("/") or cleaned == ".." or cleaned.startswith("../"):
        raise PermissionError(errno.EACCES, "path escapes bundle root", path)
    return "" if cleaned == "." else cleaned


def _base_name(path: str) -> str:
    return posixpath.basename(path) or "."


class _Directory:
    """Handle returned for directories: it has metadata but no content."""

    def __init__(self, info: StaticFileInfo) -> None:
        self._info = info

    def read(self, size: int = -1) -> bytes:
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), self._info.name)

    def stat(self) -> StaticFileInfo:
        return self._info

    def close(self) -> None:
        pass


class _StreamFile:
    """Regular file backed by a binary stream."""

    def __init__(self, stream, info: StaticFileInfo) -> None:
        self._stream = stream
        self._info = info

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def stat(self) -> StaticFileInfo:
        return self._info

    def close(self) -> None:
        self._stream.close()


class _OSFile:
    """Regular file on disk; stat() queries the open descriptor."""

    def __init__(self, path: str, name: str) -> None:
        self._name = name
        self._fh = open(path, "rb")

    def read(self, size: int = -1) -> bytes:
        return self._fh.read(size)

    def stat(self) -> StaticFileInfo:
        st = os.fstat(self._fh.fileno())
        return StaticFileInfo(
            name=self._name,
            size=st.st_size,
            mode=st.st_mode,
            mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def close(self) -> None:
        self._fh.close()


class DirectoryFS:
    """Serves files below ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def open(self, path: str) -> File:
        rel = _clean(path)
        full = (self.root / rel).resolve() if rel else self.root
        # symlinks may point outside the root
        if full != self.root and self.root not in full.parents:
            raise PermissionError(errno.EACCES, "path escapes bundle root", path)
        try:
            if full.is_dir():
                st = full.stat()
                return _Directory(StaticFileInfo(
                    name=_base_name(rel),
                    size=st.st_size,
                    mode=st.st_mode,
                    mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    is_dir=True,
                ))
            return _OSFile(str(full), _base_name(rel))
        except NotADirectoryError:
            # "file.txt/child" does not exist
            raise _not_found(path) from None

    def __repr__(self) -> str:
        return f"DirectoryFS({str(self.root)!r})"


class ZipFS:
    """Serves the members of a zip archive.

    Directories are the explicit ``name/`` entries plus every parent of a
    member; implied directories report the epoch as their modification time.
    """

    def __init__(self, archive: str | Path | zipfile.ZipFile) -> None:
        if isinstance(archive, zipfile.ZipFile):
            self._zip = archive
            self._owned = False
        else:
            self._zip = zipfile.ZipFile(archive)
            self._owned = True

        self._files: dict[str, zipfile.ZipInfo] = {}
        self._dirs: dict[str, zipfile.ZipInfo | None] = {"": None}
        for info in self._zip.infolist():
            name = info.filename.rstrip("/")
            if info.is_dir():
                self._dirs[name] = info
            else:
                self._files[name] = info
            parent = posixpath.dirname(name)
            while parent and parent not in self._dirs:
                self._dirs[parent] = None
                parent = posixpath.dirname(parent)

    @staticmethod
    def _mtime(info: zipfile.ZipInfo | None) -> datetime:
        if info is None:
            return EPOCH
        return datetime(*info.date_time, tzinfo=timezone.utc)

    def open(self, path: str) -> File:
        rel = _clean(path)
        info = self._files.get(rel)
        if info is not None:
            return _StreamFile(
                self._zip.open(info),
                StaticFileInfo.for_file(_base_name(rel), info.file_size, self._mtime(info)),
            )
        if rel in self._dirs:
            return _Directory(StaticFileInfo.for_dir(_base_name(rel), self._mtime(self._dirs[rel])))
        raise _not_found(path)

    def close(self) -> None:
        if self._owned:
            self._zip.close()

    def __repr__(self) -> str:
        return f"ZipFS({self._zip.filename!r})"


class PackageFS:
    """Serves resources of an installed package, optionally below ``root``."""

    def __init__(self, package: str, root: str = "") -> None:
        self.package = package
        self._root = resources.files(package)
        for part in _clean(root).split("/"):
            if part:
                self._root = self._root / part

    def open(self, path: str) -> File:
        rel = _clean(path)
        node = self._root
        for part in rel.split("/"):
            if part:
                node = node / part

        if node.is_dir():
            return _Directory(StaticFileInfo.for_dir(_base_name(rel), EPOCH))
        if node.is_file():
            data = node.read_bytes()
            return _StreamFile(io.BytesIO(data), StaticFileInfo.for_file(_base_name(rel), len(data), EPOCH))
        raise _not_found(path)

    def __repr__(self) -> str:
        return f"PackageFS({self.package!r})"


def open_bundle(location: str | Path) -> FileSystem:
    """Return a filesystem for a bundle location.

    ``pkg:<package>[/<subdir>]`` selects package data, an existing directory
    a :class:`DirectoryFS`, a zip file a :class:`ZipFS`.
    """
    if isinstance(location, str) and location.startswith(PACKAGE_SCHEME):
        package, _, subdir = location[len(PACKAGE_SCHEME):].partition("/")
        if not package:
            raise ConfigurationError(f"missing package name in bundle location: {location!r}")
        try:
            fs: FileSystem = PackageFS(package, subdir)
        except ModuleNotFoundError as exc:
            raise ConfigurationError(f"bundle package not importable: {package}") from exc
    else:
        path = Path(location).expanduser()
        if path.is_dir():
            fs = DirectoryFS(path)
        elif path.is_file() and zipfile.is_zipfile(path):
            fs = ZipFS(path)
        elif path.exists():
            raise ConfigurationError(f"unsupported bundle (not a directory or zip archive): {path}")
        else:
            raise ConfigurationError(f"bundle not found: {path}")

    logger.debug("opened bundle %s as %r", location, fs)
    return fs
