"""Serve single-page application bundles with a fallback document and a fixed build time."""
from __future__ import annotations

from uifs.bundle import DirectoryFS, PackageFS, ZipFS, open_bundle
from uifs.config import Settings, build_filesystem
from uifs.embedded import BuildTimeFileInfo, EmbeddedFile
from uifs.errors import ConfigurationError, ContentReadError, FileStatError, UIFSError
from uifs.fallback import FallbackFS, join_path
from uifs.protocols import File, FileInfo, FileSystem, StaticFileInfo

__all__ = [
    "BuildTimeFileInfo",
    "ConfigurationError",
    "ContentReadError",
    "DirectoryFS",
    "EmbeddedFile",
    "FallbackFS",
    "File",
    "FileInfo",
    "FileStatError",
    "FileSystem",
    "PackageFS",
    "Settings",
    "StaticFileInfo",
    "UIFSError",
    "ZipFS",
    "build_filesystem",
    "join_path",
    "open_bundle",
]
