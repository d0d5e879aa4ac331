"""Exceptions raised by uifs."""
from __future__ import annotations


class UIFSError(Exception):
    """Base class for errors raised by this package."""


class ContentReadError(UIFSError, OSError):
    """Reading a file's content while wrapping it failed."""


class FileStatError(UIFSError, OSError):
    """Stating a freshly opened handle failed."""


class ConfigurationError(UIFSError, ValueError):
    """A bundle location could not be turned into a filesystem."""
