"""Serve a single-page application bundle via CherryPy."""
from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

import cherrypy
from cherrypy.lib import cptools, httputil, static

from uifs.config import Settings, build_filesystem
from uifs.fallback import join_path
from uifs.protocols import FileSystem

DIRECTORY_INDEX = "index.html"


def _content_type(name: str) -> str:
    """Guess a Content-Type from a file name."""
    ctype, _ = mimetypes.guess_type(name)
    return ctype or "application/octet-stream"


class WebApp:
    """Serves files opened through a filesystem.

    Behavior:
    - If the requested path is a file, serve it.
    - If it is a directory, serve its index.html.
    - Missing paths are the filesystem's business (FallbackFS turns them
      into the SPA shell).
    """

    def __init__(self, fs: FileSystem) -> None:
        """Create the web app handler for an asset filesystem."""
        self.fs = fs

    @cherrypy.expose
    def index(self):
        """Serve the bundle root."""
        return self._serve("")

    @cherrypy.expose
    def default(self, *args, **kwargs):
        """Serve the asset addressed by the request path."""
        return self._serve("/".join(args))

    def _open(self, path: str):
        try:
            return self.fs.open(path)
        except FileNotFoundError:
            raise cherrypy.NotFound()
        except PermissionError:
            raise cherrypy.HTTPError(403)

    def _open_file(self, path: str):
        """Open a file, descending once into a directory's index document."""
        for candidate in (path, join_path(path, DIRECTORY_INDEX)):
            handle = self._open(candidate)
            try:
                info = handle.stat()
            except Exception:
                handle.close()
                raise
            if not info.is_dir:
                return handle, info
            handle.close()
        raise cherrypy.NotFound()

    def _serve(self, path: str):
        handle, info = self._open_file(path)
        # the body may stream after this returns
        cherrypy.serving.request.hooks.attach("on_end_request", handle.close)

        response = cherrypy.serving.response
        response.headers["Last-Modified"] = httputil.HTTPDate(info.mtime.timestamp())
        # 304 when If-Modified-Since matches
        cptools.validate_since()
        # Range and Content-Length handling; seeks the handle for partial content
        return static._serve_fileobj(handle, _content_type(info.name), info.size)


def app_config() -> dict[str, dict[str, Any]]:
    """CherryPy application config for a mounted WebApp."""
    return {
        "/": {
            "tools.etags.on": True,
            "tools.etags.autotags": True,
        }
    }


def handler(bundle: FileSystem | str | Path | None = None, settings: Settings | None = None, **overrides: Any) -> WebApp:
    """Build a WebApp over a FallbackFS configured from settings plus overrides."""
    return WebApp(build_filesystem(bundle, settings, **overrides))


def mount(
    bundle: FileSystem | str | Path | None = None,
    script_name: str = "",
    settings: Settings | None = None,
    **overrides: Any,
) -> cherrypy.Application:
    """Mount the SPA handler on the CherryPy tree."""
    app = handler(bundle, settings, **overrides)
    cherrypy.log(f"serving {app.fs!r} at {script_name or '/'}", "UIFS")
    return cherrypy.tree.mount(app, script_name, config=app_config())
