"""CherryPy entrypoint.

- Serves the configured SPA bundle at /
- Paths missing from the bundle get the fallback document
"""
from __future__ import annotations

import cherrypy

from uifs.config import Settings
from uifs.web import mount


def configure(settings: Settings) -> None:
    """Apply server-wide CherryPy configuration."""
    cherrypy.config.update({
        "server.socket_host": settings.app_host,
        "server.socket_port": settings.app_port,
        "tools.trailing_slash.on": False,
        "engine.autoreload.on": settings.is_dev,
        "log.screen": True,
    })


def serve(settings: Settings) -> None:
    """Mount the bundle and block on the CherryPy engine."""
    configure(settings)
    mount(settings=settings)
    cherrypy.log(f"build time {settings.build_time.isoformat()}", "UIFS")

    cherrypy.engine.start()
    cherrypy.engine.block()


def main() -> None:
    serve(Settings())


if __name__ == "__main__":
    main()
