"""Application launcher for idea-flow."""

from __future__ import annotations

import logging
import socket

from idea_flow.settings import get_server_settings
from idea_flow.web.app import create_app

logger = logging.getLogger(__name__)


def _pick_available_port(host: str, base_port: int, tries: int = 20) -> int:
    """Find the first bindable port starting at `base_port`."""
    for i in range(tries):
        port = base_port + i
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(0.2)
            try:
                sock.bind((host, port))
                return port
            except OSError:
                continue
    return base_port


def main() -> int:
    """Launch the backup server."""
    settings = get_server_settings()
    port = _pick_available_port(settings.host, settings.port)
    if port != settings.port:
        logger.warning("port %s is busy, using %s", settings.port, port)

    import uvicorn

    app = create_app(settings)
    logger.info("Idea Flow Server: http://%s:%s", settings.host, port)
    logger.info("Backups: %s (keeping %s)", settings.backups_dir, settings.keep_count)
    if settings.static_dir is not None:
        logger.info("Static files: %s", settings.static_dir)
    uvicorn.run(app, host=settings.host, port=port, reload=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
