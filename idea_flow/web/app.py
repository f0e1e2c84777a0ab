"""App module.

This module belongs to `idea_flow.web` in the idea-flow codebase.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from idea_flow.settings import ServerSettings, get_server_settings
from idea_flow.storage import SnapshotNotFoundError, SnapshotStore, SnapshotStoreError
from idea_flow.web.api import backup_flow
from idea_flow.web.contracts import APIError

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=APIError(error=message).model_dump())


async def _store_error_handler(request: Request, exc: SnapshotStoreError) -> JSONResponse:
    if isinstance(exc, SnapshotNotFoundError):
        logger.info("[backup] not found: %s %s (%s)", request.method, request.url.path, exc)
        return _error_response(404, "Backup not found")
    logger.error("[backup] %s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return _error_response(500, str(exc))


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[http] %s %s failed: %s", request.method, request.url.path, exc.detail)
    return _error_response(exc.status_code, str(exc.detail))


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("[http] %s %s crashed: %s", request.method, request.url.path, exc, exc_info=exc)
    return _error_response(500, str(exc) or exc.__class__.__name__)


def create_app(settings: ServerSettings | None = None, store: SnapshotStore | None = None) -> FastAPI:
    """Build the backup server; the store is created here, once per app."""
    settings = settings or get_server_settings()
    if store is None:
        store = SnapshotStore(settings.backups_dir, keep_count=settings.keep_count)

    app = FastAPI(title="Idea Flow Server")
    app.state.settings = settings
    app.state.store = store

    app.add_exception_handler(SnapshotStoreError, _store_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(backup_flow.router)

    # Mounted last: "/" would otherwise shadow the API routes.
    static_dir = settings.static_dir
    if static_dir is not None and static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    return app
