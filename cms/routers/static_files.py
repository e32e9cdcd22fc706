"""Serve the blog's files from the content root for every non-API path."""
from __future__ import annotations

import logging
import stat

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse

from cms.core.errors import ForbiddenPathError
from cms.core.utils import resolve_inside

router = APIRouter(tags=["static"])
logger = logging.getLogger("cms.routers.static")

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def media_type_for(name: str) -> str:
    dot = name.rfind(".")
    if dot < 0:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(name[dot:].lower(), DEFAULT_MIME_TYPE)


@router.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
def serve_static(full_path: str, request: Request):
    settings = request.app.state.settings
    relative = full_path or settings.default_document
    try:
        target = resolve_inside(settings.root_dir, relative)
    except ForbiddenPathError:
        logger.warning("Rejected path outside content root: %s", full_path)
        return PlainTextResponse("403 - Forbidden", status_code=403)
    try:
        mode = target.stat().st_mode
    except FileNotFoundError:
        return PlainTextResponse("404 - File Not Found", status_code=404)
    except OSError as exc:
        logger.error("Failed to stat %s: %s", target, exc)
        return PlainTextResponse("500 - Internal Server Error", status_code=500)
    if not stat.S_ISREG(mode):
        logger.error("Not a regular file: %s", target)
        return PlainTextResponse("500 - Internal Server Error", status_code=500)
    return FileResponse(target, media_type=media_type_for(target.name))
