from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cms.core.errors import NotFoundError, StoreError
from cms.domain.payloads import SaveDatabasePayload
from cms.services.registry_service import RegistryService

router = APIRouter(prefix="/api", tags=["registry"])
logger = logging.getLogger("cms.routers.registry")


def _get_registry_service(request: Request) -> RegistryService:
    svc = getattr(getattr(request.app, "state", None), "registry_service", None)
    if not svc:
        raise RuntimeError("RegistryService not configured")
    return svc


def _error_response(err: StoreError) -> JSONResponse:
    return JSONResponse({"success": False, "error": err.message}, status_code=err.status_code)


@router.post("/save-database")
def save_database(payload: SaveDatabasePayload, request: Request):
    svc = _get_registry_service(request)
    try:
        result = svc.save_source(payload.content)
    except StoreError as exc:
        logger.error("Error updating database: %s", exc.message)
        return _error_response(exc)
    return {
        "success": True,
        "message": "Database updated successfully",
        "timestamp": result.timestamp,
        "backup": result.backup.name if result.backup else None,
    }


@router.get("/database-status")
def database_status(request: Request):
    svc = _get_registry_service(request)
    try:
        return svc.status()
    except NotFoundError as exc:
        return JSONResponse({"exists": False, "error": exc.message}, status_code=404)
    except StoreError as exc:
        return JSONResponse({"exists": False, "error": exc.message}, status_code=exc.status_code)


@router.get("/registry")
def registry_contents(request: Request):
    svc = _get_registry_service(request)
    try:
        registry = svc.load()
    except StoreError as exc:
        return _error_response(exc)
    return {"success": True, "count": len(registry), "articles": registry.as_dict()}


@router.get("/registry/next-code")
def registry_next_code(request: Request):
    svc = _get_registry_service(request)
    try:
        return {"code": svc.next_code()}
    except StoreError as exc:
        return _error_response(exc)


@router.get("/backups")
def registry_backups(request: Request):
    svc = _get_registry_service(request)
    return {"backups": svc.backups()}
