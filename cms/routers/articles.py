from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cms.core.errors import PartialWriteError, StoreError
from cms.domain.payloads import ArticlePayload, DeleteArticlePayload, SaveArticlePayload
from cms.services.article_service import ArticleService

router = APIRouter(prefix="/api", tags=["articles"])
logger = logging.getLogger("cms.routers.articles")


def _get_article_service(request: Request) -> ArticleService:
    svc = getattr(getattr(request.app, "state", None), "article_service", None)
    if not svc:
        raise RuntimeError("ArticleService not configured")
    return svc


def _error_response(err: StoreError, **extra) -> JSONResponse:
    body = {"success": False, "error": err.message}
    body.update(extra)
    return JSONResponse(body, status_code=err.status_code)


@router.post("/save-article")
def save_article(payload: SaveArticlePayload, request: Request):
    svc = _get_article_service(request)
    try:
        written = svc.save_files(payload.code, payload.files)
    except PartialWriteError as exc:
        logger.error("Error saving article %s: %s", payload.code, exc.message)
        return _error_response(exc, language=exc.language, written=exc.written)
    except StoreError as exc:
        logger.error("Error saving article %s: %s", payload.code, exc.message)
        return _error_response(exc)
    return {"success": True, "written": written}


@router.post("/delete-article")
def delete_article(payload: DeleteArticlePayload, request: Request):
    svc = _get_article_service(request)
    try:
        deleted = svc.delete_files(payload.code, payload.languages)
    except StoreError as exc:
        logger.error("Error deleting article %s: %s", payload.code, exc.message)
        return _error_response(exc)
    return {"success": True, "deleted": deleted}


@router.get("/article-exists")
def article_exists(code: str, lang: str, request: Request):
    svc = _get_article_service(request)
    try:
        exists = svc.exists(code, lang)
    except StoreError as exc:
        return _error_response(exc)
    return {"exists": exists, "path": svc.files.url_for(code, lang)}


@router.get("/articles/{code}")
def get_article(code: str, request: Request):
    svc = _get_article_service(request)
    try:
        record = svc.get(code)
    except StoreError as exc:
        return _error_response(exc)
    return {"success": True, "article": record}


@router.post("/articles")
def upsert_article(payload: ArticlePayload, request: Request):
    svc = _get_article_service(request)
    try:
        result = svc.upsert(payload)
    except PartialWriteError as exc:
        logger.error("Error saving article files: %s", exc.message)
        return _error_response(exc, language=exc.language, written=exc.written)
    except StoreError as exc:
        logger.error("Error saving article: %s", exc.message)
        return _error_response(exc)
    return {
        "success": True,
        "code": result.code,
        "created": result.created,
        "article": result.record,
        "written": result.written,
        "deleted": result.deleted,
        "backup": result.backup,
    }


@router.delete("/articles/{code}")
def remove_article(code: str, request: Request):
    svc = _get_article_service(request)
    try:
        deleted = svc.remove(code)
    except StoreError as exc:
        logger.error("Error removing article %s: %s", code, exc.message)
        return _error_response(exc)
    return {"success": True, "code": code, "deleted": deleted}


@router.get("/consistency")
def consistency_report(request: Request):
    svc = _get_article_service(request)
    try:
        issues = svc.check_consistency()
    except StoreError as exc:
        return _error_response(exc)
    return {"consistent": not issues, "issues": [asdict(issue) for issue in issues]}
