import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cms.core.config import Settings, get_settings
from cms.core.logging_utils import setup_logging
from cms.repositories.article_files import ArticleFileStore
from cms.repositories.registry_store import RegistryStore
from cms.routers import articles as articles_router
from cms.routers import registry as registry_router
from cms.routers import static_files as static_files_router
from cms.services.article_service import ArticleService
from cms.services.registry_service import RegistryService

logger = logging.getLogger("cms.app")

API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log every request (method + path) before it is dispatched."""

    async def dispatch(self, request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)


async def _invalid_payload(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        problems.append(f"{loc} {err.get('msg', '')}".strip())
    message = "invalid payload: " + ("; ".join(problems) or "malformed request")
    logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
    return JSONResponse({"success": False, "error": message}, status_code=400)


api_fallback = APIRouter(prefix="/api", tags=["api"])


@api_fallback.options("/{rest:path}", include_in_schema=False)
def api_options(rest: str):
    # preflights carrying Origin + Access-Control-Request-Method are answered by CORSMiddleware
    return Response(status_code=200)


@api_fallback.api_route("/{rest:path}", methods=API_METHODS, include_in_schema=False)
def unknown_api_endpoint(rest: str):
    return JSONResponse({"error": "Unknown API endpoint"}, status_code=404)


def build_services(settings: Settings) -> tuple[RegistryService, ArticleService]:
    registry_service = RegistryService(
        RegistryStore(settings.registry_file, backup_keep=settings.backup_keep),
        settings,
    )
    file_store = ArticleFileStore(
        settings.articles_dir,
        url_prefix=settings.articles_url,
        languages=settings.languages,
        min_length=settings.min_content_length,
    )
    return registry_service, ArticleService(registry_service, file_store, settings)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory compatible with uvicorn --factory; tests pass their own Settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Blog Persistence Service")
    registry_service, article_service = build_services(settings)
    app.state.settings = settings
    app.state.registry_service = registry_service
    app.state.article_service = article_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_METHODS,
        allow_headers=["Content-Type"],
    )
    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(RequestValidationError, _invalid_payload)

    app.include_router(registry_router.router)
    app.include_router(articles_router.router)
    app.include_router(api_fallback)
    app.include_router(static_files_router.router)
    return app
