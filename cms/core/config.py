"""
Configuration helpers for the blog persistence service.

Routers, services and stores receive a Settings instance instead of reading
os.environ directly, so tests can point the whole service at a temp directory.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    root_dir: Path
    registry_file: Path
    articles_dir: Path
    articles_url: str
    backup_keep: int
    languages: tuple[str, ...]
    base_language: str
    code_prefix: str
    code_width: int
    min_content_length: int
    default_document: str
    host: str
    port: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _path(value: str | None, default: Path) -> Path:
        if not value:
            return default
        candidate = Path(value)
        if not candidate.is_absolute():
            candidate = root / candidate
        return candidate

    def _csv(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            return default
        items = tuple(item.strip().lower() for item in value.split(",") if item.strip())
        return items or default

    root = Path(os.getenv("CMS_ROOT_DIR") or os.getcwd()).resolve()
    languages = _csv(os.getenv("CMS_LANGUAGES"), ("en", "tr", "az", "de"))
    base_language = (os.getenv("CMS_BASE_LANGUAGE") or languages[0]).strip().lower()
    if base_language not in languages:
        languages = (base_language,) + languages

    return Settings(
        app_env=(os.getenv("CMS_APP_ENV") or "dev").lower(),
        root_dir=root,
        registry_file=_path(os.getenv("CMS_REGISTRY_FILE"), root / "admin" / "articles-db.js"),
        articles_dir=_path(os.getenv("CMS_ARTICLES_DIR"), root / "blog" / "articles"),
        articles_url=(os.getenv("CMS_ARTICLES_URL") or "/blog/articles").rstrip("/"),
        backup_keep=max(1, _int(os.getenv("CMS_BACKUP_KEEP", "5"), 5)),
        languages=languages,
        base_language=base_language,
        code_prefix=os.getenv("CMS_CODE_PREFIX", "ART"),
        code_width=max(1, _int(os.getenv("CMS_CODE_WIDTH", "3"), 3)),
        min_content_length=max(1, _int(os.getenv("CMS_MIN_CONTENT_LENGTH", "50"), 50)),
        default_document=os.getenv("CMS_DEFAULT_DOCUMENT", "index.html"),
        host=os.getenv("CMS_HOST", "127.0.0.1"),
        port=_int(os.getenv("CMS_PORT", "8000"), 8000),
        log_level=(os.getenv("CMS_LOG_LEVEL") or "INFO").upper(),
    )
