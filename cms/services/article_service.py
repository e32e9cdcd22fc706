"""
Article use cases spanning the registry and the per-language HTML files.

The legacy endpoints write each store separately. The composite operations
here keep both stores in step with a fixed order:

upsert: HTML files first, then the registry, then files of dropped languages.
remove: registry entry first, then every language file.

There is no rollback; a failure reports which step stopped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from cms.core.config import Settings
from cms.core.errors import ConflictError, InvalidPayloadError, NotFoundError, StoreError
from cms.domain.articles import require_code, slug_in_use, slugify, validate_record
from cms.domain.payloads import ArticlePayload
from cms.repositories.article_files import ArticleFileStore
from cms.services.registry_service import RegistryService

logger = logging.getLogger("cms.article_service")

MISSING_FILE = "missing_file"
ORPHAN_FILE = "orphan_file"


@dataclass
class UpsertResult:
    code: str
    created: bool
    record: dict
    written: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    backup: Optional[str] = None


@dataclass
class ConsistencyIssue:
    code: str
    lang: str
    problem: str
    path: str


class ArticleService:
    def __init__(self, registry: RegistryService, files: ArticleFileStore, settings: Settings) -> None:
        self.registry = registry
        self.files = files
        self.settings = settings

    # -------------------------- single-store operations --------------------------
    def save_files(self, code: str, files: Mapping[str, str]) -> list[str]:
        return self.files.save(code, files)

    def delete_files(self, code: str, languages: Optional[Iterable[str]] = None) -> list[str]:
        return self.files.delete(code, languages)

    def exists(self, code: str, lang: str) -> bool:
        return self.files.exists(code, lang)

    def get(self, code: str) -> dict:
        record = self.registry.load().get_by_code(code)
        if record is None:
            raise NotFoundError(f"Article {code} not found")
        return record

    # -------------------------- composite operations --------------------------
    def _build_record(self, code: str, payload: ArticlePayload, existing: Optional[dict]) -> dict:
        translations = {}
        for lang, entry in payload.translations.items():
            translations[lang] = {
                "title": entry.title.strip(),
                "excerpt": entry.excerpt,
                "slug": entry.slug.strip() or slugify(entry.title),
            }
        record = dict(existing or {})
        record.update(
            {
                "code": code,
                "category": payload.category,
                "date": payload.date,
                "image": payload.image,
                "availableLanguages": list(payload.available_languages),
                "translations": translations,
            }
        )
        return record

    def upsert(self, payload: ArticlePayload) -> UpsertResult:
        with self.registry.lock:
            return self._upsert(payload)

    def _upsert(self, payload: ArticlePayload) -> UpsertResult:
        registry = self.registry.load()
        code = require_code(payload.code or registry.next_code())
        existing = registry.get_by_code(code)
        record = self._build_record(code, payload, existing)
        validate_record(
            code,
            record,
            languages=self.settings.languages,
            base_language=self.settings.base_language,
        )
        current = registry.as_dict()
        for lang, entry in record["translations"].items():
            if slug_in_use(current, lang, entry["slug"], exclude_code=code):
                raise ConflictError(f"Slug {entry['slug']!r} is already used by another article in {lang}")

        available = record["availableLanguages"]
        extra = [lang for lang in payload.files if lang not in available]
        if extra:
            raise InvalidPayloadError(f"Invalid payload: files for languages not in availableLanguages: {', '.join(extra)}")
        if payload.files:
            self.files.validate(code, payload.files)
        dropped = [lang for lang in (existing or {}).get("availableLanguages") or [] if lang not in available]

        if existing is None:
            registry.add(record)
        else:
            registry.update(code, record)
        # the whole map is rewritten, so records already on disk must pass too
        registry.validate(self.settings.languages)

        written = self.files.save(code, payload.files) if payload.files else []
        try:
            result = self.registry.save(registry)
        except StoreError as exc:
            detail = f"article files written ({', '.join(written)}) but " if written else ""
            raise StoreError(f"{detail}registry update failed: {exc.message}", exc.code, exc.status_code)

        deleted = self.files.delete(code, dropped) if dropped else []
        logger.info("%s article %s", "Updated" if existing else "Created", code)
        return UpsertResult(
            code=code,
            created=existing is None,
            record=record,
            written=written,
            deleted=deleted,
            backup=result.backup.name if result.backup else None,
        )

    def remove(self, code: str) -> list[str]:
        """Delete the registry entry, then all of its language files. Returns deleted file URLs."""
        require_code(code)
        with self.registry.lock:
            registry = self.registry.load()
            if registry.delete(code) is None:
                raise NotFoundError(f"Article {code} not found")
            self.registry.save(registry)
            deleted = self.files.delete(code)
        logger.info("Removed article %s", code)
        return deleted

    def check_consistency(self) -> list[ConsistencyIssue]:
        """Languages listed without a file, and files without a listed language."""
        registry = self.registry.load()
        expected = {
            (record.get("code", ""), lang)
            for record in registry.get_all()
            for lang in record.get("availableLanguages") or []
        }
        on_disk = set(self.files.list_files())
        issues = [
            ConsistencyIssue(code, lang, MISSING_FILE, self.files.url_for(code, lang))
            for code, lang in sorted(expected - on_disk)
        ]
        issues.extend(
            ConsistencyIssue(code, lang, ORPHAN_FILE, self.files.url_for(code, lang))
            for code, lang in sorted(on_disk - expected)
        )
        return issues
