"""Registry use cases: validate submitted sources, load, save, introspect."""

from __future__ import annotations

import threading

from cms.core.config import Settings
from cms.core.errors import InvalidPayloadError, NotFoundError, StoreError
from cms.domain.registry import ArticleRegistry, check_markers
from cms.repositories.registry_store import RegistryStore, RegistryWriteResult


class RegistryService:
    """Validates registry payloads and persists them through RegistryStore."""

    def __init__(self, store: RegistryStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings
        # request handlers run in a threadpool; every registry write and
        # load-modify-save cycle holds this lock
        self.lock = threading.RLock()

    def _registry_options(self) -> dict:
        return {
            "code_prefix": self.settings.code_prefix,
            "code_width": self.settings.code_width,
            "base_language": self.settings.base_language,
            "articles_url": self.settings.articles_url,
        }

    def new_registry(self, articles: dict | None = None) -> ArticleRegistry:
        return ArticleRegistry(articles, **self._registry_options())

    def parse(self, content: object) -> ArticleRegistry:
        """
        Validate a full registry source and return its decoded registry.

        Size floor, both textual markers and the decoded records are checked;
        the first failure raises InvalidPayloadError.
        """
        if not isinstance(content, str) or len(content) < self.settings.min_content_length:
            raise InvalidPayloadError("Invalid payload: missing or too short content")
        check_markers(content)
        registry = ArticleRegistry.from_source(content, **self._registry_options())
        registry.validate(self.settings.languages)
        return registry

    def load(self) -> ArticleRegistry:
        """Current registry; an empty one when no registry file exists yet."""
        try:
            content = self.store.read()
        except NotFoundError:
            return self.new_registry()
        try:
            return ArticleRegistry.from_source(content, **self._registry_options())
        except InvalidPayloadError as exc:
            raise StoreError(f"registry file is unreadable: {exc.message}")

    def save_source(self, content: object) -> RegistryWriteResult:
        self.parse(content)
        with self.lock:
            return self.store.write(content)  # type: ignore[arg-type]

    def save(self, registry: ArticleRegistry) -> RegistryWriteResult:
        registry.validate(self.settings.languages)
        with self.lock:
            return self.store.write(registry.to_source())

    def status(self) -> dict:
        return self.store.status()

    def next_code(self) -> str:
        return self.load().next_code()

    def backups(self) -> list[str]:
        return [p.name for p in self.store.list_backups()]
