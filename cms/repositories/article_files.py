"""Per-language HTML files, one ``{code}-{lang}.html`` per article variant."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional

from cms.core.errors import InvalidPayloadError, PartialWriteError, StoreError
from cms.core.utils import atomic_write_text
from cms.domain.articles import article_file_name, require_code, require_language

logger = logging.getLogger("cms.article_files")


class ArticleFileStore:
    """Atomic write, delete and existence-check helpers over the articles directory."""

    def __init__(
        self,
        directory: Path,
        *,
        url_prefix: str = "/blog/articles",
        languages: Iterable[str] = ("en", "tr", "az", "de"),
        min_length: int = 50,
    ) -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.languages = tuple(languages)
        self.min_length = min_length

    def path_for(self, code: str, lang: str) -> Path:
        return self.directory / article_file_name(code, lang)

    def url_for(self, code: str, lang: str) -> str:
        return f"{self.url_prefix}/{article_file_name(code, lang)}"

    def validate(self, code: str, files: Mapping[str, str]) -> None:
        require_code(code)
        if not isinstance(files, Mapping) or not files:
            raise InvalidPayloadError("Invalid payload: requires code and files map")
        for lang, html in files.items():
            require_language(lang, self.languages)
            if not isinstance(html, str) or len(html) < self.min_length:
                raise InvalidPayloadError(f"Invalid HTML for {lang}")

    def save(self, code: str, files: Mapping[str, str]) -> list[str]:
        """
        Write every language file of an article.

        All payloads are validated before the first write. A write failure
        afterwards raises PartialWriteError; earlier files stay written.
        """
        self.validate(code, files)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"save failed: {exc}")

        written: list[str] = []
        for lang, html in files.items():
            try:
                atomic_write_text(self.path_for(code, lang), html)
            except OSError as exc:
                logger.error("Saving %s failed at %s after %d file(s): %s", code, lang, len(written), exc)
                raise PartialWriteError(f"save failed for {lang} ({article_file_name(code, lang)}): {exc}", lang, written)
            written.append(self.url_for(code, lang))
        logger.info("Saved article %s: %s", code, ", ".join(written))
        return written

    def delete(self, code: str, languages: Optional[Iterable[str]] = None) -> list[str]:
        require_code(code)
        langs = list(languages) if languages else list(self.languages)
        for lang in langs:
            require_language(lang, self.languages)

        deleted: list[str] = []
        for lang in langs:
            try:
                self.path_for(code, lang).unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StoreError(f"delete failed: {exc}")
            deleted.append(self.url_for(code, lang))
        logger.info("Deleted article %s: %s", code, ", ".join(deleted) or "(no files found)")
        return deleted

    def exists(self, code: str, lang: str) -> bool:
        require_code(code)
        require_language(lang, self.languages)
        return self.path_for(code, lang).is_file()

    def list_files(self) -> list[tuple[str, str]]:
        """(code, lang) pairs of every article file on disk, sorted."""
        if not self.directory.is_dir():
            return []
        pairs = []
        for entry in self.directory.glob("*.html"):
            stem = entry.stem
            for lang in self.languages:
                suffix = f"-{lang}"
                if stem.endswith(suffix) and len(stem) > len(suffix):
                    pairs.append((stem[: -len(suffix)], lang))
                    break
        return sorted(pairs)
