"""
In-memory article registry with the accessor API the editor relies on.

The durable artifact is a JavaScript file: a ``const articlesDB = {...};``
data map followed by the ``const ArticlesDB = {...};`` helper block. This
module parses the data map out of that file, exposes the same operations over
it in Python and renders the artifact back through a Jinja2 template.
"""
from __future__ import annotations

import copy
import json
import logging
import re
from functools import lru_cache
from typing import Any, Iterable, Optional

from jinja2 import Environment, PackageLoader

from cms.core.errors import InvalidPayloadError
from cms.domain.articles import format_code, parse_code_number, validate_articles_map

logger = logging.getLogger("cms.registry")

DATA_MARKER_RE = re.compile(r"const\s+articlesDB\s*=\s*\{[\s\S]*?\};", re.M)
HELPER_MARKER_RE = re.compile(r"const\s+ArticlesDB\s*=\s*\{[\s\S]*?\};", re.M)
DATA_START_RE = re.compile(r"const\s+articlesDB\s*=\s*")
TEMPLATE_NAME = "articles-db.js.j2"


@lru_cache
def _template_env() -> Environment:
    return Environment(
        loader=PackageLoader("cms", "templates"),
        autoescape=False,
        keep_trailing_newline=True,
    )


def check_markers(source: str) -> None:
    """Reject sources that do not carry both the data map and the helper block."""
    if not DATA_MARKER_RE.search(source):
        raise InvalidPayloadError("Validation failed: content does not contain a valid articlesDB object")
    if not HELPER_MARKER_RE.search(source):
        raise InvalidPayloadError("Validation failed: content does not contain a valid ArticlesDB helper")


def extract_articles(source: str) -> dict:
    """Decode the JSON object assigned to ``articlesDB`` in a registry source."""
    match = DATA_START_RE.search(source or "")
    if not match:
        raise InvalidPayloadError("Validation failed: content does not contain a valid articlesDB object")
    try:
        data, _end = json.JSONDecoder().raw_decode(source, match.end())
    except json.JSONDecodeError as exc:
        raise InvalidPayloadError(f"Validation failed: articlesDB is not valid JSON ({exc.msg} at char {exc.pos})")
    if not isinstance(data, dict):
        raise InvalidPayloadError("Validation failed: articlesDB must be an object")
    return data


class ArticleRegistry:
    """Map of article code -> record plus the helper operations over it."""

    def __init__(
        self,
        articles: Optional[dict] = None,
        *,
        code_prefix: str = "ART",
        code_width: int = 3,
        base_language: str = "en",
        articles_url: str = "/blog/articles",
    ) -> None:
        self._articles: dict[str, dict] = dict(articles or {})
        self.code_prefix = code_prefix
        self.code_width = code_width
        self.base_language = base_language
        self.articles_url = articles_url.rstrip("/")

    @classmethod
    def from_source(cls, source: str, **options: Any) -> "ArticleRegistry":
        return cls(extract_articles(source), **options)

    def __contains__(self, code: object) -> bool:
        return code in self._articles

    def __len__(self) -> int:
        return len(self._articles)

    def as_dict(self) -> dict[str, dict]:
        return copy.deepcopy(self._articles)

    # -------------------------- queries --------------------------
    def get_all(self) -> list[dict]:
        return list(self._articles.values())

    def get_by_code(self, code: str) -> Optional[dict]:
        return self._articles.get(code)

    def get_by_category(self, category: str) -> list[dict]:
        return [a for a in self._articles.values() if a.get("category") == category]

    def get_by_category_and_language(self, category: str, lang: str) -> list[dict]:
        return [
            a
            for a in self._articles.values()
            if a.get("category") == category and lang in (a.get("availableLanguages") or [])
        ]

    def is_available_in_language(self, code: str, lang: str) -> bool:
        article = self._articles.get(code)
        return bool(article) and lang in (article.get("availableLanguages") or [])

    def available_languages(self, code: str) -> list[str]:
        article = self._articles.get(code)
        if article and article.get("availableLanguages"):
            return list(article["availableLanguages"])
        return [self.base_language]

    def article_url(self, code: str, lang: Optional[str] = None) -> Optional[str]:
        if code not in self._articles:
            return None
        return f"{self.articles_url}/{code}-{lang or self.base_language}.html"

    def blog_url(self, lang: Optional[str] = None) -> str:
        return "/blog.html"

    def next_code(self) -> str:
        numbers = [parse_code_number(code, self.code_prefix) for code in self._articles]
        highest = max((n for n in numbers if n is not None), default=0)
        return format_code(highest + 1, self.code_prefix, self.code_width)

    # -------------------------- mutations --------------------------
    def add(self, article: dict) -> dict:
        self._articles[article["code"]] = article
        return article

    def update(self, code: str, updates: dict) -> Optional[dict]:
        current = self._articles.get(code)
        if current is None:
            return None
        merged = {**current, **updates}
        self._articles[code] = merged
        return merged

    def delete(self, code: str) -> Optional[dict]:
        return self._articles.pop(code, None)

    # -------------------------- serialization --------------------------
    def export_json(self) -> str:
        return json.dumps(self._articles, ensure_ascii=False, indent=2)

    def import_json(self, text: str) -> bool:
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            logger.warning("Failed to import registry JSON: %s", exc)
            return False
        if not isinstance(data, dict):
            logger.warning("Failed to import registry JSON: top-level value is not an object")
            return False
        self._articles.update(data)
        return True

    def validate(self, languages: Iterable[str]) -> None:
        validate_articles_map(self._articles, languages=languages, base_language=self.base_language)

    def to_source(self) -> str:
        template = _template_env().get_template(TEMPLATE_NAME)
        return template.render(
            articles_json=self.export_json(),
            code_prefix=self.code_prefix,
            code_width=self.code_width,
            base_language=self.base_language,
            articles_url=self.articles_url,
        )
