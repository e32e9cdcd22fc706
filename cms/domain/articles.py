"""Domain helpers for article codes, file names and record validation."""
from __future__ import annotations

import re
from datetime import date
from typing import Any, Iterable, Mapping

from cms.core.errors import InvalidPayloadError

SAFE_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")
SLUG_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")
TRANSLATION_FIELDS = ("title", "excerpt", "slug")


def slugify(text: str | None) -> str:
    value = (text or "").strip().lower()
    value = re.sub(r"[^a-z0-9\s-]", "", value)
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def is_valid_slug(value: str | None) -> bool:
    if not value:
        return False
    return bool(SLUG_PATTERN.fullmatch(value))


def is_safe_name(value: str | None) -> bool:
    """True when value can be embedded in a file name without escaping the directory."""
    if not value:
        return False
    return bool(SAFE_NAME_PATTERN.fullmatch(value))


def parse_code_number(code: str, prefix: str) -> int | None:
    match = re.fullmatch(re.escape(prefix) + r"(\d+)", code or "")
    if not match:
        return None
    return int(match.group(1))


def format_code(number: int, prefix: str, width: int) -> str:
    return f"{prefix}{str(number).zfill(width)}"


def article_file_name(code: str, lang: str) -> str:
    return f"{code}-{lang}.html"


def require_language(lang: Any, languages: Iterable[str]) -> str:
    known = tuple(languages)
    if not isinstance(lang, str) or lang not in known:
        raise InvalidPayloadError(f"Invalid payload: unknown language {lang!r} (expected one of {', '.join(known)})")
    return lang


def require_code(code: Any) -> str:
    if not isinstance(code, str) or not code.strip():
        raise InvalidPayloadError("Invalid payload: missing code")
    if not is_safe_name(code):
        raise InvalidPayloadError(f"Invalid payload: article code {code!r} must match [A-Za-z0-9_-]")
    return code


def validate_record(
    code: str,
    record: Any,
    *,
    languages: Iterable[str],
    base_language: str,
) -> None:
    """
    Check one ArticleRecord. Raises InvalidPayloadError describing the first problem.

    availableLanguages and translations must name the same languages, the
    base language is mandatory and there are no duplicates.
    """
    known = tuple(languages)
    require_code(code)
    if not isinstance(record, Mapping):
        raise InvalidPayloadError(f"Invalid record {code}: expected an object")
    if record.get("code") != code:
        raise InvalidPayloadError(f"Invalid record {code}: code field {record.get('code')!r} does not match its key")
    for field in ("category", "image"):
        if not isinstance(record.get(field, ""), str):
            raise InvalidPayloadError(f"Invalid record {code}: {field} must be a string")
    raw_date = record.get("date")
    if not isinstance(raw_date, str):
        raise InvalidPayloadError(f"Invalid record {code}: date is required")
    try:
        date.fromisoformat(raw_date)
    except ValueError:
        raise InvalidPayloadError(f"Invalid record {code}: date {raw_date!r} is not an ISO 8601 date")

    available = record.get("availableLanguages")
    if not isinstance(available, list) or not available:
        raise InvalidPayloadError(f"Invalid record {code}: availableLanguages must be a non-empty list")
    if len(set(available)) != len(available):
        raise InvalidPayloadError(f"Invalid record {code}: availableLanguages has duplicates")
    for lang in available:
        require_language(lang, known)
    if base_language not in available:
        raise InvalidPayloadError(f"Invalid record {code}: base language {base_language} is required")

    translations = record.get("translations")
    if not isinstance(translations, Mapping):
        raise InvalidPayloadError(f"Invalid record {code}: translations must be an object")
    if set(translations) != set(available):
        raise InvalidPayloadError(
            f"Invalid record {code}: translations ({', '.join(sorted(translations))}) "
            f"do not match availableLanguages ({', '.join(available)})"
        )
    for lang in available:
        entry = translations[lang]
        if not isinstance(entry, Mapping):
            raise InvalidPayloadError(f"Invalid record {code}: translation {lang} must be an object")
        title = entry.get("title")
        if not isinstance(title, str) or not title.strip():
            raise InvalidPayloadError(f"Invalid record {code}: title for {lang} is required")
        if not isinstance(entry.get("excerpt", ""), str):
            raise InvalidPayloadError(f"Invalid record {code}: excerpt for {lang} must be a string")
        if not is_valid_slug(entry.get("slug")):
            raise InvalidPayloadError(f"Invalid record {code}: slug for {lang} must match [a-z0-9-]")


def validate_articles_map(articles: Any, *, languages: Iterable[str], base_language: str) -> None:
    if not isinstance(articles, Mapping):
        raise InvalidPayloadError("Validation failed: articlesDB must be an object")
    known = tuple(languages)
    for code, record in articles.items():
        validate_record(code, record, languages=known, base_language=base_language)


def slug_in_use(articles: Mapping[str, Any], lang: str, slug: str, *, exclude_code: str | None = None) -> bool:
    """Check if another article already owns slug in the given language."""
    if not slug:
        return False
    for code, record in articles.items():
        if code == exclude_code or not isinstance(record, Mapping):
            continue
        entry = (record.get("translations") or {}).get(lang)
        if isinstance(entry, Mapping) and entry.get("slug") == slug:
            return True
    return False
