"""Request bodies accepted by the JSON API. Unknown fields are rejected."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SaveDatabasePayload(_Payload):
    content: str


class SaveArticlePayload(_Payload):
    code: str
    files: dict[str, str]


class DeleteArticlePayload(_Payload):
    code: str
    languages: Optional[list[str]] = None


class TranslationPayload(_Payload):
    title: str
    excerpt: str = ""
    slug: str = ""


class ArticlePayload(_Payload):
    """Composite upsert: the registry record and its HTML files in one call."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    code: Optional[str] = None
    category: str = ""
    date: str
    image: str = ""
    available_languages: list[str] = Field(alias="availableLanguages")
    translations: dict[str, TranslationPayload]
    files: dict[str, str] = Field(default_factory=dict)
