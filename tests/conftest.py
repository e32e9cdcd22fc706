"""
Shared fixtures: a temporary content root wired through the settings env vars.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the cms package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cms.core import config as core_config
from cms.domain.registry import ArticleRegistry

HTML_EN = "<!DOCTYPE html><html lang='en'><head><title>Sample</title></head><body><p>Body</p></body></html>"
HTML_TR = "<!DOCTYPE html><html lang='tr'><head><title>Örnek</title></head><body><p>Gövde</p></body></html>"


def make_record(code: str, languages=("en",), category: str = "computational-biology") -> dict:
    return {
        "code": code,
        "category": category,
        "date": "2024-07-26",
        "image": "/images/cover.jpg",
        "availableLanguages": list(languages),
        "translations": {
            lang: {"title": f"Title {code} {lang}", "excerpt": "Excerpt", "slug": f"title-{code.lower()}-{lang}"}
            for lang in languages
        },
    }


def make_source(*records: dict) -> str:
    return ArticleRegistry({r["code"]: r for r in records}).to_source()


@pytest.fixture()
def settings(tmp_path, monkeypatch):
    """Point every path setting at tmp_path and rebuild the cached Settings."""
    monkeypatch.setenv("CMS_ROOT_DIR", str(tmp_path))
    for name in ("CMS_REGISTRY_FILE", "CMS_ARTICLES_DIR", "CMS_LANGUAGES", "CMS_BASE_LANGUAGE", "CMS_CODE_PREFIX"):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield core_config.get_settings()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def client(settings):
    from fastapi.testclient import TestClient

    from cms.app import create_app

    with TestClient(create_app(settings)) as test_client:
        yield test_client
