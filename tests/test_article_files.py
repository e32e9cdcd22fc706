from __future__ import annotations

import pytest

from cms.core import utils as core_utils
from cms.core.errors import InvalidPayloadError, PartialWriteError
from cms.repositories.article_files import ArticleFileStore

from conftest import HTML_EN, HTML_TR


@pytest.fixture()
def files(settings):
    return ArticleFileStore(
        settings.articles_dir,
        url_prefix=settings.articles_url,
        languages=settings.languages,
        min_length=settings.min_content_length,
    )


def test_save_creates_directory_and_returns_urls(files, settings):
    assert not settings.articles_dir.exists()
    written = files.save("ART005", {"en": HTML_EN, "tr": HTML_TR})

    assert written == ["/blog/articles/ART005-en.html", "/blog/articles/ART005-tr.html"]
    assert (settings.articles_dir / "ART005-en.html").read_text(encoding="utf-8") == HTML_EN
    assert files.exists("ART005", "tr")
    assert not files.exists("ART005", "de")


def test_short_html_aborts_before_any_write(files, settings):
    with pytest.raises(InvalidPayloadError) as exc:
        files.save("ART005", {"en": HTML_EN, "tr": "<p>short</p>"})
    assert exc.value.message == "Invalid HTML for tr"
    assert not (settings.articles_dir / "ART005-en.html").exists()


@pytest.mark.parametrize("code", ["", "../escape", "ART/005", "ART 005"])
def test_unsafe_codes_are_rejected(files, code):
    with pytest.raises(InvalidPayloadError):
        files.save(code, {"en": HTML_EN})


def test_unknown_language_is_rejected(files):
    with pytest.raises(InvalidPayloadError):
        files.save("ART005", {"../../x": HTML_EN})


def test_partial_failure_names_language_and_keeps_earlier_files(files, settings, monkeypatch):
    real_replace = core_utils.os.replace

    def failing_replace(src, dst):
        if str(dst).endswith("-tr.html"):
            raise OSError("disk full")
        return real_replace(src, dst)

    monkeypatch.setattr(core_utils.os, "replace", failing_replace)
    with pytest.raises(PartialWriteError) as exc:
        files.save("ART005", {"en": HTML_EN, "tr": HTML_TR})

    assert exc.value.language == "tr"
    assert "tr" in exc.value.message
    assert exc.value.written == ["/blog/articles/ART005-en.html"]
    assert (settings.articles_dir / "ART005-en.html").exists()
    assert not (settings.articles_dir / "ART005-tr.html").exists()


def test_delete_missing_files_is_a_noop(files):
    assert files.delete("ART404") == []


def test_delete_defaults_to_all_known_languages(files):
    files.save("ART005", {"en": HTML_EN, "de": HTML_EN})
    deleted = files.delete("ART005")
    assert deleted == ["/blog/articles/ART005-en.html", "/blog/articles/ART005-de.html"]
    assert not files.exists("ART005", "en")


def test_delete_only_requested_languages(files):
    files.save("ART005", {"en": HTML_EN, "tr": HTML_TR})
    assert files.delete("ART005", ["tr", "az"]) == ["/blog/articles/ART005-tr.html"]
    assert files.exists("ART005", "en")


def test_list_files_parses_code_and_language(files, settings):
    files.save("ART001", {"en": HTML_EN})
    files.save("ART-X", {"tr": HTML_TR})
    (settings.articles_dir / "notes.html").write_text(HTML_EN, encoding="utf-8")
    assert files.list_files() == [("ART-X", "tr"), ("ART001", "en")]
