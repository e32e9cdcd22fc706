from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cms.core import utils as core_utils
from cms.core.errors import InvalidPayloadError, NotFoundError, StoreError
from cms.repositories.registry_store import RegistryStore
from cms.services.registry_service import RegistryService

from conftest import make_record, make_source


@pytest.fixture()
def store(settings):
    return RegistryStore(settings.registry_file, backup_keep=settings.backup_keep)


@pytest.fixture()
def service(store, settings):
    return RegistryService(store, settings)


def test_read_missing_registry_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.read()
    with pytest.raises(NotFoundError):
        store.status()


def test_write_creates_file_without_backup(store):
    content = make_source(make_record("ART001"))
    result = store.write(content)

    assert store.read() == content
    assert result.backup is None
    assert store.list_backups() == []
    status = store.status()
    assert status["exists"] is True
    assert status["size"] == len(content.encode("utf-8"))
    assert status["path"] == str(store.path)


def test_write_backs_up_previous_content(store):
    first = make_source(make_record("ART001"))
    second = make_source(make_record("ART001"), make_record("ART002"))
    store.write(first)
    result = store.write(second)

    assert store.read() == second
    assert result.backup is not None
    assert result.backup.read_text(encoding="utf-8") == first
    name = result.backup.name
    assert name.startswith("articles-db.backup.") and name.endswith(".js")
    stamp = name[len("articles-db.backup."):-len(".js")]
    assert ":" not in stamp and "." not in stamp


def test_backup_retention_keeps_five_most_recent(store):
    contents = [make_source(make_record(f"ART{n:03d}")) for n in range(1, 9)]
    for content in contents:
        store.write(content)

    backups = store.list_backups()
    assert len(backups) == 5
    # newest backup holds the content written just before the last write
    kept = [b.read_text(encoding="utf-8") for b in backups]
    assert kept == list(reversed(contents[2:7]))


def test_backup_names_stay_unique_within_one_tick(store):
    store.write(make_source(make_record("ART001")))
    now = datetime(2025, 10, 8, 0, 35, 49, 217000, tzinfo=timezone.utc)
    first = store.backup(now)
    second = store.backup(now)
    assert first != second
    assert first.name == "articles-db.backup.2025-10-08T00-35-49-217000Z.js"
    assert second.name == "articles-db.backup.2025-10-08T00-35-49-217001Z.js"
    later = store.backup(now + timedelta(seconds=1))
    assert store.list_backups()[0] == later


def test_crash_before_rename_leaves_registry_untouched(store, monkeypatch):
    original = make_source(make_record("ART001"))
    store.write(original)

    def crash(*_args, **_kwargs):
        raise OSError("simulated crash before rename")

    monkeypatch.setattr(core_utils.os, "replace", crash)
    with pytest.raises(StoreError):
        store.write(make_source(make_record("ART001"), make_record("ART002")))

    assert store.read() == original
    leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_short_content_is_rejected_and_registry_unchanged(service, store):
    original = make_source(make_record("ART001"))
    service.save_source(original)

    with pytest.raises(InvalidPayloadError):
        service.save_source("const articlesDB = {};")

    assert store.read() == original
    assert store.list_backups() == []


def test_content_without_helper_block_is_rejected(service, store):
    content = "// registry\nconst articlesDB = " + "{}" + ";\n" + "// " + "x" * 60 + "\n"
    with pytest.raises(InvalidPayloadError) as exc:
        service.save_source(content)
    assert "ArticlesDB helper" in exc.value.message
    assert not store.exists()


def test_content_with_invalid_record_is_rejected(service, store):
    broken = make_record("ART001", languages=("en", "tr"))
    del broken["translations"]["tr"]
    with pytest.raises(InvalidPayloadError) as exc:
        service.save_source(make_source(broken))
    assert "do not match availableLanguages" in exc.value.message
    assert not store.exists()


def test_load_treats_missing_registry_as_empty(service):
    registry = service.load()
    assert len(registry) == 0
    assert registry.next_code() == "ART001"


def test_backup_names_keep_increasing_when_clock_steps_back(store):
    store.write(make_source(make_record("ART001")))
    first = store.backup(datetime(2030, 1, 1, tzinfo=timezone.utc))
    second = store.backup(datetime(2025, 1, 1, tzinfo=timezone.utc))
    assert second.name == "articles-db.backup.2030-01-01T00-00-00-000001Z.js"
    assert store.list_backups() == [second, first]


def test_undecodable_registry_raises_store_error(store, service):
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_bytes(b"const articlesDB = {\xff};")
    with pytest.raises(StoreError) as exc:
        store.read()
    assert exc.value.message.startswith("read failed")
    with pytest.raises(StoreError):
        service.next_code()
