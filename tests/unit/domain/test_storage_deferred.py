import time

import pytest

from vaultcache.core.item import Item
from vaultcache.domain.exceptions import CacheStorageError
from vaultcache.infrastructure.config.security import SecurityConfig
from vaultcache.infrastructure.storage.file_storage import FileStorage

def make_item(key, ttl=60, prefix="", created_at=None):
    item = Item(key, f"value of {key}", ttl,
                security_config=SecurityConfig(encryption_enabled=False), created_at=created_at)
    item.prefix = prefix
    return item

def test_deferred_items_are_not_written_until_commit(storage: FileStorage):
    assert storage.save_deferred(make_item("a")) is True
    assert storage.has_deferred("a")
    assert storage.read("a", "") is None

    assert storage.commit() is True

    assert storage.read("a", "") == "value of a"
    assert not storage.has_deferred("a")

def test_deferred_items_are_keyed_by_prefix(storage: FileStorage):
    storage.save_deferred(make_item("a", prefix="p_"))
    assert storage.has_deferred("a", "p_")
    assert not storage.has_deferred("a")
    assert storage.get_deferred_item("a", "p_").key == "a"

def test_expired_deferred_item_is_dropped(storage: FileStorage):
    storage.save_deferred(make_item("old", ttl=1, created_at=int(time.time()) - 100))
    assert storage.get_deferred_item("old") is None
    assert not storage.has_deferred("old")

def test_delete_and_clear_deferred(storage: FileStorage):
    storage.save_deferred(make_item("a"))
    storage.save_deferred(make_item("b"))

    storage.delete_deferred_item("a")
    assert not storage.has_deferred("a")
    assert storage.has_deferred("b")

    storage.clear_deferred_items()
    assert not storage.has_deferred("b")
    assert storage.commit() is True

def test_failed_items_stay_queued(storage: FileStorage, mocker):
    storage.save_deferred(make_item("a"))
    storage.save_deferred(make_item("b"))
    original_store = storage.store

    def flaky_store(item):
        if item.key == "a":
            raise CacheStorageError("disk full")
        original_store(item)

    mocker.patch.object(storage, "store", side_effect=flaky_store)

    assert storage.commit() is False
    assert storage.has_deferred("a")
    assert not storage.has_deferred("b")
    assert storage.read("b", "") == "value of b"
