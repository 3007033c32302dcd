"""Unit tests for the in-memory key-value store."""

import threading

import pytest

from kvlimit.adapters.kv.in_memory import InMemoryKeyValueStore
from kvlimit.core.errors import ValidationAppError


def test_get_missing_returns_none() -> None:
    store = InMemoryKeyValueStore()

    assert store.get("missing") is None


def test_put_then_get(fake_time) -> None:
    store = InMemoryKeyValueStore(clock=fake_time.time)

    store.put("k", "v", expire_after_seconds=60)

    assert store.get("k") == "v"


def test_put_overwrites_value_and_expiry(fake_time) -> None:
    store = InMemoryKeyValueStore(clock=fake_time.time)
    store.put("k", "old", expire_after_seconds=10)

    fake_time.advance(8)
    store.put("k", "new", expire_after_seconds=10)
    fake_time.advance(8)

    assert store.get("k") == "new"


def test_entry_expires_after_ttl(fake_time) -> None:
    store = InMemoryKeyValueStore(clock=fake_time.time)
    store.put("k", "v", expire_after_seconds=10)

    fake_time.advance(9)
    assert store.get("k") == "v"

    fake_time.advance(1)
    assert store.get("k") is None


def test_expired_entries_are_evicted_on_write(fake_time) -> None:
    store = InMemoryKeyValueStore(clock=fake_time.time)
    store.put("a", "1", expire_after_seconds=10)
    store.put("b", "2", expire_after_seconds=60)

    fake_time.advance(30)
    store.put("c", "3", expire_after_seconds=60)

    assert store.size() == 2
    assert store.get("a") is None


def test_delete_is_idempotent(fake_time) -> None:
    store = InMemoryKeyValueStore(clock=fake_time.time)
    store.put("k", "v", expire_after_seconds=60)

    store.delete("k")
    store.delete("k")
    store.delete("never-existed")

    assert store.get("k") is None


def test_clear_removes_everything(fake_time) -> None:
    store = InMemoryKeyValueStore(clock=fake_time.time)
    store.put("a", "1", expire_after_seconds=60)
    store.put("b", "2", expire_after_seconds=60)

    store.clear()

    assert store.size() == 0


@pytest.mark.parametrize("ttl", [0, -1])
def test_invalid_ttl_rejected(ttl: int) -> None:
    store = InMemoryKeyValueStore()

    with pytest.raises(ValidationAppError):
        store.put("k", "v", expire_after_seconds=ttl)


def test_thread_safety_under_concurrent_puts() -> None:
    store = InMemoryKeyValueStore()
    total_keys = 50

    def _writer(idx: int) -> None:
        store.put(f"k-{idx}", str(idx), expire_after_seconds=60)

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.size() == total_keys
    assert store.get("k-0") == "0"
    assert store.get("k-49") == "49"
