"""Unit tests for the in-memory SimpleTTLCache."""

import threading

import pytest

from app.schemas.network import LevelCapacity, NetworkAppSettings
from app.utils import simple_cache
from app.utils.simple_cache import SimpleTTLCache


class FakeTime:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def _network_settings(max_members: int = 5) -> NetworkAppSettings:
    return NetworkAppSettings(max_members_per_level=[LevelCapacity(level=1, max_members=max_members)])


def test_set_and_get_updates_hit_miss_counters() -> None:
    cache = SimpleTTLCache(ttl_seconds=10)

    assert cache.get("app_settings:network") is None

    value = _network_settings()
    cache.set("app_settings:network", value)

    assert cache.get("app_settings:network") == value

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_entry_survives_until_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_time = FakeTime()
    monkeypatch.setattr(simple_cache, "time", fake_time)

    cache = SimpleTTLCache(ttl_seconds=300)
    cache.set("key", _network_settings(3))

    fake_time.advance(299)
    assert cache.get("key") == _network_settings(3)

    fake_time.advance(2)
    assert cache.get("key") is None
    assert cache.stats()["evictions"] == 1


def test_delete_removes_single_entry() -> None:
    cache = SimpleTTLCache(ttl_seconds=10)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.delete("a")
    cache.delete("missing")

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.stats()["entries"] == 1


def test_lru_eviction_removes_least_recently_used() -> None:
    cache = SimpleTTLCache(ttl_seconds=100, max_entries=2)
    cache.set("a", {"v": 1})
    cache.set("b", {"v": 2})

    # "b" becomes least recently used
    assert cache.get("a") == {"v": 1}

    cache.set("c", {"v": 3})

    assert cache.get("a") == {"v": 1}
    assert cache.get("c") == {"v": 3}
    assert cache.get("b") is None


def test_clear_resets_state() -> None:
    cache = SimpleTTLCache(ttl_seconds=10)
    cache.set("a", {"v": 1})
    cache.get("a")
    cache.get("b")

    cache.clear()

    stats = cache.stats()
    assert stats["entries"] == 0
    assert stats["hits"] == 0
    assert stats["misses"] == 0
    assert stats["evictions"] == 0


def test_thread_safety_under_concurrent_sets() -> None:
    cache = SimpleTTLCache(ttl_seconds=30, max_entries=None)
    total_keys = 50

    def _writer(idx: int) -> None:
        cache.set(f"k-{idx}", idx)

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.stats()["entries"] == total_keys
    assert cache.get("k-0") == 0
    assert cache.get("k-49") == 49
