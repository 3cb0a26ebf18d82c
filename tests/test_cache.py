import json
import os
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from logo_cli.services.cache import CacheStore, derive_key


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_derive_key_ignores_color_order():
    assert derive_key("A", "p", None, ["red", "blue"]) == derive_key("A", "p", None, ["blue", "red"])


def test_derive_key_collapses_duplicate_colors():
    assert derive_key("A", "p", None, ["red", "red", "blue"]) == derive_key("A", "p", None, ["blue", "red"])


def test_derive_key_changes_with_each_field():
    base = derive_key("Acme", "bold new idea", "modern", ["red"])
    assert derive_key("Acme Co", "bold new idea", "modern", ["red"]) != base
    assert derive_key("Acme", "bold old idea", "modern", ["red"]) != base
    assert derive_key("Acme", "bold new idea", "vintage", ["red"]) != base
    assert derive_key("Acme", "bold new idea", "modern", ["green"]) != base


def test_derive_key_is_short_hex():
    key = derive_key("Acme", "bold new idea")
    assert len(key) == 16
    int(key, 16)
    assert key == derive_key("Acme", "bold new idea", "default", [])


@pytest.mark.asyncio
async def test_get_returns_latest_value_with_hit_flag(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.0, clock=FakeClock())
    await store.set("k1", make_result(url="https://images.example.com/first.png"))
    await store.set("k1", make_result(url="https://images.example.com/second.png"))

    entry = await store.get("k1")

    assert entry is not None
    assert entry.hit is True
    assert entry.url == "https://images.example.com/second.png"
    assert entry.to_result() == make_result(url="https://images.example.com/second.png")


@pytest.mark.asyncio
async def test_get_after_ttl_is_a_miss(tmp_path, make_result):
    clock = FakeClock()
    store = CacheStore(tmp_path, ttl_seconds=60, cleanup_probability=0.0, clock=clock)
    await store.set("k1", make_result())

    clock.now += 59
    assert await store.get("k1") is not None

    clock.now += 2
    assert await store.get("k1") is None


@pytest.mark.asyncio
async def test_get_falls_back_to_file_and_promotes(tmp_path, make_result):
    clock = FakeClock()
    await CacheStore(tmp_path, cleanup_probability=0.0, clock=clock).set("k1", make_result())

    fresh = CacheStore(tmp_path, cleanup_probability=0.0, clock=clock)
    entry = await fresh.get("k1")

    assert entry is not None and entry.hit
    assert (await fresh.stats()).memory_entries == 1


@pytest.mark.asyncio
async def test_unreadable_cache_file_is_a_miss(tmp_path):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    store = CacheStore(tmp_path, cleanup_probability=0.0)

    assert await store.get("broken") is None


@pytest.mark.asyncio
async def test_cache_file_uses_camel_case_keys(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.0, clock=FakeClock())
    await store.set("k1", make_result())

    data = json.loads((tmp_path / "k1.json").read_text(encoding="utf-8"))

    assert data["expiresAt"] == 1_700_000_000_000 + 3_600_000
    assert data["hit"] is False
    assert data["metadata"]["originalPrompt"] == "bold new idea"


@pytest.mark.asyncio
async def test_cleanup_removes_expired_files(tmp_path, make_result):
    clock = FakeClock()
    store = CacheStore(tmp_path, ttl_seconds=10, cleanup_probability=0.0, clock=clock)
    await store.set("old", make_result())
    clock.now += 20
    await store.set("new", make_result())

    await store.cleanup()

    assert not (tmp_path / "old.json").exists()
    assert (tmp_path / "new.json").exists()
    assert (await store.stats()).memory_entries == 1


@pytest.mark.asyncio
async def test_cleanup_evicts_oldest_until_under_headroom(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.0, clock=FakeClock())
    keys = [f"key{index}" for index in range(5)]
    for index, key in enumerate(keys):
        await store.set(key, make_result(company=f"Acme{index}"))
        os.utime(tmp_path / f"{key}.json", (1_000_000 + index, 1_000_000 + index))

    total = sum((tmp_path / f"{key}.json").stat().st_size for key in keys)
    store.max_size_bytes = int(total * 0.9)

    await store.cleanup()

    remaining = [key for key in keys if (tmp_path / f"{key}.json").exists()]
    remaining_size = sum((tmp_path / f"{key}.json").stat().st_size for key in remaining)
    assert remaining_size <= store.max_size_bytes * 0.8
    assert "key0" not in remaining
    assert "key4" in remaining
    assert remaining == keys[len(keys) - len(remaining):]


@pytest.mark.asyncio
async def test_cleanup_leaves_cache_under_limit_alone(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.0, clock=FakeClock())
    for index in range(3):
        await store.set(f"key{index}", make_result(company=f"Acme{index}"))

    await store.cleanup()

    assert (await store.stats()).file_entries == 3


@pytest.mark.asyncio
async def test_set_schedules_cleanup_when_rng_below_probability(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.1, rng=lambda: 0.05)
    store.cleanup = AsyncMock()

    await store.set("k1", make_result())
    await store.join()

    store.cleanup.assert_awaited_once()


@pytest.mark.asyncio
async def test_set_skips_cleanup_when_rng_above_probability(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.1, rng=lambda: 0.5)
    store.cleanup = AsyncMock()

    await store.set("k1", make_result())
    await store.join()

    store.cleanup.assert_not_awaited()


@pytest.mark.asyncio
async def test_stats_and_clear(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.0)
    await store.set("k1", make_result())
    await store.set("k2", make_result(company="Globex"))

    stats = await store.stats()
    assert stats.memory_entries == 2
    assert stats.file_entries == 2
    assert stats.total_size_bytes > 0

    await store.clear()

    stats = await store.stats()
    assert (stats.memory_entries, stats.file_entries, stats.total_size_bytes) == (0, 0, 0)
    assert await store.get("k1") is None


@pytest.mark.asyncio
async def test_write_failure_is_swallowed(tmp_path, make_result):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    store = CacheStore(blocker / "cache", cleanup_probability=0.0)

    entry = await store.set("k1", make_result())

    assert entry.url == make_result().url
    assert (await store.get("k1")) is not None


@pytest.mark.asyncio
async def test_set_writes_through_a_temporary_file(tmp_path, make_result):
    store = CacheStore(tmp_path, cleanup_probability=0.0, clock=FakeClock())

    await store.set("k1", make_result())
    await store.set("k1", make_result(company="Globex"))

    assert sorted(path.name for path in tmp_path.iterdir()) == ["k1.json"]
    assert json.loads((tmp_path / "k1.json").read_text(encoding="utf-8"))["metadata"]["company"] == "Globex"


@pytest.mark.asyncio
async def test_cleanup_skips_unreadable_file_and_still_evicts(tmp_path, make_result, monkeypatch):
    store = CacheStore(tmp_path, cleanup_probability=0.0, clock=FakeClock())
    keys = ["locked", "key1", "key2", "key3"]
    for index, key in enumerate(keys):
        await store.set(key, make_result(company=f"Acme{index}"))
        os.utime(tmp_path / f"{key}.json", (1_000_000 + index, 1_000_000 + index))
    store.max_size_bytes = (tmp_path / "key1.json").stat().st_size

    real_read_text = Path.read_text

    def read_text(self, *args, **kwargs):
        if self.name == "locked.json":
            raise PermissionError("permission denied")
        return real_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", read_text)

    await store.cleanup()

    assert (tmp_path / "locked.json").exists()
    assert not (tmp_path / "key1.json").exists()
    assert not (tmp_path / "key2.json").exists()
