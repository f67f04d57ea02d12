"""Tests for the ResponseCache module."""

from __future__ import annotations

import pickle
import threading
from pathlib import Path

import pytest

from ripex.cache import (
    NOT_FOUND,
    CacheEntry,
    ResponseCache,
    get_cache,
    reset_cache,
    set_cache,
)
from ripex.cache.cache import DATA_DIR
from ripex.exceptions import CacheError, InvalidUsageError

TNT_URL = "https://discography?query=acdc&title=TNT"
HV_URL = "https://discography?query=acdc&title=HighVoltage"


# ------------------------------------------------------------------ #
# NOT_FOUND sentinel
# ------------------------------------------------------------------ #


class TestNotFound:
    def test_is_falsy(self) -> None:
        assert not NOT_FOUND

    def test_repr(self) -> None:
        assert repr(NOT_FOUND) == "NOT_FOUND"

    def test_pickles_to_same_object(self) -> None:
        assert pickle.loads(pickle.dumps(NOT_FOUND)) is NOT_FOUND


# ------------------------------------------------------------------ #
# Core get/put behaviour
# ------------------------------------------------------------------ #


class TestGetPut:
    def test_scenario_put_then_get(self, cache: ResponseCache) -> None:
        """A stored value is returned for its URL; another URL misses."""
        cache.put(["acdc", "TNT", 1975], TNT_URL)
        assert cache.get(TNT_URL) == ["acdc", "TNT", 1975]
        assert cache.get("https://x?q=other") is NOT_FOUND

    def test_put_returns_value(self, cache: ResponseCache) -> None:
        value = {"asns": [3333]}
        assert cache.put(value, TNT_URL) is value

    def test_miss_on_empty_cache(self, cache: ResponseCache) -> None:
        assert cache.get("missing") is NOT_FOUND

    def test_last_write_wins(self, cache: ResponseCache) -> None:
        cache.put("v1", TNT_URL)
        cache.put("v2", TNT_URL)
        assert cache.get(TNT_URL) == "v2"
        assert len(cache) == 1

    @pytest.mark.parametrize("value", [None, [], {}, 0, "", False])
    def test_falsy_values_are_hits(self, cache: ResponseCache, value: object) -> None:
        """Falsy payloads are distinguishable from a miss."""
        cache.put(value, TNT_URL)
        assert cache.get(TNT_URL) is not NOT_FOUND
        assert cache.get(TNT_URL) == value

    def test_query_parameters_are_part_of_key(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        cache.put("hv", HV_URL)
        assert cache.get(TNT_URL) == "tnt"
        assert cache.get(HV_URL) == "hv"

    def test_overwrite_restamps_entry(self, cache: ResponseCache, monkeypatch) -> None:
        clock = iter([100.0, 200.0, 205.0])
        monkeypatch.setattr("ripex.cache.cache.monotonic", lambda: next(clock))
        cache.put("v1", TNT_URL)  # t=100
        cache.put("v2", TNT_URL)  # t=200
        # age is 5s, not 105s
        assert cache.get_with_ttl(TNT_URL, 10) == "v2"


# ------------------------------------------------------------------ #
# Lazy storage
# ------------------------------------------------------------------ #


class TestLazyStorage:
    def test_storage_absent_until_first_use(self) -> None:
        cache = ResponseCache()
        assert cache._table is None

    def test_get_initialises_storage(self) -> None:
        cache = ResponseCache()
        assert cache.get(TNT_URL) is NOT_FOUND
        assert cache._table == {}

    def test_get_with_ttl_initialises_storage(self) -> None:
        cache = ResponseCache()
        assert cache.get_with_ttl(TNT_URL, 60) is NOT_FOUND
        assert cache._table == {}

    def test_put_initialises_storage(self) -> None:
        cache = ResponseCache()
        cache.put(1, TNT_URL)
        assert cache.get(TNT_URL) == 1

    def test_operations_recover_after_storage_dropped(self, cache: ResponseCache) -> None:
        cache.put(1, TNT_URL)
        cache._table = None
        assert cache.get(TNT_URL) is NOT_FOUND
        assert cache.delete(TNT_URL) is True
        assert cache.clear() is True
        cache.put(2, TNT_URL)
        assert cache.get(TNT_URL) == 2

    def test_default_data_dir_is_package_private(self) -> None:
        assert ResponseCache().data_dir == DATA_DIR
        assert DATA_DIR.parent.name == "ripex"


# ------------------------------------------------------------------ #
# TTL
# ------------------------------------------------------------------ #


class TestTTL:
    @pytest.mark.parametrize("ttl", [-1, -60, -(10**9)])
    def test_negative_ttl_always_stale(self, cache: ResponseCache, ttl: int) -> None:
        cache.put("fresh", TNT_URL)
        assert cache.get_with_ttl(TNT_URL, ttl) is NOT_FOUND

    def test_stale_entry_still_present(self, cache: ResponseCache) -> None:
        cache.put("fresh", TNT_URL)
        assert cache.get_with_ttl(TNT_URL, -1) is NOT_FOUND
        assert cache.get(TNT_URL) == "fresh"
        assert TNT_URL in cache

    def test_fresh_entry_within_ttl(self, cache: ResponseCache) -> None:
        cache.put("fresh", TNT_URL)
        assert cache.get_with_ttl(TNT_URL, 3600) == "fresh"

    def test_entry_expires_after_ttl(self, cache: ResponseCache, monkeypatch) -> None:
        now = [1000.0]
        monkeypatch.setattr("ripex.cache.cache.monotonic", lambda: now[0])
        cache.put("fresh", TNT_URL)

        now[0] = 1030.0
        assert cache.get_with_ttl(TNT_URL, 30) == "fresh"
        now[0] = 1030.5
        assert cache.get_with_ttl(TNT_URL, 30) is NOT_FOUND

    def test_missing_key_with_ttl(self, cache: ResponseCache) -> None:
        assert cache.get_with_ttl("missing", 60) is NOT_FOUND

    def test_entry_age(self, monkeypatch) -> None:
        monkeypatch.setattr("ripex.cache.cache.monotonic", lambda: 50.0)
        entry = CacheEntry(key="k", value="v", created_at=20.0)
        assert entry.age() == 30.0


# ------------------------------------------------------------------ #
# Delete and clear
# ------------------------------------------------------------------ #


class TestDeleteAndClear:
    def test_delete_removes_only_target(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        cache.put("hv", HV_URL)
        assert cache.delete(TNT_URL) is True
        assert cache.get(TNT_URL) is NOT_FOUND
        assert cache.get(HV_URL) == "hv"

    def test_delete_is_idempotent(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        assert cache.delete(TNT_URL) is True
        assert cache.get(TNT_URL) is NOT_FOUND
        assert cache.delete(TNT_URL) is True
        assert cache.get(TNT_URL) is NOT_FOUND

    def test_delete_missing_key(self, cache: ResponseCache) -> None:
        assert cache.delete("missing") is True

    def test_clear_removes_all(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        cache.put("hv", HV_URL)
        assert cache.clear() is True
        assert len(cache) == 0
        assert cache.get(TNT_URL) is NOT_FOUND


# ------------------------------------------------------------------ #
# Snapshots
# ------------------------------------------------------------------ #


class TestSnapshots:
    def test_round_trip(self, cache: ResponseCache) -> None:
        """Values survive save -> clear -> read unchanged."""
        entries = {
            TNT_URL: ["acdc", "TNT", 1975],
            HV_URL: ["acdc", "High Voltage", 1975],
            "https://stat.ripe.net/data/network-info/data.json?resource=1.1.1.1": {
                "asns": ["13335"],
                "prefix": "1.1.1.0/24",
            },
            "https://x?q=none": None,
        }
        for key, value in entries.items():
            cache.put(value, key)

        assert cache.save("ripe-api-cache.ets") is True
        cache.clear()
        assert cache.read("ripe-api-cache.ets") is True

        assert len(cache) == len(entries)
        for key, value in entries.items():
            assert cache.get(key) == value

    def test_read_restamps_entries(self, cache: ResponseCache, monkeypatch) -> None:
        now = [10.0]
        monkeypatch.setattr("ripex.cache.cache.monotonic", lambda: now[0])
        cache.put("old", TNT_URL)
        cache.save("snap")

        now[0] = 1000.0
        assert cache.get_with_ttl(TNT_URL, 60) is NOT_FOUND
        cache.read("snap")
        assert cache.get_with_ttl(TNT_URL, 60) == "old"

    def test_snapshot_format_is_pickled_triples(
        self, cache: ResponseCache, snapshot_dir: Path
    ) -> None:
        cache.put("tnt", TNT_URL)
        cache.save("snap")
        triples = pickle.loads((snapshot_dir / "snap").read_bytes())
        assert len(triples) == 1
        key, value, created_at = triples[0]
        assert (key, value) == (TNT_URL, "tnt")
        assert isinstance(created_at, float)

    def test_read_missing_snapshot_clears_cache(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        assert cache.read("does-not-exist.snapshot") is False
        assert cache.get(TNT_URL) is NOT_FOUND
        assert len(cache) == 0

    def test_read_replaces_contents(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        cache.save("snap")
        cache.delete(TNT_URL)
        cache.put("hv", HV_URL)

        cache.read("snap")
        assert cache.keys() == [TNT_URL]

    def test_save_overwrites_existing_snapshot(self, cache: ResponseCache) -> None:
        cache.put("tnt", TNT_URL)
        cache.save("snap")
        cache.clear()
        cache.put("hv", HV_URL)
        cache.save("snap")

        cache.read("snap")
        assert cache.keys() == [HV_URL]

    def test_save_empty_cache(self, cache: ResponseCache) -> None:
        cache.save("empty")
        cache.put("tnt", TNT_URL)
        assert cache.read("empty") is True
        assert len(cache) == 0

    def test_save_creates_data_dir(self, tmp_path: Path) -> None:
        cache = ResponseCache(tmp_path / "new" / "dir")
        cache.put("tnt", TNT_URL)
        cache.save("snap")
        assert (tmp_path / "new" / "dir" / "snap").is_file()

    def test_save_leaves_no_temp_files(self, cache: ResponseCache, snapshot_dir: Path) -> None:
        cache.put("tnt", TNT_URL)
        cache.save("snap")
        assert [p.name for p in snapshot_dir.iterdir()] == ["snap"]

    def test_save_filesystem_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")
        cache = ResponseCache(blocker)
        cache.put("tnt", TNT_URL)
        with pytest.raises(CacheError) as exc_info:
            cache.save("snap")
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_save_unpicklable_value(self, cache: ResponseCache) -> None:
        cache.put(threading.Lock(), TNT_URL)
        with pytest.raises(CacheError):
            cache.save("snap")

    def test_read_corrupt_snapshot(self, cache: ResponseCache, snapshot_dir: Path) -> None:
        (snapshot_dir / "corrupt").write_bytes(b"definitely not a pickle")
        with pytest.raises(CacheError):
            cache.read("corrupt")

    def test_read_wrong_shape(self, cache: ResponseCache, snapshot_dir: Path) -> None:
        (snapshot_dir / "shape").write_bytes(pickle.dumps([("only", "two")]))
        with pytest.raises(CacheError):
            cache.read("shape")

    def test_read_bad_triple_loads_nothing(
        self, cache: ResponseCache, snapshot_dir: Path
    ) -> None:
        entries = [("a", 1, 0.0), ("b", 2, 0.0), ("bad",)]
        (snapshot_dir / "partial").write_bytes(pickle.dumps(entries))
        cache.put("kept?", TNT_URL)

        with pytest.raises(CacheError):
            cache.read("partial")
        assert cache.keys() == []

    @pytest.mark.parametrize(
        "name", ["", ".", "..", "../escape", "sub/dir", "/etc/passwd", "a\\b"]
    )
    def test_rejects_path_like_names(self, cache: ResponseCache, name: str) -> None:
        with pytest.raises(InvalidUsageError):
            cache.save(name)
        with pytest.raises(InvalidUsageError):
            cache.read(name)

    def test_snapshot_path(self, cache: ResponseCache, snapshot_dir: Path) -> None:
        assert cache.snapshot_path("warm.cache") == snapshot_dir / "warm.cache"


# ------------------------------------------------------------------ #
# Inspection
# ------------------------------------------------------------------ #


class TestInspection:
    def test_keys_sorted(self, cache: ResponseCache) -> None:
        cache.put(1, "b")
        cache.put(2, "a")
        assert cache.keys() == ["a", "b"]
        assert list(cache) == ["a", "b"]

    def test_contains(self, cache: ResponseCache) -> None:
        cache.put(1, TNT_URL)
        assert TNT_URL in cache
        assert HV_URL not in cache

    def test_stats(self, cache: ResponseCache, snapshot_dir: Path) -> None:
        cache.put(1, TNT_URL)
        assert cache.stats() == {"size": 1, "directory": str(snapshot_dir)}


# ------------------------------------------------------------------ #
# Concurrency
# ------------------------------------------------------------------ #


class TestConcurrency:
    def test_concurrent_puts_on_distinct_keys(self, cache: ResponseCache) -> None:
        def worker(n: int) -> None:
            for i in range(200):
                cache.put((n, i), f"https://x?worker={n}&i={i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 8 * 200
        assert cache.get("https://x?worker=3&i=199") == (3, 199)


# ------------------------------------------------------------------ #
# Process-wide handle
# ------------------------------------------------------------------ #


class TestProcessCache:
    def test_get_cache_is_singleton(self) -> None:
        assert get_cache() is get_cache()

    def test_set_cache_installs_instance(self, cache: ResponseCache) -> None:
        set_cache(cache)
        assert get_cache() is cache

    def test_reset_cache_drops_instance(self) -> None:
        first = get_cache()
        first.put(1, TNT_URL)
        reset_cache()
        assert get_cache() is not first
        assert get_cache().get(TNT_URL) is NOT_FOUND
