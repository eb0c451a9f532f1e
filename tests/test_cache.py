# tests/test_cache.py
from __future__ import annotations

import pytest

from agencydesk.client.cache import QueryCache, cache_key, filter_part

pytestmark = pytest.mark.unit


class CountingLoader:
    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.values.pop(0)


def test_fresh_entries_are_served_without_reloading():
    cache = QueryCache()
    loader = CountingLoader(["a"], ["b"])
    key = cache_key("agents", "list", filter_part(None))
    assert cache.read(key, loader) == ["a"]
    assert cache.read(key, loader) == ["a"]
    assert loader.calls == 1


def test_invalidate_marks_prefix_stale_and_next_read_refetches():
    cache = QueryCache()
    cache.read(("agents", "list", ()), lambda: ["old"])
    cache.read(("agents", "detail", 1), lambda: {"id": 1})
    cache.read(("policies", "by-agent", 1), lambda: [])

    assert cache.invalidate("agents") == 2
    assert not cache.is_fresh(("agents", "list", ()))
    assert cache.is_fresh(("policies", "by-agent", 1))
    # stale data stays visible until refetched
    assert cache.peek(("agents", "list", ())).data == ["old"]

    assert cache.read(("agents", "list", ()), lambda: ["new"]) == ["new"]
    assert cache.is_fresh(("agents", "list", ()))


def test_narrow_prefix_only_touches_matching_keys():
    cache = QueryCache()
    cache.read(("commissions", "stats"), lambda: 1)
    cache.read(("commissions", "weekly", 3), lambda: 2)
    assert cache.invalidate("commissions", "weekly") == 1
    assert cache.is_fresh(("commissions", "stats"))


def test_abandoned_read_is_discarded():
    cache = QueryCache()
    key = ("leads", "list", ())
    ticket = cache.begin(key)
    cache.abandon(ticket)
    assert cache.complete(ticket, ["late"]) is False
    assert cache.peek(key) is None


def test_read_overtaken_by_invalidation_is_discarded():
    cache = QueryCache()
    key = ("agents", "list", ())
    ticket = cache.begin(key)
    cache.invalidate("agents")
    assert cache.complete(ticket, ["from before the write"]) is False
    assert cache.peek(key) is None


def test_older_response_cannot_overwrite_newer():
    cache = QueryCache()
    key = ("agents", "list", ())
    first = cache.begin(key)
    second = cache.begin(key)
    assert cache.complete(second, ["newer"]) is True
    assert cache.complete(first, ["older"]) is False
    assert cache.peek(key).data == ["newer"]


def test_failed_loader_leaves_no_entry():
    cache = QueryCache()

    def boom():
        raise RuntimeError("network down")

    with pytest.raises(RuntimeError):
        cache.read(("users", "list", ()), boom)
    assert cache.peek(("users", "list", ())) is None


def test_filter_part_is_order_independent():
    assert filter_part({"b": 1, "a": 2}) == filter_part({"a": 2, "b": 1})
