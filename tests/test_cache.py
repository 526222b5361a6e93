"""Tests for the per-instance result cache."""

from unittest.mock import Mock

import pytest

from remote_entities.cache import ResultCache

from sample_entities import FlickrObject


def test_result_cache_basic_operations():
    """Test basic cache operations."""
    cache = ResultCache()

    cache.set("test_key", "test_value")
    assert cache.get("test_key") == "test_value"
    assert "test_key" in cache

    # Non-existent key
    assert cache.get("nonexistent") is None
    assert cache.get("nonexistent", "default") == "default"

    # Clear
    cache.clear()
    assert cache.get("test_key") is None
    assert len(cache) == 0


def test_fetch_runs_producer_once():
    """Test that a stored result is returned without calling the producer again."""
    cache = ResultCache()
    producer = Mock(return_value=["photo"])
    key = cache.make_key("photos", {})

    assert cache.fetch(key, producer) == ["photo"]
    assert cache.fetch(key, producer) == ["photo"]
    producer.assert_called_once_with()


def test_fetch_stores_none_results():
    """Test that None is cached like any other result."""
    cache = ResultCache()
    producer = Mock(return_value=None)

    assert cache.fetch("key", producer) is None
    assert cache.fetch("key", producer) is None
    assert producer.call_count == 1


def test_failed_producer_is_not_cached():
    """Test that an exception from the producer stores nothing."""
    cache = ResultCache()
    producer = Mock(side_effect=[RuntimeError("boom"), "ok"])

    with pytest.raises(RuntimeError):
        cache.fetch("key", producer)
    assert "key" not in cache
    assert cache.fetch("key", producer) == "ok"


def test_keys_ignore_mapping_order():
    """Test that mapping insertion order does not change the key."""
    cache = ResultCache()
    assert cache.make_key("photos", {"a": 1, "b": 2}) == cache.make_key("photos", {"b": 2, "a": 1})


def test_keys_distinguish_operations_and_arguments():
    """Test that different operations or argument values never share a key."""
    cache = ResultCache()
    keys = {
        cache.make_key("photos", {}),
        cache.make_key("sets", {}),
        cache.make_key("photos", {"page": 1}),
        cache.make_key("photos", {"page": "1"}),
        cache.make_key("photos", {1: "a"}),
        cache.make_key("photos", {"1": "a"}),
        cache.make_key("photos", {"a": 1}),
        cache.make_key("photos", [("a", 1)]),
        cache.make_key("photos", [1, 2]),
        cache.make_key("photos", [2, 1]),
    }
    assert len(keys) == 10


def test_keys_accept_mixed_mapping_key_types():
    """Test that mappings with mixed key types hash without comparing keys."""
    cache = ResultCache()
    key = cache.make_key("photos", {1: "a", "1": 2})
    assert key == cache.make_key("photos", {"1": 2, 1: "a"})
    assert key != cache.make_key("photos", {1: 2, "1": "a"})


def test_with_caching_keeps_similar_parameters_apart():
    """Test that look-alike parameter mappings each run their producer."""
    obj = FlickrObject()
    producer = Mock(side_effect=["int key", "str key"])
    assert obj.with_caching({1: "a"}, "photos", producer) == "int key"
    assert obj.with_caching({"1": "a"}, "photos", producer) == "str key"
    assert producer.call_count == 2


def test_cache_stats():
    """Test hit, miss and size counters."""
    cache = ResultCache()
    cache.fetch("key", lambda: 1)
    cache.fetch("key", lambda: 2)

    stats = cache.get_cache_stats()
    assert stats == {"cache_size": 1, "hits": 1, "misses": 1}
