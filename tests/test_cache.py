import json

from cache import CACHE_KEY_PREFIX, CACHE_TTL_SECONDS, ResponseCache, cache_key


def test_cache_key_ignores_ordering():
    first = {"method": "user.gettopalbums", "user": "alice", "period": "7day", "api_key": "k"}
    second = {"api_key": "k", "period": "7day", "user": "alice", "method": "user.gettopalbums"}
    assert cache_key(first) == cache_key(second)


def test_cache_key_ignores_blank_values():
    base = {"method": "artist.getinfo", "artist": "Burial"}
    assert cache_key(base) == cache_key({**base, "user": "", "album": None})


def test_cache_key_changes_with_parameters():
    base = {"method": "user.gettopartists", "user": "alice"}
    assert cache_key(base) != cache_key({**base, "period": "1month"})
    assert cache_key(base) != cache_key({**base, "user": "bob"})
    assert cache_key({**base, "period": "1month"}) != cache_key({**base, "period": "7day"})


def test_cache_key_is_prefixed_digest():
    key = cache_key({"method": "track.getinfo"})
    assert key.startswith(CACHE_KEY_PREFIX)
    assert len(key) == len(CACHE_KEY_PREFIX) + 32


def test_get_put_and_expiry(clock):
    cache = ResponseCache(None, clock=clock)
    assert cache.get("k") is None

    cache.put("k", {"topalbums": {}})
    clock.advance(CACHE_TTL_SECONDS - 1)
    assert cache.get("k") == {"topalbums": {}}

    clock.advance(1)
    assert cache.get("k") is None


def test_put_replaces_previous_entry(clock):
    cache = ResponseCache(None, clock=clock)
    cache.put("k", 1)
    cache.put("k", 2)
    assert cache.get("k") == 2


def test_entries_survive_on_disk(tmp_path, clock):
    ResponseCache(str(tmp_path), clock=clock).put("k", {"artist": {"name": "Burial"}})

    reloaded = ResponseCache(str(tmp_path), clock=clock)
    assert reloaded.get("k") == {"artist": {"name": "Burial"}}

    clock.advance(CACHE_TTL_SECONDS)
    assert reloaded.get("k") is None


def test_corrupted_cache_file_is_a_miss(tmp_path, clock):
    (tmp_path / "k.json").write_text("{not json")
    (tmp_path / "other.json").write_text(json.dumps({"unexpected": True}))

    cache = ResponseCache(str(tmp_path), clock=clock)
    assert cache.get("k") is None
    assert cache.get("other") is None
