from linkshelf.services.cache import TTLCache


def test_get_returns_value_within_ttl(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("a", {"title": "A"})

    clock.advance(60)

    assert cache.get("a") == {"title": "A"}


def test_expired_entry_is_evicted_on_read(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("a", "value")

    clock.advance(61)

    assert cache.get("a") is None
    assert len(cache) == 0


def test_set_overwrites_and_restamps(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("a", "old")
    clock.advance(50)
    cache.set("a", "new")
    clock.advance(50)

    assert cache.get("a") == "new"


def test_invalidate_is_noop_for_missing_key(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("a", 1)

    cache.invalidate("a")
    cache.invalidate("missing")

    assert cache.get("a") is None


def test_default_ttl_is_five_minutes():
    assert TTLCache().ttl_seconds == 300
