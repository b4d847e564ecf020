from marathon_pronouns.resolution.cache import TTLCache


class TestTTLCache:
    def test_get_missing_key(self, cache):
        assert cache.get("nobody") is None

    def test_set_then_get(self, cache):
        cache.set("alice", "she/her")
        assert cache.get("alice") == "she/her"

    def test_entry_expires_lazily_on_read(self, cache, clock):
        cache.set("alice", "she/her")
        clock.now += 3599
        assert cache.get("alice") == "she/her"

        clock.now += 1
        assert len(cache) == 1  # not swept until read
        assert cache.get("alice") is None
        assert len(cache) == 0

    def test_overwrite_refreshes_expiry(self, cache, clock):
        cache.set("bob", "he/him")
        clock.now += 3000
        cache.set("bob", "other")
        clock.now += 3000
        assert cache.get("bob") == "other"

    def test_clear(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", "he/him")
        cache.clear()
        assert cache.get("a") is None
