import pytest

from hfdlcore.cache import Cache


class FakeClock:
    def __init__(self, now=1000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return Cache("test", ttl=100, expiration_interval=50, clock=clock)


def test_create_and_lookup(cache):
    assert cache.create("a", 1, 1000) is False
    assert cache.lookup("a") == 1
    assert len(cache) == 1


def test_create_replaces_existing(cache):
    cache.create("a", 1, 1000)
    assert cache.create("a", 2, 1000) is True
    assert cache.lookup("a") == 2
    assert len(cache) == 1


def test_lookup_missing(cache):
    assert cache.lookup("missing") is None


def test_delete(cache):
    cache.create("a", 1, 1000)
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.lookup("a") is None
    assert len(cache) == 0


def test_lookup_hides_stale_entry_without_removing(cache, clock):
    cache.create("a", 1, 1000)
    clock.now = 1100
    assert cache.lookup("a") == 1
    clock.now = 1101
    assert cache.lookup("a") is None
    assert len(cache) == 1


def test_expire_waits_for_interval(cache, clock):
    cache.create("a", 1, 800)
    assert cache.expire(1049) == 0
    assert len(cache) == 1


def test_expire_removes_old_entries(cache):
    cache.create("old", 1, 900)
    cache.create("edge", 2, 950)
    cache.create("new", 3, 1000)
    assert cache.expire(1050) == 2
    assert len(cache) == 1
    assert cache.lookup("new") == 3
    assert cache.last_expiration_time == 1050


def test_expire_resets_interval(cache):
    cache.create("a", 1, 900)
    cache.expire(1050)
    cache.create("b", 1, 900)
    assert cache.expire(1060) == 0
    assert len(cache) == 1


def test_default_created_time_uses_clock(cache, clock):
    clock.now = 2000
    cache.create("a", "x")
    clock.now = 2100
    assert cache.lookup("a") == "x"
    clock.now = 2101
    assert cache.lookup("a") is None


def test_default_name():
    c = Cache(ttl=10, expiration_interval=10, clock=lambda: 0)
    assert c.name == "__default__"