import re

import pytest

from pkg.third_party_auth import OAuthStateStore, StateGenerationError, generate_state


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_generate_state_format():
    pattern = re.compile(r"^[0-9a-f]{32}$")
    for _ in range(100):
        assert pattern.match(generate_state())


def test_generate_state_unique():
    states = {generate_state() for _ in range(10_000)}
    assert len(states) == 10_000


def test_generate_state_entropy_failure(monkeypatch):
    def _broken(_nbytes):
        raise NotImplementedError("no urandom")

    monkeypatch.setattr("pkg.third_party_auth.state.secrets.token_hex", _broken)

    with pytest.raises(StateGenerationError):
        generate_state()


class TestOAuthStateStore:
    def test_consume_once(self):
        store = OAuthStateStore(ttl_seconds=60)
        state = store.issue()

        assert store.consume(state) is True
        assert store.consume(state) is False

    def test_unknown_and_empty(self):
        store = OAuthStateStore(ttl_seconds=60)

        assert store.consume("f" * 32) is False
        assert store.consume("") is False

    def test_expired(self):
        clock = FakeClock()
        store = OAuthStateStore(ttl_seconds=60, clock=clock)
        state = store.issue()

        clock.now += 61
        assert store.consume(state) is False

    def test_within_ttl(self):
        clock = FakeClock()
        store = OAuthStateStore(ttl_seconds=60, clock=clock)
        state = store.issue()

        clock.now += 60
        assert store.consume(state) is True

    def test_expired_entries_are_purged(self):
        clock = FakeClock()
        store = OAuthStateStore(ttl_seconds=60, clock=clock)
        store.issue()
        store.issue()
        assert len(store) == 2

        clock.now += 120
        store.issue()
        assert len(store) == 1

    def test_invalid_ttl(self):
        with pytest.raises(ValueError):
            OAuthStateStore(ttl_seconds=0)

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError):
            OAuthStateStore(max_entries=0)

    def test_size_is_capped(self):
        store = OAuthStateStore(ttl_seconds=600, max_entries=50)
        states = [store.issue() for _ in range(200)]

        assert len(store) == 50
        # 最早签发的被淘汰，最新的仍可用
        assert store.consume(states[0]) is False
        assert store.consume(states[-1]) is True

    def test_purge_stops_at_first_live_entry(self):
        clock = FakeClock()
        store = OAuthStateStore(ttl_seconds=60, clock=clock)
        old = store.issue()
        clock.now += 30
        young = store.issue()

        clock.now += 40
        store.issue()

        assert len(store) == 2
        assert store.consume(old) is False
        assert store.consume(young) is True
