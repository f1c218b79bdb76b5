import pytest

from ratelimiter.limits.application.services.rule_cache import RuleCache
from ratelimiter.limits.domain.entities import RuleType
from ratelimiter.shared.exceptions import StoreUnavailableError
from tests.fakes import make_rule


@pytest.fixture
def cache(rule_store, clock):
    rule_store.rules["t1"] = [make_rule(RuleType.GENERAL, 10, 60)]
    return RuleCache(rule_store, clock=clock, ttl_seconds=60)


async def test_second_lookup_within_ttl_uses_cache(cache, rule_store, clock):
    first = await cache.rules_for("t1")
    clock.advance(59)
    second = await cache.rules_for("t1")
    assert first == second
    assert rule_store.fetches == ["t1"]


async def test_lookup_after_ttl_refetches(cache, rule_store, clock):
    await cache.rules_for("t1")
    clock.advance(61)
    await cache.rules_for("t1")
    assert rule_store.fetches == ["t1", "t1"]


async def test_entries_are_per_tenant(cache, rule_store):
    assert len(await cache.rules_for("t1")) == 1
    assert await cache.rules_for("t2") == ()
    await cache.rules_for("t2")
    assert rule_store.fetches == ["t1", "t2"]


async def test_invalidate_forces_refetch(cache, rule_store):
    await cache.rules_for("t1")
    rule_store.rules["t1"].append(make_rule(RuleType.IP, 5, 60))
    cache.invalidate()
    assert len(await cache.rules_for("t1")) == 2
    assert rule_store.fetches == ["t1", "t1"]


async def test_fetch_failure_is_not_cached(cache, rule_store):
    rule_store.error = StoreUnavailableError("down")
    with pytest.raises(StoreUnavailableError):
        await cache.rules_for("t1")
    rule_store.error = None
    assert len(await cache.rules_for("t1")) == 1


async def test_fetch_overlapping_invalidate_is_not_stored(rule_store, clock):
    rule_store.rules["t1"] = [make_rule(RuleType.GENERAL, 10, 60)]
    cache = RuleCache(rule_store, clock=clock, ttl_seconds=60)

    class InvalidatingStore:
        async def fetch_rules(self, tenant_id):
            rules = await rule_store.fetch_rules(tenant_id)
            # a rule is created while this fetch is in flight
            rule_store.rules[tenant_id].append(make_rule(RuleType.IP, 5, 60))
            cache.invalidate()
            return rules

    cache._store = InvalidatingStore()
    assert len(await cache.rules_for("t1")) == 1

    cache._store = rule_store
    assert len(await cache.rules_for("t1")) == 2
    assert rule_store.fetches == ["t1", "t1"]
