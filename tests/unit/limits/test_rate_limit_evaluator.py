import asyncio

import pytest

from ratelimiter.limits.application.services.rate_limit_evaluator import FAIL_OPEN_EXPLANATION
from ratelimiter.limits.domain.entities import RuleType
from ratelimiter.shared.exceptions import StoreUnavailableError
from tests.fakes import make_rule

T = "tenant-a"


def _rules(rule_store, *rules):
    rule_store.rules[T] = list(rules)


async def test_no_rules_allows_without_figures(evaluator):
    d = await evaluator.check_rate_limit(T, "10.0.0.1", "/api/x")
    assert d.allowed is True
    assert d.limit is None and d.remaining is None and d.reset_epoch_seconds is None
    assert d.headers() == {}


async def test_general_limit_counts_down_then_denies(evaluator, rule_store, clock):
    _rules(rule_store, make_rule(RuleType.GENERAL, 3, 30))
    clock.set(1_000)

    remaining = []
    for _ in range(3):
        d = await evaluator.check_rate_limit(T, "10.0.0.1")
        assert d.allowed
        remaining.append(d.remaining)
    assert remaining == [2, 1, 0]

    d = await evaluator.check_rate_limit(T, "10.0.0.1")
    assert d.allowed is False
    assert d.limit == 3
    assert d.remaining == 0
    assert d.reset_epoch_seconds == 1_020
    assert d.explanation == "Rate limit exceeded for GENERAL rule. Limit: 3 requests per 30s"


async def test_new_window_resets_count(evaluator, rule_store, clock):
    _rules(rule_store, make_rule(RuleType.GENERAL, 2, 60))
    clock.set(120)
    assert (await evaluator.check_rate_limit(T, "a")).remaining == 1
    clock.set(179)
    assert (await evaluator.check_rate_limit(T, "a")).remaining == 0
    assert (await evaluator.check_rate_limit(T, "a")).allowed is False
    clock.set(180)
    d = await evaluator.check_rate_limit(T, "a")
    assert d.allowed and d.remaining == 1
    assert d.reset_epoch_seconds == 240


async def test_ip_rule_counts_each_address_separately(evaluator, rule_store):
    _rules(rule_store, make_rule(RuleType.IP, 1, 60))
    assert (await evaluator.check_rate_limit(T, "10.0.0.1")).allowed
    assert not (await evaluator.check_rate_limit(T, "10.0.0.1")).allowed
    assert (await evaluator.check_rate_limit(T, "10.0.0.2")).allowed


async def test_api_rule_applies_only_to_matching_targets(evaluator, rule_store):
    _rules(rule_store, make_rule(RuleType.API, 1, 60, "/api/users/*"))

    assert (await evaluator.check_rate_limit(T, "ip", "/api/users/1")).allowed
    denied = await evaluator.check_rate_limit(T, "ip", "/api/users/1")
    assert not denied.allowed
    assert denied.explanation == "Rate limit exceeded for API rule. Limit: 1 requests per 60s"

    # counted per target
    assert (await evaluator.check_rate_limit(T, "ip", "/API/USERS/2")).allowed
    # no match and no target leave the rule out entirely
    other = await evaluator.check_rate_limit(T, "ip", "/api/orders/1")
    assert other.allowed and other.limit is None
    assert (await evaluator.check_rate_limit(T, "ip")).allowed


async def test_general_rule_is_checked_before_ip(evaluator, rule_store, fake_redis, clock):
    # IP rule created first; GENERAL still wins on evaluation order
    _rules(rule_store, make_rule(RuleType.IP, 100, 60, order=0), make_rule(RuleType.GENERAL, 5, 60, order=1))
    for _ in range(5):
        assert (await evaluator.check_rate_limit(T, "1.2.3.4")).allowed

    d = await evaluator.check_rate_limit(T, "1.2.3.4")
    assert not d.allowed
    assert d.explanation.startswith("Rate limit exceeded for GENERAL rule")

    window = int(clock.now() // 60)
    # the denied request never reached the IP counter
    assert fake_redis.data[f"rate_limit:{T}:IP:1.2.3.4:{window}"] == 5
    assert fake_redis.data[f"rate_limit:{T}:GENERAL:general:{window}"] == 6


async def test_allowed_decision_reports_last_rule_checked(evaluator, rule_store):
    _rules(
        rule_store,
        make_rule(RuleType.GENERAL, 10, 60),
        make_rule(RuleType.IP, 3, 30),
        make_rule(RuleType.API, 7, 120, "/api/*"),
    )
    d = await evaluator.check_rate_limit(T, "ip", "/other")
    assert (d.limit, d.remaining) == (3, 2)

    d = await evaluator.check_rate_limit(T, "ip", "/api/x")
    assert (d.limit, d.remaining) == (7, 6)


async def test_counter_key_format_and_expiry(evaluator, rule_store, fake_redis, clock):
    _rules(rule_store, make_rule(RuleType.GENERAL, 10, 60), make_rule(RuleType.API, 10, 30, "/api/*"))
    clock.set(1_000)
    await evaluator.check_rate_limit(T, "ip", "/api/a")
    await evaluator.check_rate_limit(T, "ip", "/api/a")

    assert fake_redis.data == {
        f"rate_limit:{T}:GENERAL:general:16": 2,
        f"rate_limit:{T}:API:/api/a:33": 2,
    }
    assert sorted(fake_redis.expire_calls) == [
        (f"rate_limit:{T}:API:/api/a:33", 30),
        (f"rate_limit:{T}:GENERAL:general:16", 60),
    ]


async def test_concurrent_increments_are_not_lost(evaluator, rule_store):
    _rules(rule_store, make_rule(RuleType.GENERAL, 5, 60))
    decisions = await asyncio.gather(*(evaluator.check_rate_limit(T, "ip") for _ in range(12)))
    assert sum(d.allowed for d in decisions) == 5


async def test_counter_store_failure_fails_open(evaluator, rule_store, fake_redis):
    _rules(rule_store, make_rule(RuleType.GENERAL, 1, 60))
    fake_redis.fail = True
    for _ in range(3):
        d = await evaluator.check_rate_limit(T, "ip")
        assert d.allowed
        assert d.explanation == FAIL_OPEN_EXPLANATION
        assert d.limit is None


async def test_rule_store_failure_fails_open(evaluator, rule_store):
    rule_store.error = StoreUnavailableError("db down")
    d = await evaluator.check_rate_limit(T, "ip")
    assert d.allowed and d.explanation == FAIL_OPEN_EXPLANATION


async def test_cancellation_is_not_swallowed(evaluator, rule_store):
    rule_store.error = asyncio.CancelledError()
    with pytest.raises(asyncio.CancelledError):
        await evaluator.check_rate_limit(T, "ip")


async def test_rules_cached_between_checks(evaluator, rule_store, clock):
    _rules(rule_store, make_rule(RuleType.GENERAL, 100, 60))
    for _ in range(4):
        await evaluator.check_rate_limit(T, "ip")
    assert rule_store.fetches == [T]
    clock.advance(61)
    await evaluator.check_rate_limit(T, "ip")
    assert rule_store.fetches == [T, T]


async def test_rules_of_one_kind_run_in_store_order(evaluator, rule_store, clock):
    _rules(rule_store, make_rule(RuleType.GENERAL, 10, 60, order=0), make_rule(RuleType.GENERAL, 2, 30, order=1))
    clock.set(1_000)

    first = await evaluator.check_rate_limit(T, "ip")
    second = await evaluator.check_rate_limit(T, "ip")
    assert (first.limit, first.remaining, first.reset_epoch_seconds) == (2, 1, 1_020)
    assert (second.limit, second.remaining) == (2, 0)

    denied = await evaluator.check_rate_limit(T, "ip")
    assert not denied.allowed
    assert denied.limit == 2
    assert denied.reset_epoch_seconds == 1_020
    assert denied.explanation == "Rate limit exceeded for GENERAL rule. Limit: 2 requests per 30s"
