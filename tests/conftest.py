import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from ratelimiter.dependencies import get_rate_limiter
from ratelimiter.limits.application.services.rate_limit_evaluator import RateLimitEvaluator
from ratelimiter.limits.application.services.rule_cache import RuleCache
from ratelimiter.limits.infrastructure import models  # noqa: F401  (registers tables)
from ratelimiter.limits.infrastructure.counter_store import RedisCounterStore
from ratelimiter.limits.infrastructure.repositories.rule_repository_impl import SqlAlchemyRuleStore
from ratelimiter.main import create_app
from ratelimiter.shared.database import Base, db_session, make_session_factory
from tests.fakes import CountingRuleStore, FakeClock, FakeRedis


@pytest.fixture
def clock():
    return FakeClock(1_000)


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def rule_store():
    return CountingRuleStore()


@pytest.fixture
def evaluator(rule_store, fake_redis, clock):
    cache = RuleCache(rule_store, clock=clock, ttl_seconds=60)
    return RateLimitEvaluator(cache, RedisCounterStore(fake_redis), clock=clock)


# ---------------------------------------------------------------- database

@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


# ---------------------------------------------------------------- http

@pytest.fixture
def db_evaluator(session_factory, fake_redis, clock):
    """Evaluator reading rules from the sqlite database the API writes to."""
    cache = RuleCache(SqlAlchemyRuleStore(session_factory), clock=clock, ttl_seconds=60)
    return RateLimitEvaluator(cache, RedisCounterStore(fake_redis), clock=clock)


@pytest.fixture
def app(session_factory, db_evaluator):
    application = create_app()

    async def _session():
        async with session_factory() as s:
            yield s

    application.dependency_overrides[db_session] = _session
    application.dependency_overrides[get_rate_limiter] = lambda: db_evaluator
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
