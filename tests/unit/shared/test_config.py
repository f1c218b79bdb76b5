import pytest

from ratelimiter.shared.config import DEFAULT_RULE_CACHE_TTL_SECONDS, Settings, get_settings


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_defaults():
    s = Settings()
    assert s.is_local and not s.is_prod
    assert s.rule_cache_ttl_seconds == DEFAULT_RULE_CACHE_TTL_SECONDS == 60
    assert s.database_url.startswith("postgresql+asyncpg://")


def test_env_overrides(monkeypatch, fresh_settings):
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6380/2")
    monkeypatch.setenv("RULE_CACHE_TTL_SECONDS", "15")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./rl.db")
    s = fresh_settings()
    assert s.is_staging
    assert s.redis_url == "redis://cache:6380/2"
    assert s.rule_cache_ttl_seconds == 15


def test_safe_dict_masks_credentials():
    s = Settings(database_url="postgresql+asyncpg://user:secret@db:5432/rl")
    d = s.safe_dict()
    assert "secret" not in d["database_url"]
    assert d["database_url"] == "postgresql+asyncpg://***@db"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"environment": "qa"},
        {"database_url": "mysql://x@y/z"},
        {"redis_url": "http://localhost:6379"},
        {"rule_cache_ttl_seconds": 0},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
    ],
)
def test_invalid_settings_rejected(kwargs):
    with pytest.raises(ValueError):
        Settings(**kwargs)


def test_non_integer_env_rejected(monkeypatch, fresh_settings):
    monkeypatch.setenv("DATABASE_POOL_SIZE", "many")
    with pytest.raises(ValueError):
        fresh_settings()
