from basket_server.config import settings as settings_module
from basket_server.config.settings import get_settings


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.setattr(settings_module, "load_dotenv", lambda: False)
    for name in ("DATA_DIR", "DATA_BASE_URL", "DEFAULT_BENCHMARK", "PEERS_LIMIT", "INDEX_BASE_VALUE", "PORT"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.data_dir == "data"
    assert settings.data_base_url is None
    assert settings.default_benchmark == "SPY"
    assert settings.peers_limit == 6
    assert settings.index_base_value == 100.0
    assert settings.port == 8000


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setattr(settings_module, "load_dotenv", lambda: False)
    monkeypatch.setenv("DATA_BASE_URL", "https://data.example.com")
    monkeypatch.setenv("DEFAULT_BENCHMARK", "qqq")
    monkeypatch.setenv("DEFAULT_RANGE", "ytd")
    monkeypatch.setenv("PEERS_LIMIT", "3")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "not-a-number")
    settings = get_settings()
    assert settings.data_base_url == "https://data.example.com"
    assert settings.default_benchmark == "QQQ"
    assert settings.default_range == "YTD"
    assert settings.peers_limit == 3
    assert settings.cache_ttl_seconds == 3600
