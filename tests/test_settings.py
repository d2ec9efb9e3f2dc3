import importlib
import os
from types import ModuleType

import pytest


def _reload_settings_with_env(
    monkeypatch: pytest.MonkeyPatch, env: dict[str, str | None]
) -> ModuleType:
    # Clear related envs first to avoid leakage across tests
    prefixes = ("APP_", "LEDGER_", "INDEXER_", "PRICE_", "LOG_")
    for key in list(os.environ.keys()):
        if key.startswith(prefixes):
            monkeypatch.delenv(key, raising=False)

    for k, v in env.items():
        if v is None:
            monkeypatch.delenv(k, raising=False)
        else:
            monkeypatch.setenv(k, str(v))

    import localmoney.config.settings as settings

    settings = importlib.reload(settings)
    return settings


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    settings = _reload_settings_with_env(monkeypatch, {})

    assert settings.indexer_settings.scan_interval_sec == 30.0
    assert settings.price_settings.cache_ttl_sec == 60.0
    assert settings.price_settings.confidence_ratio == 0.01
    assert settings.price_settings.tolerance == 0.05
    assert settings.price_settings.api_key is None
    assert "SOL/USD" in settings.price_settings.feeds
    assert settings.app_settings.debug is False
    assert settings.ledger_settings.profile_program_id == "8FJf3ymGwZ2ctUP85QRCsE2kMcuQY5Eu7X3dyXr7XakD"
    assert settings.logging_settings.level == "INFO"


def test_env_override(monkeypatch: pytest.MonkeyPatch):
    settings = _reload_settings_with_env(
        monkeypatch,
        {
            "APP_DEBUG": "true",
            "LEDGER_TRADE_PROGRAM_ID": "trade-program",
            "INDEXER_SCAN_INTERVAL_SEC": "5",
            "PRICE_FALLBACK_URL": "https://prices.example.com",
            "PRICE_API_KEY": "secret",
            "PRICE_FEEDS": '{"SOL/EUR": "feed-address"}',
            "LOG_TO_FILE": "true",
        },
    )

    assert settings.app_settings.debug is True
    assert settings.ledger_settings.trade_program_id == "trade-program"
    assert settings.indexer_settings.scan_interval_sec == 5.0
    assert settings.price_settings.fallback_url == "https://prices.example.com"
    assert settings.price_settings.api_key == "secret"
    assert settings.price_settings.feeds == {"SOL/EUR": "feed-address"}
    assert settings.logging_settings.to_file is True
