"""
Pytest tests for the token catalog and environment configuration.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from crypto_monetizer.catalog import SUPPORTED_TOKENS, native_symbol, native_token, token_price_usd, tokens_for_chain
from crypto_monetizer.config import reload_settings
from crypto_monetizer.core.exceptions import ConfigurationError


# --- Token catalog ---


def test_tokens_filtered_by_chain():
    assert [t.symbol for t in tokens_for_chain(1)] == ["USDT", "WBTC"]
    assert [t.symbol for t in tokens_for_chain(56)] == ["SHIB", "BabyDoge", "BTC", "USD.Z", "LitterCoin"]
    assert tokens_for_chain(42161) == []


def test_token_search_is_case_insensitive_substring():
    assert [t.symbol for t in tokens_for_chain(56, "BTC")] == ["BTC"]
    assert [t.symbol for t in tokens_for_chain(56, "coin")] == ["LitterCoin"]
    assert [t.symbol for t in tokens_for_chain(1, "  ")] == ["USDT", "WBTC"]


def test_placeholder_tokens_and_native_symbol():
    placeholders = {t.symbol for t in SUPPORTED_TOKENS if t.is_placeholder}
    assert placeholders == {"USD.Z", "LitterCoin"}
    assert native_symbol(56) == "BNB"
    assert native_symbol(1) == "ETH"
    assert native_symbol(None) == "ETH"


def test_native_row_matches_search_on_its_symbol():
    assert [t.symbol for t in tokens_for_chain(1, include_native=True)] == ["ETH", "USDT", "WBTC"]
    assert [t.symbol for t in tokens_for_chain(56, "bn", include_native=True)] == ["BNB"]
    assert [t.symbol for t in tokens_for_chain(1, "usd", include_native=True)] == ["USDT"]
    assert native_token(56).is_native and not native_token(56).is_placeholder


def test_display_prices():
    prices = {t.symbol: token_price_usd(t) for t in SUPPORTED_TOKENS}
    assert prices["WBTC"] == prices["BTC"] == Decimal("67000")
    assert prices["SHIB"] == Decimal("0.00003")
    assert prices["USDT"] == prices["LitterCoin"] == Decimal("1")
    assert token_price_usd(native_token(1)) == Decimal("2500")
    assert token_price_usd(native_token(56)) == Decimal("625")


# --- Config ---


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "MONETIZER_STORAGE_PROFILE",
        "MONETIZER_DB_PATH",
        "DATABASE_URL",
        "MONETIZER_FAILURE_INJECTION",
        "MONETIZER_FAILURE_PROBABILITY",
        "MONETIZER_BASE_PRICE",
        "API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
    monkeypatch.undo()
    reload_settings()


def test_defaults(clean_env):
    settings = reload_settings()
    assert settings.storage_profile == "local"
    assert settings.failure_injection is True
    assert settings.failure_probability == 0.1
    assert settings.base_price == 1.0
    assert settings.resolved_database_url() == "sqlite:///monetizer.db"


def test_hosted_profile_needs_database_url(clean_env):
    clean_env.setenv("MONETIZER_STORAGE_PROFILE", "hosted")
    assert reload_settings().resolved_database_url() is None
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db/monetizer")
    assert reload_settings().resolved_database_url() == "postgresql://u:p@db/monetizer"


def test_failure_injection_can_be_disabled(clean_env):
    clean_env.setenv("MONETIZER_FAILURE_INJECTION", "off")
    assert reload_settings().failure_injection is False


@pytest.mark.parametrize(
    "name,value",
    [
        ("MONETIZER_STORAGE_PROFILE", "cloud"),
        ("MONETIZER_FAILURE_INJECTION", "maybe"),
        ("MONETIZER_FAILURE_PROBABILITY", "1.5"),
        ("MONETIZER_BASE_PRICE", "-2"),
        ("API_PORT", "http"),
    ],
)
def test_invalid_values_raise_configuration_error(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ConfigurationError):
        reload_settings()
