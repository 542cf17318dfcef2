"""
Pytest tests for the HTTP surface (settings, rates, tokens) via FastAPI TestClient.
"""

from __future__ import annotations

import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from crypto_monetizer.exchange import EXCHANGE_FEES, FailureInjectionPolicy, QuoteSource, SyntheticQuoteSource

WALLET = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"


# --- Settings ---


def test_get_settings_default(client):
    r = client.get("/api/settings/0xNEW")
    assert r.status_code == 200
    assert r.json() == {"walletAddress": "0xNEW", "payoutAddress": ""}


def test_post_then_get_settings(client, settings_db):
    r = client.post("/api/settings", json={"walletAddress": "0xABC", "payoutAddress": "0xDEF"})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    r = client.get("/api/settings/0xABC")
    assert r.json() == {"walletAddress": "0xABC", "payoutAddress": "0xDEF"}
    assert settings_db.count_settings() == 1


def test_post_settings_accepts_snake_case(client):
    r = client.post("/api/settings", json={"wallet_address": WALLET, "binance_usdt_address": "T123"})
    assert r.status_code == 200
    assert client.get(f"/api/settings/{WALLET}").json()["payoutAddress"] == "T123"


def test_post_settings_accepts_long_payout_address(client):
    payout = "T" * 300
    r = client.post("/api/settings", json={"walletAddress": WALLET, "payoutAddress": payout})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert client.get(f"/api/settings/{WALLET}").json()["payoutAddress"] == payout


def test_post_settings_overlong_wallet_is_400(client):
    r = client.post("/api/settings", json={"walletAddress": "0x" + "a" * 200, "payoutAddress": "x"})
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_post_settings_missing_wallet_is_400(client):
    r = client.post("/api/settings", json={"payoutAddress": "x"})
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_post_settings_blank_wallet_is_400(client):
    r = client.post("/api/settings", json={"walletAddress": "  ", "payoutAddress": "x"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "validation_error"
    assert "walletAddress" in body["message"]


def test_storage_fault_is_500_with_message(client, settings_db, monkeypatch):
    def broken_scope():
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(settings_db, "_session_scope", broken_scope)
    r = client.get(f"/api/settings/{WALLET}")
    assert r.status_code == 500
    assert r.json()["code"] == "storage_error"
    assert r.json()["message"]
    r = client.post("/api/settings", json={"walletAddress": WALLET, "payoutAddress": "x"})
    assert r.status_code == 500
    assert r.json()["code"] == "storage_error"


def test_missing_backend_configuration_is_500(unconfigured_store, steady_source):
    from crypto_monetizer.api_server.server import create_app

    client = TestClient(create_app(quote_source=steady_source))
    assert client.get(f"/api/settings/{WALLET}").json()["payoutAddress"] == ""
    r = client.post("/api/settings", json={"walletAddress": WALLET, "payoutAddress": "x"})
    assert r.status_code == 500
    assert r.json()["code"] == "configuration_error"


# --- Rates ---


def test_rates_sorted_with_fixed_fees(client):
    r = client.get("/api/rates/ETH")
    assert r.status_code == 200
    quotes = r.json()
    assert len(quotes) == 6
    assert {q["name"] for q in quotes} == set(EXCHANGE_FEES)
    for q in quotes:
        assert q["fee"] == EXCHANGE_FEES[q["name"]]
        assert 0.99 <= q["rate"] <= 1.01
    rates = [q["rate"] for q in quotes]
    assert rates == sorted(rates, reverse=True)


def test_rates_injected_failure_is_503(settings_db):
    from crypto_monetizer.api_server.server import create_app

    always_fail = SyntheticQuoteSource(
        policy=FailureInjectionPolicy(enabled=True, probability=1.0),
        rng=random.Random(1),
    )
    client = TestClient(create_app(quote_source=always_fail))
    r = client.get("/api/rates/ETH")
    assert r.status_code == 503
    assert r.json()["code"] == "service_unavailable"
    assert r.json()["message"]


class _BrokenSource(QuoteSource):
    def get_quotes(self, symbol):
        raise RuntimeError("feed handler crashed")


def test_unexpected_error_is_500_internal_error(settings_db):
    from crypto_monetizer.api_server.server import create_app

    client = TestClient(create_app(quote_source=_BrokenSource()), raise_server_exceptions=False)
    r = client.get("/api/rates/ETH")
    assert r.status_code == 500
    assert r.json()["code"] == "internal_error"
    assert "feed handler crashed" not in r.json()["message"]


# --- Tokens / health ---


def test_tokens_for_chain(client):
    r = client.get("/api/tokens/1")
    assert r.status_code == 200
    assert [t["symbol"] for t in r.json()] == ["USDT", "WBTC"]
    r = client.get("/api/tokens/56", params={"search": "doge"})
    assert [t["symbol"] for t in r.json()] == ["BabyDoge"]
    assert client.get("/api/tokens/137").json() == []


def test_tokens_include_native_row_and_prices(client):
    r = client.get("/api/tokens/56", params={"search": "b", "includeNative": "true"})
    assert r.status_code == 200
    rows = r.json()
    assert [t["symbol"] for t in rows] == ["BNB", "SHIB", "BabyDoge", "BTC"]
    prices = {t["symbol"]: t["priceUsd"] for t in rows}
    assert prices == {"BNB": 625.0, "SHIB": 0.00003, "BabyDoge": 1.0, "BTC": 67000.0}
    r = client.get("/api/tokens/1", params={"search": "ethereum", "includeNative": "true"})
    assert r.json() == []


@pytest.mark.parametrize("path", ["/health"])
def test_health(client, path):
    r = client.get(path)
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("X-Request-ID")
