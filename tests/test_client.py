"""
Pytest tests for MonetizerClient against the app through httpx.ASGITransport,
and for the CLI driving a full sequence through the client.
"""

from __future__ import annotations

import asyncio
import random
from decimal import Decimal

import httpx
import pytest

from crypto_monetizer.client import MonetizerClient
from crypto_monetizer.core.exceptions import ConfigurationError, ServiceUnavailable, StorageError, ValidationError
from crypto_monetizer.exchange import FailureInjectionPolicy, SyntheticQuoteSource
from crypto_monetizer.monetization import MonetizationSequencer, MonetizationSession, Phase
from crypto_monetizer.scheduler import ManualScheduler

WALLET = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"
BASE_URL = "http://monetizer.test"


def _client(app) -> MonetizerClient:
    return MonetizerClient(BASE_URL, transport=httpx.ASGITransport(app=app))


def test_settings_round_trip_through_client(app):
    async def scenario():
        async with _client(app) as api:
            before = await api.get_settings(WALLET)
            await api.save_settings(WALLET, "0xDEF")
            after = await api.get_settings(WALLET)
            return before, after

    before, after = asyncio.run(scenario())
    assert before.payout_address == ""
    assert after.wallet_address == WALLET
    assert after.payout_address == "0xDEF"


def test_client_fetches_sorted_quotes_and_tokens(app):
    async def scenario():
        async with _client(app) as api:
            return await api.fetch_quotes("ETH"), await api.list_tokens(56, search="b")

    quotes, tokens = asyncio.run(scenario())
    assert len(quotes) == 6
    assert [q.rate for q in quotes] == sorted((q.rate for q in quotes), reverse=True)
    assert [t.symbol for t in tokens] == ["SHIB", "BabyDoge", "BTC"]


def test_client_lists_native_row_on_request(app):
    async def scenario():
        async with _client(app) as api:
            return await api.list_tokens(1, include_native=True)

    tokens = asyncio.run(scenario())
    assert [t.symbol for t in tokens] == ["ETH", "USDT", "WBTC"]
    assert tokens[0].is_native


def test_client_translates_error_codes(settings_db):
    from crypto_monetizer.api_server.server import create_app

    failing = SyntheticQuoteSource(policy=FailureInjectionPolicy(enabled=True, probability=1.0), rng=random.Random(1))
    app = create_app(quote_source=failing)

    async def scenario():
        async with _client(app) as api:
            with pytest.raises(ServiceUnavailable):
                await api.fetch_quotes("ETH")
            with pytest.raises(ValidationError):
                await api.save_settings("  ", "x")

    asyncio.run(scenario())


def test_client_maps_configuration_error(unconfigured_store, steady_source):
    from crypto_monetizer.api_server.server import create_app

    app = create_app(quote_source=steady_source)

    async def scenario():
        async with _client(app) as api:
            await api.save_settings(WALLET, "x")

    with pytest.raises(ConfigurationError):
        asyncio.run(scenario())


def test_client_falls_back_to_status_and_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/api/settings"):
            return httpx.Response(500, text="boom")
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with MonetizerClient(BASE_URL, transport=httpx.MockTransport(handler)) as api:
            with pytest.raises(StorageError):
                await api.get_settings(WALLET)
            with pytest.raises(ServiceUnavailable, match="Could not reach"):
                await api.fetch_quotes("ETH")

    asyncio.run(scenario())


def test_sequencer_over_http(app):
    """Quote fetch over HTTP, then the timed phases with no further requests."""
    requests_seen = []

    async def scenario():
        transport = httpx.ASGITransport(app=app)

        class CountingTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                requests_seen.append(request.url.path)
                return await transport.handle_async_request(request)

        scheduler = ManualScheduler()
        async with MonetizerClient(BASE_URL, transport=CountingTransport()) as api:
            seq = MonetizationSequencer(api, scheduler)
            session = MonetizationSession(payout_address="0xDEF", amount=Decimal("2"))
            outcome = await seq.monetize(session)
            scheduler.run_until_idle()
            return outcome, session

    outcome, session = asyncio.run(scenario())
    assert outcome.ok is True
    assert session.phase == Phase.SUCCESS
    assert requests_seen == ["/api/rates/ETH"]


def test_cli_runs_to_success(app, settings_db, monkeypatch, capsys):
    from crypto_monetizer.tools import monetize

    settings_db.upsert_settings(WALLET, "0xDEF")
    monkeypatch.setattr(
        monetize,
        "MonetizerClient",
        lambda base_url, timeout: MonetizerClient(base_url, timeout=timeout, transport=httpx.ASGITransport(app=app)),
    )
    code = asyncio.run(monetize.run(WALLET, Decimal("1"), "ETH", BASE_URL, time_unit=0.01, timeout=5.0))
    out = capsys.readouterr().out
    assert code == monetize.EXIT_OK
    assert "phase=comparing" in out
    assert "phase=executing" in out
    assert "phase=success" in out
    assert "Binance" in out


def test_cli_without_payout_exits_2(app, monkeypatch):
    from crypto_monetizer.tools import monetize

    monkeypatch.setattr(
        monetize,
        "MonetizerClient",
        lambda base_url, timeout: MonetizerClient(base_url, timeout=timeout, transport=httpx.ASGITransport(app=app)),
    )
    code = asyncio.run(monetize.run("0xNEW", Decimal("1"), "ETH", BASE_URL, time_unit=0.01, timeout=5.0))
    assert code == monetize.EXIT_NO_PAYOUT
