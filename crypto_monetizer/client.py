"""
Async HTTP client for the Crypto Monetizer API.

Error bodies ({"code", "message"}) are turned back into the exception taxonomy;
transport failures and timeouts surface as ServiceUnavailable. Every call is
bounded by the client timeout.
"""

from __future__ import annotations

from typing import Any

import httpx

from crypto_monetizer.catalog.tokens import Token
from crypto_monetizer.core.exceptions import (
    ERRORS_BY_CODE,
    MonetizerError,
    ServiceUnavailable,
    StorageError,
    ValidationError,
)
from crypto_monetizer.database.models import SettingsRecord
from crypto_monetizer.exchange.quotes import ExchangeQuote, sort_quotes
from crypto_monetizer.logging import get_logger
from crypto_monetizer.monetization.sequencer import QuoteFetcher

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SEC = 10.0

# Fallback when the body carries no known code.
_ERRORS_BY_STATUS: dict[int, type[MonetizerError]] = {
    400: ValidationError,
    422: ValidationError,
    500: StorageError,
    503: ServiceUnavailable,
}


def _error_from_response(response: httpx.Response) -> MonetizerError:
    message: str | None = None
    code: str | None = None
    try:
        body = response.json()
        if isinstance(body, dict):
            message = body.get("message") or body.get("detail")
            code = body.get("code")
    except ValueError:
        pass
    cls = ERRORS_BY_CODE.get(code or "") or _ERRORS_BY_STATUS.get(response.status_code, MonetizerError)
    return cls(str(message) if message else None)


class MonetizerClient(QuoteFetcher):
    """
    Thin wrapper over httpx.AsyncClient. Use as an async context manager:

        async with MonetizerClient("http://localhost:3000") as api:
            record = await api.get_settings(wallet)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "MonetizerClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("api_client_timeout", method=method, path=path)
            raise ServiceUnavailable("Request timed out. Please retry.") from e
        except httpx.TransportError as e:
            logger.warning("api_client_transport_error", method=method, path=path, error=str(e))
            raise ServiceUnavailable("Could not reach the server. Please check your connection.") from e
        if response.is_error:
            err = _error_from_response(response)
            logger.info("api_client_error", path=path, status=response.status_code, code=err.code)
            raise err
        return response.json()

    async def get_settings(self, wallet_address: str) -> SettingsRecord:
        data = await self._request("GET", f"/api/settings/{wallet_address}")
        return SettingsRecord(
            wallet_address=data.get("walletAddress") or wallet_address,
            payout_address=data.get("payoutAddress") or "",
        )

    async def save_settings(self, wallet_address: str, payout_address: str) -> None:
        await self._request(
            "POST",
            "/api/settings",
            json={"walletAddress": wallet_address, "payoutAddress": payout_address},
        )

    async def fetch_quotes(self, symbol: str) -> list[ExchangeQuote]:
        data = await self._request("GET", f"/api/rates/{symbol}")
        quotes = [ExchangeQuote(name=q["name"], rate=float(q["rate"]), fee=float(q["fee"])) for q in data]
        return sort_quotes(quotes)

    async def list_tokens(
        self, chain_id: int, search: str | None = None, include_native: bool = False
    ) -> list[Token]:
        params: dict[str, str] = {}
        if search:
            params["search"] = search
        if include_native:
            params["includeNative"] = "true"
        data = await self._request("GET", f"/api/tokens/{chain_id}", params=params or None)
        return [Token(symbol=t["symbol"], chain_id=int(t["chainId"]), address=t["address"]) for t in data]
