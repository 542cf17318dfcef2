"""
Run one simulated monetization against a running API.

Loads the wallet's payout address, fetches quotes through the API, prints the
comparison table and follows the sequencer until `success`. No funds move.

Usage:
  python -m crypto_monetizer.tools.monetize --wallet 0xABC --amount 1.5
  python -m crypto_monetizer.tools.monetize --wallet 0xABC --time-unit 0.1 --symbol BNB

Exit codes: 0 success, 1 failure, 2 payout address not configured.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from decimal import Decimal

from crypto_monetizer.client import DEFAULT_BASE_URL, MonetizerClient
from crypto_monetizer.core.exceptions import MonetizerError, PayoutAddressRequired
from crypto_monetizer.exchange.quotes import ExchangeQuote, reference_price, value_quotes
from crypto_monetizer.logging import get_logger
from crypto_monetizer.monetization.sequencer import (
    COMPARING_DELAY_UNITS,
    EXECUTING_DELAY_UNITS,
    MonetizationSequencer,
    MonetizationSession,
    Phase,
    parse_amount,
)
from crypto_monetizer.scheduler.engine import AsyncioScheduler

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_PAYOUT = 2


def format_quote_table(quotes: list[ExchangeQuote], amount: Decimal, symbol: str) -> str:
    price = reference_price(symbol)
    lines = [f"{'Exchange':<10} {'Rate':>9} {'Fee':>7} {'Fee USD':>12} {'Net USD':>14}"]
    for v in value_quotes(quotes, amount, price):
        lines.append(
            f"{v.name:<10} {v.rate:>9.5f} {v.fee * 100:>6.2f}% {v.fee_cost:>12,.2f} {v.net:>14,.2f}"
        )
    return "\n".join(lines)


async def run(wallet: str, amount: Decimal, symbol: str, base_url: str, time_unit: float, timeout: float) -> int:
    done = asyncio.Event()

    def on_phase(session: MonetizationSession) -> None:
        print(f"[monetize] phase={session.phase.value}")
        if session.phase in (Phase.SUCCESS, Phase.IDLE):
            done.set()

    scheduler = AsyncioScheduler()
    try:
        async with MonetizerClient(base_url, timeout=timeout) as api:
            try:
                record = await api.get_settings(wallet)
            except MonetizerError as e:
                print(f"[monetize] could not load settings: {e.message}", file=sys.stderr)
                return EXIT_FAILED

            session = MonetizationSession(payout_address=record.payout_address, amount=amount, symbol=symbol)
            sequencer = MonetizationSequencer(
                api,
                scheduler,
                time_unit_sec=time_unit,
                quote_timeout_sec=timeout,
                listener=on_phase,
            )
            try:
                outcome = await sequencer.monetize(session)
            except PayoutAddressRequired as e:
                print(f"[monetize] {e.message} (POST /api/settings)", file=sys.stderr)
                return EXIT_NO_PAYOUT

            if not outcome.ok:
                print(f"[monetize] failed: {outcome.error}", file=sys.stderr)
                return EXIT_FAILED

            print(format_quote_table(outcome.quotes, session.amount, symbol))
            best = session.best_quote
            if best is not None:
                print(f"[monetize] best route: {best.name} -> payout {record.payout_address}")
            budget = (COMPARING_DELAY_UNITS + EXECUTING_DELAY_UNITS) * time_unit + 5.0
            try:
                await asyncio.wait_for(done.wait(), budget)
            except asyncio.TimeoutError:
                sequencer.teardown(session)
                print("[monetize] sequence did not finish in time", file=sys.stderr)
                return EXIT_FAILED
            return EXIT_OK if session.phase == Phase.SUCCESS else EXIT_FAILED
    finally:
        scheduler.shutdown()


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate one monetization run against the API")
    parser.add_argument("--wallet", required=True, help="Connected wallet address")
    parser.add_argument("--amount", default="1.0", help="Amount of the base asset (default 1.0)")
    parser.add_argument("--symbol", default="ETH", help="Asset symbol to quote (default ETH)")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    parser.add_argument("--time-unit", type=float, default=1.0, help="Seconds per sequencer time unit")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    args = parser.parse_args()

    try:
        amount = parse_amount(args.amount)
    except MonetizerError as e:
        parser.error(e.message)
    if args.time_unit <= 0:
        parser.error("--time-unit must be positive")

    logger.info("monetize_cli_start", symbol=args.symbol, base_url=args.base_url)
    return asyncio.run(run(args.wallet, amount, args.symbol, args.base_url, args.time_unit, args.timeout))


if __name__ == "__main__":
    sys.exit(main())
