"""
Monetization sequencer: idle -> comparing -> executing -> success.

Purely presentational. Quotes are fetched once on entering `comparing`; the
remaining transitions are timers. Nothing is signed or sent on-chain.

Each run gets a run id. Cancelling, tearing down or starting a new run bumps
the id, so late quote responses and stale timers are discarded instead of
touching the session.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Optional

from crypto_monetizer.core.exceptions import (
    MonetizerError,
    PayoutAddressRequired,
    SequencerBusy,
    ServiceUnavailable,
    ValidationError,
)
from crypto_monetizer.exchange.quotes import ExchangeQuote, QuoteSource
from crypto_monetizer.logging import get_logger, short_address
from crypto_monetizer.scheduler.engine import AsyncioScheduler, ScheduledTask, Scheduler

logger = get_logger(__name__)

COMPARING_DELAY_UNITS = 2.0
EXECUTING_DELAY_UNITS = 3.0
DEFAULT_QUOTE_TIMEOUT_SEC = 10.0


class Phase(str, Enum):
    IDLE = "idle"
    COMPARING = "comparing"
    EXECUTING = "executing"
    SUCCESS = "success"


STARTABLE_PHASES = frozenset({Phase.IDLE, Phase.SUCCESS})


def parse_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("amount must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("amount must be positive")
    return amount


@dataclass
class MonetizationSession:
    payout_address: str = ""
    amount: Any = Decimal("1.0")
    symbol: str = "ETH"
    phase: Phase = Phase.IDLE
    quotes: list[ExchangeQuote] = field(default_factory=list)
    error: Optional[str] = None
    history: list[Phase] = field(default_factory=list)
    _task: Optional[ScheduledTask] = field(default=None, repr=False)
    _run_id: int = field(default=0, repr=False)

    @property
    def in_progress(self) -> bool:
        return self.phase in (Phase.COMPARING, Phase.EXECUTING)

    @property
    def best_quote(self) -> Optional[ExchangeQuote]:
        return self.quotes[0] if self.quotes else None


@dataclass(frozen=True)
class MonetizeOutcome:
    ok: bool
    phase: Phase
    quotes: list[ExchangeQuote]
    error: Optional[str] = None


class QuoteFetcher(ABC):
    """Where the sequencer gets its quote list (in process or over HTTP)."""

    @abstractmethod
    async def fetch_quotes(self, symbol: str) -> list[ExchangeQuote]:
        ...


class LocalQuoteFetcher(QuoteFetcher):
    def __init__(self, source: QuoteSource) -> None:
        self.source = source

    async def fetch_quotes(self, symbol: str) -> list[ExchangeQuote]:
        return self.source.get_quotes(symbol)


class MonetizationSequencer:
    """
    Drives one MonetizationSession at a time through the timed phases.

    Delays are expressed in time units; time_unit_sec scales them so tests and
    the CLI can run faster than the dashboard's one-second unit.
    """

    def __init__(
        self,
        fetcher: QuoteFetcher,
        scheduler: Scheduler | None = None,
        *,
        time_unit_sec: float = 1.0,
        comparing_delay: float = COMPARING_DELAY_UNITS,
        executing_delay: float = EXECUTING_DELAY_UNITS,
        quote_timeout_sec: float = DEFAULT_QUOTE_TIMEOUT_SEC,
        listener: Callable[[MonetizationSession], None] | None = None,
    ) -> None:
        if time_unit_sec <= 0:
            raise ValueError("time_unit_sec must be positive")
        self.fetcher = fetcher
        self.scheduler = scheduler or AsyncioScheduler()
        self.time_unit_sec = time_unit_sec
        self.comparing_delay = comparing_delay
        self.executing_delay = executing_delay
        self.quote_timeout_sec = quote_timeout_sec
        self.listener = listener

    async def monetize(self, session: MonetizationSession) -> MonetizeOutcome:
        """
        Start a run. Returns once quotes are in (or failed); later phases follow on timers.

        Raises PayoutAddressRequired, SequencerBusy or ValidationError without
        changing the session.
        """
        if not (session.payout_address or "").strip():
            raise PayoutAddressRequired()
        if session.phase not in STARTABLE_PHASES:
            raise SequencerBusy()
        amount = parse_amount(session.amount)

        session.amount = amount
        run_id = self._invalidate(session)
        session.error = None
        session.quotes = []
        self._set_phase(session, Phase.COMPARING)
        logger.info(
            "monetize_started",
            payout=short_address(session.payout_address),
            amount=str(amount),
            symbol=session.symbol,
        )

        try:
            quotes = await self._fetch(session.symbol)
        except MonetizerError as e:
            if session._run_id != run_id:
                return MonetizeOutcome(ok=False, phase=session.phase, quotes=[], error=e.message)
            session.error = e.message
            self._set_phase(session, Phase.IDLE)
            logger.warning("monetize_quotes_failed", code=e.code, error=e.message)
            return MonetizeOutcome(ok=False, phase=Phase.IDLE, quotes=[], error=e.message)
        except Exception:
            if session._run_id == run_id:
                self._set_phase(session, Phase.IDLE)
            logger.exception("monetize_unexpected_error")
            raise

        if session._run_id != run_id:
            logger.info("monetize_stale_quotes_discarded")
            return MonetizeOutcome(ok=False, phase=session.phase, quotes=[], error=None)

        session.quotes = list(quotes)
        session._task = self.scheduler.schedule(
            self.comparing_delay * self.time_unit_sec,
            lambda: self._enter_executing(session, run_id),
        )
        return MonetizeOutcome(ok=True, phase=session.phase, quotes=list(quotes))

    def cancel(self, session: MonetizationSession) -> None:
        """Abort the current run and return to idle."""
        self._invalidate(session)
        if session.phase != Phase.IDLE:
            self._set_phase(session, Phase.IDLE)

    def teardown(self, session: MonetizationSession) -> None:
        """Stop pending transitions without touching the visible phase."""
        self._invalidate(session)

    async def _fetch(self, symbol: str) -> list[ExchangeQuote]:
        try:
            return await asyncio.wait_for(self.fetcher.fetch_quotes(symbol), self.quote_timeout_sec)
        except asyncio.TimeoutError:
            raise ServiceUnavailable("Timed out fetching exchange rates. Please retry.")

    def _invalidate(self, session: MonetizationSession) -> int:
        if session._task is not None:
            session._task.cancel()
            session._task = None
        session._run_id += 1
        return session._run_id

    def _enter_executing(self, session: MonetizationSession, run_id: int) -> None:
        if session._run_id != run_id or session.phase != Phase.COMPARING:
            return
        self._set_phase(session, Phase.EXECUTING)
        session._task = self.scheduler.schedule(
            self.executing_delay * self.time_unit_sec,
            lambda: self._enter_success(session, run_id),
        )

    def _enter_success(self, session: MonetizationSession, run_id: int) -> None:
        if session._run_id != run_id or session.phase != Phase.EXECUTING:
            return
        session._task = None
        self._set_phase(session, Phase.SUCCESS)

    def _set_phase(self, session: MonetizationSession, phase: Phase) -> None:
        session.phase = phase
        session.history.append(phase)
        logger.info("sequencer_phase_changed", phase=phase.value)
        if self.listener is not None:
            self.listener(session)
