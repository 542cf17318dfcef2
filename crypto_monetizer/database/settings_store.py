"""
Settings store: SQLAlchemy-backed wallet address -> payout address mapping.

Uses DATABASE_URL when set; otherwise the local profile falls back to SQLite
(MONETIZER_DB_PATH or monetizer.db). The hosted profile has no fallback: without
DATABASE_URL the store is unconfigured, reads degrade to the default record and
writes raise ConfigurationError.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Column, Integer, String, Text, create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from crypto_monetizer.config import get_settings
from crypto_monetizer.core.exceptions import ConfigurationError, StorageError, ValidationError
from crypto_monetizer.database.models import SettingsRecord
from crypto_monetizer.logging import get_logger, short_address

logger = get_logger(__name__)

Base = declarative_base()


class UserSettings(Base):
    """One row per wallet address. payout_address is overwritten in place on upsert."""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wallet_address = Column(String(128), unique=True, nullable=False, index=True)
    payout_address = Column(Text, nullable=False, default="")

    def to_record(self) -> SettingsRecord:
        return SettingsRecord(
            wallet_address=self.wallet_address,
            payout_address=self.payout_address or "",
        )


# -----------------------------------------------------------------------------
# Engine and session (DATABASE_URL, else SQLite for the local profile)
# -----------------------------------------------------------------------------

_engine = None
_SessionLocal: sessionmaker | None = None


def _get_database_url() -> str | None:
    return get_settings().resolved_database_url()


def is_configured() -> bool:
    """True when the store has a backing database URL."""
    return _get_database_url() is not None


def _get_engine():
    """Create or return cached engine. Raises ConfigurationError when no URL is configured."""
    global _engine
    if _engine is None:
        url = _get_database_url()
        if url is None:
            raise ConfigurationError("DATABASE_URL is required for the hosted storage profile")
        connect_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        logger.info("settings_store_engine", url=url.split("?")[0].split("//")[-1])
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
    return _SessionLocal


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Context manager for a single session. Commits on success, rolls back on error."""
    factory = _get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _clean_wallet(wallet_address: str | None) -> str:
    wallet = (wallet_address or "").strip()
    if not wallet:
        raise ValidationError("walletAddress must be non-empty")
    return wallet


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def init_db() -> None:
    """
    Create settings tables if they do not exist. Safe to call on every startup.
    Raises ConfigurationError when the store is unconfigured.
    """
    try:
        engine = _get_engine()
        Base.metadata.create_all(bind=engine)
        logger.info("settings_store_init_db")
    except ConfigurationError:
        raise
    except SQLAlchemyError as e:
        logger.exception("settings_store_init_db_failed", error=str(e))
        raise StorageError("Failed to initialize settings storage") from e


def get_settings_record(wallet_address: str) -> SettingsRecord:
    """
    Return the stored settings for a wallet, or a default record (payout_address="").

    The default is never persisted. A persistence fault raises StorageError rather
    than silently defaulting; an unconfigured backend degrades to the default.
    """
    wallet = _clean_wallet(wallet_address)
    default = SettingsRecord(wallet_address=wallet, payout_address="")
    if not is_configured():
        logger.warning("settings_store_unconfigured_read", wallet=short_address(wallet))
        return default
    try:
        with _session_scope() as session:
            row = session.query(UserSettings).filter(UserSettings.wallet_address == wallet).first()
            return row.to_record() if row else default
    except SQLAlchemyError as e:
        logger.exception("settings_store_get_failed", wallet=short_address(wallet), error=str(e))
        raise StorageError() from e


def upsert_settings(wallet_address: str, payout_address: str | None) -> None:
    """
    Insert or overwrite the payout address for a wallet. Last write wins.

    payout_address is stored as given (no format validation).
    """
    wallet = _clean_wallet(wallet_address)
    payout = payout_address or ""
    if not is_configured():
        logger.error("settings_store_unconfigured_write", wallet=short_address(wallet))
        raise ConfigurationError()
    try:
        try:
            _write(wallet, payout)
        except IntegrityError:
            # Concurrent first insert for the same wallet; the row exists now.
            logger.info("settings_upsert_insert_race", wallet=short_address(wallet))
            _write(wallet, payout)
        logger.info("settings_upserted", wallet=short_address(wallet), has_payout=bool(payout))
    except SQLAlchemyError as e:
        logger.exception("settings_store_upsert_failed", wallet=short_address(wallet), error=str(e))
        raise StorageError("Failed to save settings. Please try again.") from e


def _write(wallet: str, payout: str) -> None:
    with _session_scope() as session:
        row = session.query(UserSettings).filter(UserSettings.wallet_address == wallet).first()
        if row is None:
            session.add(UserSettings(wallet_address=wallet, payout_address=payout))
        else:
            row.payout_address = payout
        session.flush()


def count_settings() -> int:
    """Number of stored records (0 when unconfigured)."""
    if not is_configured():
        return 0
    try:
        with _session_scope() as session:
            return session.query(UserSettings).count()
    except SQLAlchemyError as e:
        logger.exception("settings_store_count_failed", error=str(e))
        raise StorageError() from e


def reset_engine_for_test() -> None:
    """
    Dispose and clear cached engine and session factory. For tests only; use with a new MONETIZER_DB_PATH.
    """
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
