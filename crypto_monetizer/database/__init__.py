"""
Database layer: per-wallet payout settings.

SQLite for the local profile via SQLAlchemy; any SQLAlchemy URL for the hosted profile.
"""

from crypto_monetizer.database.models import SettingsRecord
from crypto_monetizer.database.settings_store import (
    count_settings,
    get_settings_record,
    init_db,
    is_configured,
    upsert_settings,
)

__all__ = [
    "SettingsRecord",
    "count_settings",
    "get_settings_record",
    "init_db",
    "is_configured",
    "upsert_settings",
]
