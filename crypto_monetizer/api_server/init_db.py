"""
Create Crypto Monetizer settings tables.

Usage:
    python -m crypto_monetizer.api_server.init_db
"""

from __future__ import annotations

import os
import sys

from crypto_monetizer.config import get_settings
from crypto_monetizer.core.exceptions import MonetizerError
from crypto_monetizer.database import count_settings, init_db


def main() -> int:
    settings = get_settings()
    url = settings.resolved_database_url()
    if url is None:
        print("DATABASE_URL is not set (hosted profile); nothing to create.", file=sys.stderr)
        return 1
    # Ensure SQLite file directory exists
    if url.startswith("sqlite"):
        path = url.replace("sqlite:///", "").split("?")[0]
        parent = os.path.dirname(os.path.abspath(path)) if path else ""
        if parent and not os.path.exists(parent):
            os.makedirs(parent, exist_ok=True)
    print("DB URL:", url.split("?")[0])
    print("Creating settings tables...")
    try:
        init_db()
        existing = count_settings()
    except MonetizerError as e:
        print(f"Failed: {e.message}", file=sys.stderr)
        return 1
    print(f"Done. {existing} settings record(s) stored.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
