#!/usr/bin/env python3
"""
Database Check Script

Verifies the database is reachable, creates any missing tables and seeds
the skill catalog.
Usage: python scripts/check_database.py
"""
import sys

from udyoga_mitra.core.config import get_settings
from udyoga_mitra.db.database import ping_database
from udyoga_mitra.db.schema import init_db, SKILL_CATALOG


def main() -> int:
    settings = get_settings()
    print("=" * 50)
    print("UDYOGA MITRA - DATABASE CHECK")
    print("=" * 50)

    print("\n[1] Testing database connection...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if not ping_database():
        print("    ❌ Database: FAILED")
        return 1
    print("    ✅ Database: CONNECTED")

    print("\n[2] Creating tables and seeding skills...")
    init_db(seed=True)
    print(f"    ✅ Schema ready, {len(SKILL_CATALOG)} catalog skills present")

    print("\n" + "=" * 50)
    print("Database check complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
