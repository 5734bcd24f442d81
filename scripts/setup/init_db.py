# scripts/setup/init_db.py
"""
Initialize database and toll config: creates the ledger mirror tables and
writes the default toll config file if none exists.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from tollgate.config import settings
from tollgate.database import create_tables, engine
from tollgate.services.config_store import ConfigStore


def main():
    print("Tollgate DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables()
    tables = inspect(engine).get_table_names()
    print(f"Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    config = ConfigStore(settings.CONFIG_PATH).load()
    source = "defaults written" if config.from_defaults else "existing file"
    print(f"\nToll config: {settings.CONFIG_PATH} ({source})")
    for vehicle_class, rate in config.toll_rates.items():
        print(f"   {vehicle_class.value:<8} {rate}")
    print(f"   {'fallback':<8} {config.fallback_rate}")

    if not os.path.exists(settings.REGISTRY_PATH):
        print(f"\nNo registry file at {settings.REGISTRY_PATH} — the system will start with no vehicles.")

    print("\nReady! Start the backend:")
    print("   uvicorn tollgate.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
