# tollgate/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.

Toll rates and camera parameters are NOT here: they live in the toll
config file managed by services/config_store.py.
"""

import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Data files ────────────────────────────────────────────────────────
    DATA_DIR: str = "toll_data"
    CONFIG_FILE: str = "config/config.txt"
    REGISTRY_FILE: str = "config/registered_vehicles.csv"
    TRANSACTION_LOG_FILE: str = "logs/transaction_log.csv"
    ERROR_LOG_FILE: str = "logs/error_log.txt"

    # ── Database (query mirror of the ledger) ─────────────────────────────
    DATABASE_URL: str = "sqlite:///./tollgate.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Paths ─────────────────────────────────────────────────────────────
    @property
    def CONFIG_PATH(self) -> str:
        return os.path.join(self.DATA_DIR, self.CONFIG_FILE)

    @property
    def REGISTRY_PATH(self) -> str:
        return os.path.join(self.DATA_DIR, self.REGISTRY_FILE)

    @property
    def TRANSACTION_LOG_PATH(self) -> str:
        return os.path.join(self.DATA_DIR, self.TRANSACTION_LOG_FILE)

    @property
    def ERROR_LOG_PATH(self) -> str:
        return os.path.join(self.DATA_DIR, self.ERROR_LOG_FILE)

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
