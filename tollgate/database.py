# tollgate/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy (SQLite by default, PostgreSQL via DATABASE_URL).

The database is a query mirror of the toll ledger. The CSV transaction log
and the error log file remain the authoritative audit trail.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from tollgate.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    connect_args=connect_args,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency; yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from tollgate.models.toll_transaction import TollTransaction   # noqa
    from tollgate.models.toll_error import TollError               # noqa

    Base.metadata.create_all(bind=bind or engine)
