"""
Database session management (SQLAlchemy)
"""
import psycopg
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from cityvizor_migrate.config import get_settings


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all destination tables
    """
    pass


# Singleton engine and session factory
_engine = None
_SessionLocal = None


def get_engine():
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.get_sqlalchemy_url()
        _engine = create_engine(url, pool_pre_ping=True)
    return _engine


def get_session_factory():
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        engine = get_engine()
        _SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return _SessionLocal


def dispose_engine() -> None:
    """Close all pooled connections and forget the singletons"""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def check_db_connection() -> None:
    """
    Health check - verify PostgreSQL is reachable (raw psycopg)

    Raises:
        psycopg.OperationalError: if the database is unreachable
    """
    settings = get_settings()
    with psycopg.connect(settings.DATABASE_URL, connect_timeout=3) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
