from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from licensing.config import settings
import logging

# Set up logging
logger = logging.getLogger(__name__)


def build_engine(url: str):
    """Create an engine for the configured backend (SQLite for local runs and tests, PostgreSQL otherwise)."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,  # Auto-reconnect on broken connections
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
    )


try:
    engine = build_engine(settings.DATABASE_URL)
    logger.info(f"Database engine created for {engine.url.get_backend_name()}")
except Exception as e:
    logger.error(f"❌ Database engine creation failed: {e}")
    raise

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Session factory for background jobs that outlive the request session."""
    return SessionLocal

# Ensures models are registered on Base.metadata before create_all / Alembic autogenerate
from licensing import models  # noqa: E402,F401
