"""Database engine and session configuration"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.settings import settings


def build_engine(url: str):
    """Create an engine for `url`; in-memory SQLite shares one connection."""
    if url.startswith("sqlite"):
        if url.rstrip("/") == "sqlite:" or ":memory:" in url:
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    # Importing registers the models on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
