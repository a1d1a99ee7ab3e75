from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings
import logging
import os
import warnings

logger = logging.getLogger(__name__)

logger.info("ELEWAND DATABASE_URL = %s", settings.get_masked_database_url())

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite connections are handed between FastAPI's worker threads
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using them
    echo=False,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Dev convenience: create all tables for SQLite, or for any database when the
    project has no Alembic migrations.

    create_all() only creates missing tables; it never alters existing ones.
    On PostgreSQL with migrations present, run 'alembic upgrade head' instead.
    """
    alembic_versions_path = os.path.join(os.path.dirname(__file__), "..", "alembic", "versions")
    if not settings.DATABASE_URL.startswith("sqlite") and os.path.exists(alembic_versions_path) and any(
        name.endswith(".py") for name in os.listdir(alembic_versions_path)
    ):
        warnings.warn(
            "Alembic migrations detected. Skipping Base.metadata.create_all(). "
            "Use 'alembic upgrade head' for schema changes.",
            UserWarning,
        )
        return

    # Import all models to ensure they're registered with Base.metadata
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
