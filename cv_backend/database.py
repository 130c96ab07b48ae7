import logging
import time

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, declarative_base

from cv_backend.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def wait_for_database(
    max_retries: int | None = None,
    backoff_seconds: float | None = None,
) -> None:
    """Block until the database answers SELECT 1, retrying with linear backoff.

    Raises RuntimeError once every attempt has failed.
    """
    if max_retries is None:
        max_retries = settings.db_connect_max_retries
    if backoff_seconds is None:
        backoff_seconds = settings.db_connect_backoff_seconds

    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection established (attempt %d/%d)", attempt, max_retries)
            return
        except Exception as e:
            delay = attempt * backoff_seconds
            logger.warning(
                "Database connection attempt %d/%d failed: %s",
                attempt,
                max_retries,
                e,
            )
            if attempt < max_retries:
                logger.info("Retrying database connection in %.1f seconds", delay)
                time.sleep(delay)
    raise RuntimeError(f"Failed to connect to database after {max_retries} attempts")


def init_db():
    from cv_backend.models import User, CVFile  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized")
    except Exception as e:
        logger.exception("Database initialization failed: %s", e)
        raise


def ensure_tables_exist():
    """Create any missing tables without touching existing data."""
    from cv_backend.models import User, CVFile  # noqa: F401

    try:
        inspector = inspect(engine)
        existing_tables = set(inspector.get_table_names())

        Base.metadata.create_all(bind=engine)
        target_tables = set(Base.metadata.tables.keys())
        created_tables = sorted(target_tables - existing_tables)

        if created_tables:
            logger.info("Created missing DB tables: %s", ", ".join(created_tables))
        else:
            logger.info("All DB tables already exist; no schema changes applied.")
    except Exception as e:
        logger.exception("Ensure tables failed: %s", e)
        raise
