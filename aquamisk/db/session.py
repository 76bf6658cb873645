import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from aquamisk.core.config import settings
from aquamisk.core.logging import get_logger
from aquamisk.db.models import Base
from aquamisk.db import alerts, triggers  # noqa: F401  (registers stock alert and trigger listeners)

logger = get_logger(__name__)

@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # sqlite ships with foreign key enforcement switched off
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

def make_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=echo, pool_pre_ping=True, **kwargs)

engine = make_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind: Engine = engine, sample_data: bool = False) -> None:
    """Create tables, constraints and triggers; optionally load the sample data set."""
    Base.metadata.create_all(bind)
    logger.info("schema_created", url=bind.url.render_as_string(hide_password=True))

    if sample_data:
        from aquamisk.db.seed import seed_sample_data

        with sessionmaker(bind=bind)() as db:
            seed_sample_data(db)
