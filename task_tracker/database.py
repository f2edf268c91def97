from sqlmodel import SQLModel, create_engine
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from .config import DATABASE_URL

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task, User  # noqa: F401


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, **kwargs):
    """Build an engine for the given URL with the service's connection policy."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(url, echo=False, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # Postgres: disable pooling for serverless and enable pre-ping
    kwargs.setdefault("poolclass", NullPool)
    return create_engine(url, echo=False, pool_pre_ping=True, **kwargs)


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """Create all database tables."""
    SQLModel.metadata.create_all(bind=bind or engine)
