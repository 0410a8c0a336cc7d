"""Engine and session factory.

SQLite is the development default; any SQLAlchemy URL works in production.
Foreign keys are enforced on SQLite too, so a history row can never point
at a batch or profile that does not exist.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from pharmatrace.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **options) -> Engine:
    """
    Engine for `url`. SQLite gets one connection per checkout (NullPool)
    unless the caller passes its own poolclass; server databases get a
    small pre-pinged QueuePool.
    """
    if url.startswith("sqlite"):
        options.setdefault("connect_args", {"check_same_thread": False})
        options.setdefault("poolclass", NullPool)
        engine = create_engine(url, **options)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    options.setdefault("pool_size", 5)
    options.setdefault("max_overflow", 10)
    options.setdefault("pool_timeout", 30)
    options.setdefault("pool_recycle", 3600)  # seconds
    options.setdefault("pool_pre_ping", True)
    return create_engine(url, **options)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
