"""
Database connection and session management.
Uses SQLAlchemy for ORM and connection pooling.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ledger.core.config import settings
from ledger.core.exceptions import StorageFailure

logger = logging.getLogger(__name__)

READ_ONLY_OPTION = "ledger_read_only"


def _enable_sqlite_locking(engine: Engine) -> None:
    """
    Make SQLite transactions take the database write lock up front.

    SQLite ignores ``FOR UPDATE``; ``BEGIN IMMEDIATE`` serializes atomic
    units the way row locks do on PostgreSQL. Transactions opened with the
    read-only execution option start deferred and take no write lock.
    """

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        # Stop pysqlite from issuing its own BEGIN.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        if conn.get_execution_options().get(READ_ONLY_OPTION):
            conn.exec_driver_sql("BEGIN DEFERRED")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url`` with pooling suited to its backend."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.SQLITE_BUSY_TIMEOUT,
            },
        )
        _enable_sqlite_locking(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

# Results of a committed unit are read after commit, so keep them loaded.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

# Base class for models
Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet."""
    # Register models on Base.metadata
    import ledger.models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():
    """
    Dependency function to get database session.
    Yields session and ensures it's closed after use.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db here
            pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """
    Run the enclosed block as one atomic unit on ``db``.

    Commits when the block completes. Any exception, including cancellation,
    rolls back every write and releases every lock taken inside the block.
    Database errors surface as ``StorageFailure``.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Atomic unit rolled back after a storage error")
        raise StorageFailure() from exc
    except BaseException:
        db.rollback()
        raise


@contextmanager
def snapshot(db: Session):
    """
    Run plain reads in a short transaction that takes no write lock.

    Used for validation ahead of an atomic unit. The read transaction is
    always rolled back on exit so the unit that follows starts fresh.
    """
    if db.in_transaction():
        db.rollback()
    db.connection(execution_options={READ_ONLY_OPTION: True})
    try:
        yield db
    finally:
        db.rollback()
