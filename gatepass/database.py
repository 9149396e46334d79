"""Database engine, session factory and declarative base"""
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gatepass.config import settings

# Connection execution option that makes a SQLite transaction start with the write lock
IMMEDIATE = "sqlite_immediate"


def _configure_sqlite_transactions(engine: Engine) -> None:
    """
    Take over BEGIN from pysqlite.

    Transactions are deferred unless the connection was procured with the
    ``IMMEDIATE`` execution option, which the store sets for its writes.
    Readers therefore never hold the write lock, and writers queue on the
    busy timeout instead of deadlocking on a shared-to-reserved upgrade.
    File databases run in WAL mode so an open read does not stall a commit.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str, **kwargs) -> Engine:
    """Create an engine with the pool and transaction setup for its backend"""
    if url.startswith("sqlite"):
        # SQLite connections are handed across FastAPI's worker threads
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": settings.DATABASE_POOL_TIMEOUT},
            **kwargs,
        )
        _configure_sqlite_transactions(engine)
        return engine

    if "poolclass" in kwargs:
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,
        **kwargs,
    )


engine = create_db_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
