"""Database connection, session management and transactional helpers."""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from reviewsite.config import settings

logger = logging.getLogger(__name__)


def create_db_engine(url: str, **options) -> Engine:
    """Create an engine configured for the given database type."""
    if url.startswith("sqlite"):
        connect_args = options.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **options)
        _enable_sqlite_transactions(engine)
        return engine

    # PostgreSQL: full connection pool
    options.setdefault("pool_pre_ping", True)
    options.setdefault("pool_size", 10)
    options.setdefault("max_overflow", 20)
    return create_engine(url, **options)


def _enable_sqlite_transactions(engine: Engine) -> None:
    """Take transaction control away from pysqlite.

    pysqlite defers BEGIN until the first DML statement, which breaks
    SAVEPOINT. Writers also take the reserved lock up front so two
    concurrent transactions queue on the busy timeout instead of failing
    on lock upgrade.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# SQL echo is handled by setup_logging() (DATABASE_ECHO)
engine = create_db_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a unit of work atomically.

    Commits when the block exits normally. Any exception rolls back every
    write made inside the block and is re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def unique_insert(db: Session, row, **key) -> bool:
    """Insert ``row`` unless a live row with the same ``key`` already exists.

    The uniqueness guarantee comes from a unique index over live rows; the
    insert runs in a SAVEPOINT so a violation only discards this row and
    leaves the surrounding transaction usable. Returns True when inserted,
    False when a live row already held the key.
    """
    try:
        with db.begin_nested():
            db.add(row)
    except IntegrityError:
        model = type(row)
        existing = (
            db.query(model.id)
            .filter_by(**key)
            .filter(model.deleted_at.is_(None))
            .first()
        )
        if existing is None:
            raise
        logger.debug("Live %s already exists for %s", model.__tablename__, key)
        return False
    return True
