"""SQLAlchemy 2.0 database setup."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fixtureforge.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for domain models used by scenarios."""

    pass


def _enable_sqlite_transactions(engine: Engine) -> None:
    """Make pysqlite emit real BEGIN statements and enforce foreign keys.

    The stdlib driver defers BEGIN until the first DML statement, which would
    run constraint PRAGMAs outside the transaction they are meant to scope.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str | None = None, *, echo: bool | None = None) -> Engine:
    """Create an engine for the fixture database.

    Args:
        database_url: Override for settings.database_url.
        echo: Override for settings.debug SQL echo.

    Returns:
        Configured SQLAlchemy engine.
    """
    settings = get_settings()
    url = make_url(database_url or settings.database_url)
    engine = create_engine(
        url,
        echo=settings.debug if echo is None else echo,
        pool_pre_ping=True,
    )
    if url.get_backend_name() == "sqlite":
        _enable_sqlite_transactions(engine)
    return engine


def get_session_maker(engine: Engine) -> sessionmaker[Session]:
    """Create a session maker bound to engine."""
    return sessionmaker(engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(
    session_maker: sessionmaker[Session],
    build: Callable[[Session], Any] | None = None,
) -> Iterator[Any]:
    """Unit of work that commits on success and rolls back on error.

    Args:
        session_maker: Factory for database sessions.
        build: Optional wrapper turning the session into a domain context
            (e.g. a repository unit of work).

    Yields:
        The session, or build(session) when a builder is given.
    """
    with session_maker() as session:
        try:
            yield build(session) if build is not None else session
            session.commit()
        except Exception:
            session.rollback()
            raise
