from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool

from ..config import DatabaseConfig


def build_engine(config: DatabaseConfig) -> Engine:
    url = make_url(config.url())
    if url.get_backend_name() == "sqlite":
        return _sqlite_engine(url)
    return create_engine(
        url,
        pool_size=config.pool_size,
        pool_pre_ping=True,
        connect_args={"connect_timeout": config.connect_timeout_seconds},
    )


def _sqlite_engine(url: URL) -> Engine:
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # in-memory databases exist on a single connection
        options["poolclass"] = StaticPool
    engine = create_engine(url, **options)

    # pysqlite defers BEGIN and mishandles SAVEPOINT; emit both ourselves
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(connection):
        connection.exec_driver_sql("BEGIN")

    return engine
