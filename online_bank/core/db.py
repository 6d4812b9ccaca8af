from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import create_engine

from ..models import db as _db_models  # noqa: F401 - ensure models register with metadata


def create_engine_for_url(database_url: str, lock_timeout: float = 5.0) -> Engine:
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": lock_timeout}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        _use_immediate_transactions(engine)
    return engine


def _use_immediate_transactions(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write, which lets two readers
    # both decide on stale balances. Take the write lock when the transaction
    # starts instead.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        timeout = conn.get_execution_options().get("lock_timeout")
        if timeout is not None:
            conn.exec_driver_sql(f"PRAGMA busy_timeout = {int(timeout * 1000)}")
        conn.exec_driver_sql("BEGIN IMMEDIATE")
