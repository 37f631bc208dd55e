from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.engine import URL, CursorResult
from sqlalchemy.pool import NullPool

from pgbrowser.common.settings import settings
from pgbrowser.session.models import ConnectionParams

logger = logging.getLogger(__name__)


class SQLAlchemyCursor:
    """ResultCursor over a SQLAlchemy CursorResult."""

    def __init__(self, result: CursorResult):
        self._result = result

    @property
    def rowcount(self) -> int:
        return self._result.rowcount

    def column_names(self) -> Optional[List[str]]:
        if not self._result.returns_rows:
            return None
        return list(self._result.keys())

    def __iter__(self) -> Iterator[Sequence[Any]]:
        if not self._result.returns_rows:
            return
        for row in self._result:
            yield tuple(row)

    def close(self) -> None:
        self._result.close()


class SQLAlchemyConnection:
    """Owns one Engine and the single Connection checked out from it."""

    def __init__(self, engine: Engine, connection: Connection):
        self.engine = engine
        self.connection = connection

    def execute(self, sql: str, parameters: Optional[Mapping[str, Any]] = None) -> SQLAlchemyCursor:
        if parameters:
            result = self.connection.execute(text(sql), dict(parameters))
        else:
            # Bypass placeholder and '%' processing for raw statements
            result = self.connection.exec_driver_sql(
                sql, execution_options={"no_parameters": True}
            )
        return SQLAlchemyCursor(result)

    def close(self) -> None:
        try:
            self.connection.close()
        finally:
            self.engine.dispose()


class SQLAlchemyDriver:
    """
    Opens PostgreSQL connections through SQLAlchemy.

    Every connection gets its own engine without pooling, so closing the
    connection and disposing the engine releases all sockets. Connections run
    in AUTOCOMMIT so statements such as ``DROP DATABASE`` execute outside a
    transaction block.
    """

    def __init__(
        self,
        drivername: Optional[str] = None,
        connect_args: Optional[Dict[str, Any]] = None,
    ):
        self.drivername = drivername or settings.sqlalchemy_driver
        self.connect_args = connect_args or {}

    def __str__(self):
        return f"SQLAlchemyDriver ({self.drivername})"

    def build_url(self, params: ConnectionParams) -> URL:
        password = params.password.get_secret_value()
        return URL.create(
            self.drivername,
            username=params.username or None,
            # Empty password lets libpq fall back to trust/peer/.pgpass
            password=password or None,
            host=params.host,
            port=params.port,
            database=params.database or None,
        )

    def open(self, params: ConnectionParams) -> SQLAlchemyConnection:
        engine = create_engine(
            self.build_url(params),
            poolclass=NullPool,
            isolation_level="AUTOCOMMIT",
            connect_args=self.connect_args,
        )
        try:
            connection = engine.connect()
        except Exception:
            engine.dispose()
            raise
        logger.debug(f"Opened connection to {params.host}:{params.port}/{params.database} via {self}")
        return SQLAlchemyConnection(engine, connection)
