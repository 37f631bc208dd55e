from __future__ import annotations

import functools
import itertools
import time
import uuid
from typing import Any, List, Mapping, Optional

from pgbrowser.common.errors import InvalidHostError, InvalidPortError, NotConnectedError
from pgbrowser.common.logger import get_logger, session_context
from pgbrowser.common.settings import settings
from pgbrowser.driver.interfaces import Driver, DriverConnection
from pgbrowser.results.columns import ColumnNameResolver
from pgbrowser.results.materializer import materialize
from pgbrowser.results.models import ResultSet
from pgbrowser.session.error_mapping import map_connect_error
from pgbrowser.session.identifiers import (
    escape_bind_markers,
    qualified_name,
    quote_identifier,
    quote_literal,
)
from pgbrowser.session.models import (
    ColumnInfo,
    ConnectionParams,
    DatabaseInfo,
    SessionState,
    TableInfo,
)

logger = get_logger(__name__)

LIST_DATABASES_SQL = """
SELECT datname,
       CASE WHEN has_database_privilege(datname, 'CONNECT')
            THEN pg_database_size(datname) END AS size_in_bytes
FROM pg_database
WHERE datistemplate = false
ORDER BY datname
"""

LIST_TABLES_SQL = """
SELECT table_name, table_schema
FROM information_schema.tables
WHERE table_schema NOT IN ('pg_catalog', 'information_schema')
AND table_type = 'BASE TABLE'
ORDER BY table_schema, table_name
"""

LIST_COLUMNS_SQL = """
SELECT c.column_name,
       c.data_type,
       c.is_nullable = 'YES' AS is_nullable,
       c.column_default,
       COALESCE(k.is_primary_key, false),
       COALESCE(k.is_unique, false),
       COALESCE(k.is_foreign_key, false)
FROM information_schema.columns c
LEFT JOIN (
    SELECT a.attname AS column_name,
           bool_or(con.contype = 'p') AS is_primary_key,
           bool_or(con.contype = 'u') AS is_unique,
           bool_or(con.contype = 'f') AS is_foreign_key
    FROM pg_constraint con
    JOIN pg_attribute a
      ON a.attrelid = con.conrelid AND a.attnum = ANY (con.conkey)
    WHERE con.conrelid = {relation}::regclass
    GROUP BY a.attname
) k ON k.column_name = c.column_name
WHERE c.table_schema = {schema} AND c.table_name = {table}
ORDER BY c.ordinal_position
"""


def validate_params(params: ConnectionParams) -> None:
    """Raises InvalidHostError/InvalidPortError before any I/O is attempted."""
    if not params.host or not params.host.strip():
        raise InvalidHostError(params.host)
    if not 1 <= params.port <= 65535:
        raise InvalidPortError()


def _in_session_context(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with session_context(self.session_id):
            return method(self, *args, **kwargs)
    return wrapper


class Session:
    """
    Owns at most one live driver connection.

    Lifecycle: ``DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED``;
    any connect failure returns to ``DISCONNECTED`` with every partially
    created resource released. A snapshot of the connection parameters is
    kept while connected so administrative operations can reconnect, and is
    cleared on every disconnect.

    Not thread-safe: a single caller issues operations sequentially.
    """

    def __init__(self, driver: Optional[Driver] = None, admin_database: Optional[str] = None):
        if driver is None:
            from pgbrowser.driver.sqlalchemy_driver import SQLAlchemyDriver
            driver = SQLAlchemyDriver()
        self.driver = driver
        self.admin_database = admin_database or settings.admin_database
        self.session_id = uuid.uuid4().hex[:8]
        self._connection: Optional[DriverConnection] = None
        self._params: Optional[ConnectionParams] = None
        self._state = SessionState.DISCONNECTED

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def params(self) -> Optional[ConnectionParams]:
        return self._params

    @property
    def database(self) -> Optional[str]:
        return self._params.database if self._params else None

    # -- lifecycle -----------------------------------------------------------

    @_in_session_context
    def connect(self, params: ConnectionParams) -> None:
        """Connects to ``params.database``, closing any existing connection first.

        Raises:
            SessionError: Validation or mapped connection failure.
        """
        logger.info(f"Connecting to {params.database} at {params.host}:{params.port} as {params.username}")
        validate_params(params)

        self.disconnect()
        self._state = SessionState.CONNECTING
        try:
            connection = self.driver.open(params)
        except Exception as e:
            self._state = SessionState.DISCONNECTED
            mapped = map_connect_error(e, params.host, params.database)
            logger.error(f"Connection to {params.database} failed: {mapped.description}")
            raise mapped from e

        self._connection = connection
        self._params = params
        self._state = SessionState.CONNECTED
        logger.info(f"Connected to {params.database}")

    @_in_session_context
    def disconnect(self) -> None:
        """Closes the connection if any. Never raises; close errors are logged."""
        connection, self._connection = self._connection, None
        self._params = None
        self._state = SessionState.DISCONNECTED
        if connection is None:
            return
        try:
            connection.close()
        except Exception as e:
            logger.warning(f"Ignoring error while closing connection: {e}")
        logger.info("Disconnected")

    @_in_session_context
    def test_connection(self, params: ConnectionParams) -> bool:
        """Opens and immediately closes a connection without touching session state.

        Returns:
            bool: True on success.

        Raises:
            SessionError: Validation or mapped connection failure.
        """
        validate_params(params)
        try:
            connection = self.driver.open(params)
        except Exception as e:
            raise map_connect_error(e, params.host, params.database) from e
        try:
            connection.close()
        except Exception as e:
            logger.warning(f"Ignoring error while closing test connection: {e}")
        return True

    # -- queries -------------------------------------------------------------

    def _require_connection(self) -> DriverConnection:
        if self._connection is None:
            raise NotConnectedError()
        return self._connection

    def _fetch_all(self, sql: str) -> List[tuple]:
        cursor = self._require_connection().execute(sql)
        try:
            return [tuple(row) for row in cursor]
        finally:
            cursor.close()

    def _execute_result(self, sql: str, parameters: Optional[Mapping[str, Any]] = None,
                        probe_sql: Optional[str] = None) -> ResultSet:
        connection = self._require_connection()
        started = time.perf_counter()
        cursor = connection.execute(sql, parameters)
        try:
            rows = iter(cursor)
            first_row = next(rows, None)
            header = ColumnNameResolver(connection).resolve(cursor, probe_sql or sql, first_row)
            if first_row is not None:
                rows = itertools.chain([first_row], rows)
            result = materialize(rows, header)
            rows_affected = None if header else cursor.rowcount
        finally:
            cursor.close()

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"Returned {result.row_count} rows, {len(result.header)} columns in {elapsed_ms:.1f} ms")
        return result.model_copy(update={"execution_time_ms": elapsed_ms, "rows_affected": rows_affected})

    @_in_session_context
    def list_databases(self) -> List[DatabaseInfo]:
        return [
            DatabaseInfo(name=name, size_in_bytes=size)
            for name, size in self._fetch_all(LIST_DATABASES_SQL)
        ]

    @_in_session_context
    def list_tables(self, database: Optional[str] = None) -> List[TableInfo]:
        """Lists base tables, switching to ``database`` first when it differs from the current one."""
        self._require_connection()
        if database and database != self.database:
            logger.info(f"Switching to database {database}")
            self.connect(self._params.with_database(database))

        tables = [
            TableInfo(name=name, schema_name=schema)
            for name, schema in self._fetch_all(LIST_TABLES_SQL)
        ]
        logger.debug(f"Fetched {len(tables)} tables")
        return tables

    @_in_session_context
    def list_columns(self, schema: str, table: str) -> List[ColumnInfo]:
        sql = LIST_COLUMNS_SQL.format(
            relation=quote_literal(qualified_name(schema, table)),
            schema=quote_literal(schema),
            table=quote_literal(table),
        )
        return [
            ColumnInfo(
                name=name,
                data_type=data_type,
                is_nullable=bool(is_nullable),
                default_value=default,
                is_primary_key=bool(is_pk),
                is_unique=bool(is_unique),
                is_foreign_key=bool(is_fk),
            )
            for name, data_type, is_nullable, default, is_pk, is_unique, is_fk in self._fetch_all(sql)
        ]

    @_in_session_context
    def fetch_rows(self, schema: str, table: str, offset: int = 0, limit: Optional[int] = None) -> ResultSet:
        """Fetches one page of ``schema.table``."""
        if limit is None:
            limit = settings.rows_per_page
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        relation = qualified_name(schema, table)
        logger.debug(f"Fetching {relation} offset={offset} limit={limit}")
        return self._execute_result(
            f"SELECT * FROM {escape_bind_markers(relation)} LIMIT :limit OFFSET :offset",
            {"limit": limit, "offset": offset},
            probe_sql=f"SELECT * FROM {relation}",
        )

    @_in_session_context
    def run_query(self, sql: str) -> ResultSet:
        """Executes user-entered SQL. Driver errors propagate unchanged."""
        if not sql or not sql.strip():
            raise ValueError("Query text is empty")
        logger.debug(f"Executing query: {sql}")
        return self._execute_result(sql)

    # -- administrative ------------------------------------------------------

    @_in_session_context
    def drop_table(self, schema: str, table: str) -> None:
        self._require_connection()
        sql = f"DROP TABLE {qualified_name(schema, table)}"
        logger.info(f"Executing: {sql}")
        self._fetch_all(sql)

    @_in_session_context
    def drop_database(self, name: str) -> None:
        """
        Drops database ``name`` from the administrative database.

        The session disconnects, connects to ``admin_database`` with the
        snapshotted credentials and issues the drop. It then reconnects to the
        original database unless that was the one dropped, in which case it
        stays on the administrative database. Any failure leaves the session
        disconnected.
        """
        self._require_connection()
        params = self._params
        original_database = params.database

        self.disconnect()
        try:
            self.connect(params.with_database(self.admin_database))
            sql = f"DROP DATABASE {quote_identifier(name)}"
            logger.info(f"Executing: {sql}")
            self._fetch_all(sql)
            logger.info(f"Database '{name}' dropped")

            if original_database != name and original_database != self.admin_database:
                logger.info(f"Reconnecting to original database: {original_database}")
                self.connect(params.with_database(original_database))
        except Exception:
            self.disconnect()
            raise
