import pytest
from typing import Any, Dict, List, Optional, Sequence


class FakeCursor:
    """Scripted ResultCursor. ``names=None`` means the driver reported no metadata."""

    def __init__(self, rows: Sequence[Sequence[Any]] = (), names: Optional[List[str]] = None, rowcount: int = -1):
        self.rows = [tuple(row) for row in rows]
        self.names = names
        self.rowcount = rowcount
        self.closed = False

    def column_names(self) -> Optional[List[str]]:
        return None if self.names is None else list(self.names)

    def __iter__(self):
        return iter(self.rows)

    def close(self) -> None:
        self.closed = True

    def copy(self) -> "FakeCursor":
        return FakeCursor(self.rows, self.names, self.rowcount)


class FakeConnection:
    """
    Scripted DriverConnection.

    ``script`` maps a substring of the SQL text to the FakeCursor (or
    exception) returned for statements containing it; the first match wins.
    Unmatched statements yield an empty cursor without metadata.
    """

    def __init__(self, script: Optional[Dict[str, Any]] = None, database: Optional[str] = None):
        self.script = script if script is not None else {}
        self.database = database
        self.executed: List[str] = []
        self.parameters: List[Optional[Dict[str, Any]]] = []
        self.closed = False
        self.close_error: Optional[Exception] = None

    def execute(self, sql: str, parameters=None) -> FakeCursor:
        self.executed.append(sql)
        self.parameters.append(dict(parameters) if parameters else None)
        for fragment, outcome in self.script.items():
            if fragment in sql:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome.copy()
        return FakeCursor()

    def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeDriver:
    """Driver handing out FakeConnections that share one script."""

    def __init__(self, script: Optional[Dict[str, Any]] = None, failures: Optional[Dict[str, Exception]] = None):
        self.script = script if script is not None else {}
        self.failures = failures or {}
        self.opened: List[Any] = []
        self.connections: List[FakeConnection] = []

    def open(self, params) -> FakeConnection:
        self.opened.append(params)
        if params.database in self.failures:
            raise self.failures[params.database]
        connection = FakeConnection(self.script, database=params.database)
        self.connections.append(connection)
        return connection

    @property
    def open_connections(self) -> List[FakeConnection]:
        return [c for c in self.connections if not c.closed]


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def params():
    from pgbrowser.session import ConnectionParams
    return ConnectionParams(host="localhost", port=5432, username="postgres", password="secret", database="shop")


@pytest.fixture
def session(fake_driver):
    from pgbrowser.session import Session
    return Session(driver=fake_driver, admin_database="postgres")


@pytest.fixture
def connected_session(session, params):
    session.connect(params)
    return session
