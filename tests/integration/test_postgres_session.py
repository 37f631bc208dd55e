"""
End-to-end checks against a real PostgreSQL server.

Set PGBROWSER_TEST_HOST (and optionally PGBROWSER_TEST_PORT, PGBROWSER_TEST_USER,
PGBROWSER_TEST_PASSWORD) to run them.
"""
import os
import uuid

import pytest

from pgbrowser.common.errors import AuthenticationFailedError, DatabaseNotFoundError
from pgbrowser.session import ConnectionParams, Session

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.environ.get("PGBROWSER_TEST_HOST"), reason="PGBROWSER_TEST_HOST not set"),
]


@pytest.fixture
def pg_params():
    return ConnectionParams(
        host=os.environ.get("PGBROWSER_TEST_HOST", "localhost"),
        port=int(os.environ.get("PGBROWSER_TEST_PORT", "5432")),
        username=os.environ.get("PGBROWSER_TEST_USER", "postgres"),
        password=os.environ.get("PGBROWSER_TEST_PASSWORD", ""),
        database="postgres",
    )


@pytest.fixture
def pg_session(pg_params):
    session = Session()
    session.connect(pg_params)
    yield session
    session.disconnect()


def test_select_one(pg_session):
    result = pg_session.run_query("SELECT 1")
    assert result.row_count == 1
    assert result.to_rows() == [["1"]]


def test_type_decoding(pg_session):
    result = pg_session.run_query(
        "SELECT true AS flag, 5::numeric AS amount, 'x'::text AS label, NULL::int AS nothing"
    )
    assert result.to_rows() == [["true", "5.0", "x", None]]


def test_empty_result_keeps_header(pg_session):
    pg_session.run_query("CREATE TEMP TABLE pgb_empty (a int, b text)")

    result = pg_session.run_query("SELECT * FROM pgb_empty")

    assert result.is_empty
    assert result.header == ["a", "b"]


def test_list_databases_includes_admin(pg_session):
    assert "postgres" in [db.name for db in pg_session.list_databases()]


def test_missing_database(pg_params):
    with pytest.raises(DatabaseNotFoundError):
        Session().connect(pg_params.with_database(f"pgb_missing_{uuid.uuid4().hex[:8]}"))


def test_bad_password(pg_params):
    if not pg_params.password.get_secret_value():
        pytest.skip("server may use trust authentication")
    with pytest.raises(AuthenticationFailedError):
        Session().connect(pg_params.model_copy(update={"password": "definitely-wrong"}))


def test_drop_database(pg_session, pg_params):
    name = f"pgb_scratch_{uuid.uuid4().hex[:8]}"
    pg_session.run_query(f'CREATE DATABASE "{name}"')
    pg_session.connect(pg_params.with_database(name))

    pg_session.drop_database(name)

    assert pg_session.database == "postgres"
    assert name not in [db.name for db in pg_session.list_databases()]
