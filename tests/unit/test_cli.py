import locale
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from pgbrowser.cli.console import console
from pgbrowser.cli.main import app
from pgbrowser.common.errors import AuthenticationFailedError
from pgbrowser.common.settings import settings
from pgbrowser.profiles import ConnectionProfile, ProfileStore
from pgbrowser.results import Record, ResultSet
from pgbrowser.secrets import EnvironmentSecretStore
from pgbrowser.session import DatabaseInfo, TableInfo

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(console, "width", 200)


@pytest.fixture(autouse=True)
def restore_locale():
    saved = locale.setlocale(locale.LC_ALL)
    yield
    locale.setlocale(locale.LC_ALL, saved)


@pytest.fixture
def profiles_path(monkeypatch, tmp_path):
    path = tmp_path / "connections.yaml"
    monkeypatch.setattr(settings, "profiles_path", str(path))
    return path


@pytest.fixture
def mock_session():
    with patch("pgbrowser.cli.main.Session") as session_cls:
        session = session_cls.return_value
        session.__enter__.return_value = session
        yield session


def _people():
    return ResultSet(header=["id", "name"], records=[
        Record(values={"id": "1", "name": "alice"}),
        Record(values={"id": "2", "name": None}),
        Record(values={"id": "3", "name": "bob"}),
    ])


class TestQueryCommand:

    def test_renders_rows_and_nulls(self, mock_session):
        mock_session.run_query.return_value = _people()

        result = runner.invoke(app, ["query", "SELECT id, name FROM people"])

        assert result.exit_code == 0, result.output
        assert "alice" in result.output
        assert "NULL" in result.output
        mock_session.run_query.assert_called_once_with("SELECT id, name FROM people")

    def test_sort_option(self, mock_session):
        mock_session.run_query.return_value = _people()

        result = runner.invoke(app, ["query", "SELECT 1", "--sort", "name:desc"])

        assert result.exit_code == 0, result.output
        output = result.output
        assert output.index("NULL") < output.index("bob") < output.index("alice")

    def test_unknown_sort_column(self, mock_session):
        mock_session.run_query.return_value = _people()

        result = runner.invoke(app, ["query", "SELECT 1", "--sort", "nope"])

        assert result.exit_code == 1
        assert "Unknown sort column" in result.output

    def test_statement_without_rows(self, mock_session):
        mock_session.run_query.return_value = ResultSet(rows_affected=3)

        result = runner.invoke(app, ["query", "DELETE FROM people"])

        assert result.exit_code == 0
        assert "3 rows affected" in result.output

    def test_connection_error_shows_suggestion(self, mock_session):
        error = AuthenticationFailedError()
        mock_session.connect.side_effect = error

        result = runner.invoke(app, ["query", "SELECT 1", "--host", "db", "--user", "bob"])

        assert result.exit_code == 1
        assert "Authentication failed" in result.output
        assert "Verify your username and password" in result.output

    def test_connection_params_from_options(self, mock_session):
        mock_session.run_query.return_value = ResultSet()

        runner.invoke(app, ["query", "SELECT 1", "-h", "db", "-p", "6432", "-U", "bob", "-d", "shop"],
                      env={"PGPASSWORD": "pw"})

        params = mock_session.connect.call_args.args[0]
        assert (params.host, params.port, params.username, params.database) == ("db", 6432, "bob", "shop")
        assert params.password.get_secret_value() == "pw"


class TestBrowseCommands:

    def test_rows_paging(self, mock_session):
        mock_session.fetch_rows.return_value = _people()

        result = runner.invoke(app, ["rows", "orders", "--page", "3", "--page-size", "20"])

        assert result.exit_code == 0, result.output
        mock_session.fetch_rows.assert_called_once_with("public", "orders", offset=40, limit=20)

    def test_rows_page_size_is_clamped(self, mock_session):
        mock_session.fetch_rows.return_value = _people()

        runner.invoke(app, ["rows", "orders", "--schema", "sales", "--page-size", "5000"])

        mock_session.fetch_rows.assert_called_once_with("sales", "orders", offset=0, limit=1000)

    def test_databases(self, mock_session):
        mock_session.list_databases.return_value = [
            DatabaseInfo(name="shop", size_in_bytes=2048),
            DatabaseInfo(name="locked"),
        ]

        result = runner.invoke(app, ["databases"])

        assert result.exit_code == 0
        assert "shop" in result.output
        assert "2.0 KB" in result.output

    def test_tables(self, mock_session):
        mock_session.list_tables.return_value = [TableInfo(name="orders", schema_name="sales")]

        result = runner.invoke(app, ["tables", "-d", "shop"])

        assert result.exit_code == 0
        assert "orders" in result.output
        assert "sales" in result.output

    def test_test_command(self, mock_session):
        result = runner.invoke(app, ["test", "--host", "db"])

        assert result.exit_code == 0
        assert "Connected to" in result.output
        mock_session.test_connection.assert_called_once()
        mock_session.connect.assert_not_called()


class TestDestructiveCommands:

    def test_drop_database_requires_confirmation(self, mock_session):
        result = runner.invoke(app, ["drop-database", "scratch"], input="n\n")

        assert result.exit_code == 1
        mock_session.drop_database.assert_not_called()

    def test_drop_database(self, mock_session):
        result = runner.invoke(app, ["drop-database", "scratch", "--yes"])

        assert result.exit_code == 0
        mock_session.drop_database.assert_called_once_with("scratch")

    def test_drop_table(self, mock_session):
        result = runner.invoke(app, ["drop-table", "orders", "--schema", "sales"], input="y\n")

        assert result.exit_code == 0
        mock_session.drop_table.assert_called_once_with("sales", "orders")


class TestProfiles:

    def test_add_list_remove(self, profiles_path):
        result = runner.invoke(app, ["profiles", "add", "prod", "--host", "db.internal", "--user", "app"])
        assert result.exit_code == 0, result.output
        assert profiles_path.exists()

        result = runner.invoke(app, ["profiles", "list"])
        assert "prod" in result.output
        assert "db.internal" in result.output

        result = runner.invoke(app, ["profiles", "remove", "prod"])
        assert result.exit_code == 0
        assert ProfileStore(profiles_path).list() == []

    def test_remove_unknown(self, profiles_path):
        result = runner.invoke(app, ["profiles", "remove", "ghost"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_empty_list(self, profiles_path):
        result = runner.invoke(app, ["profiles", "list"])
        assert "No saved connections" in result.output

    def test_connect_with_profile(self, profiles_path, mock_session, monkeypatch):
        store = ProfileStore(profiles_path)
        profile = store.save(ConnectionProfile(name="prod", host="db.internal", username="app", database="shop"))
        monkeypatch.setenv(EnvironmentSecretStore().key_for(profile.id), "stored-pw")
        monkeypatch.delenv("PGPASSWORD", raising=False)
        mock_session.list_tables.return_value = []

        result = runner.invoke(app, ["tables", "--profile", "prod", "--database", "other"])

        assert result.exit_code == 0, result.output
        params = mock_session.connect.call_args.args[0]
        assert (params.host, params.username, params.database) == ("db.internal", "app", "other")
        assert params.password.get_secret_value() == "stored-pw"
        assert store.get("prod").last_used is not None

    def test_unknown_profile(self, profiles_path, mock_session):
        result = runner.invoke(app, ["tables", "--profile", "ghost"])
        assert result.exit_code == 1
        mock_session.connect.assert_not_called()

    def test_failed_connect_does_not_mark_profile_used(self, profiles_path, mock_session):
        store = ProfileStore(profiles_path)
        store.save(ConnectionProfile(name="prod", host="db.internal", username="app"))
        mock_session.connect.side_effect = AuthenticationFailedError()

        result = runner.invoke(app, ["tables", "--profile", "prod"])

        assert result.exit_code == 1
        assert store.get("prod").last_used is None

    def test_test_command_marks_profile_used(self, profiles_path, mock_session):
        store = ProfileStore(profiles_path)
        store.save(ConnectionProfile(name="prod", host="db.internal", username="app"))

        result = runner.invoke(app, ["test", "--profile", "prod"])

        assert result.exit_code == 0, result.output
        assert store.get("prod").last_used is not None


class TestLocale:

    def test_commands_adopt_the_environment_locale(self, mock_session):
        mock_session.list_tables.return_value = []

        with patch("pgbrowser.cli.main.locale.setlocale") as setlocale:
            result = runner.invoke(app, ["tables"])

        assert result.exit_code == 0, result.output
        setlocale.assert_called_once_with(locale.LC_ALL, "")

    def test_unsupported_locale_is_not_fatal(self, mock_session):
        mock_session.list_tables.return_value = []

        with patch("pgbrowser.cli.main.locale.setlocale", side_effect=locale.Error("unsupported locale setting")):
            result = runner.invoke(app, ["tables"])

        assert result.exit_code == 0, result.output
