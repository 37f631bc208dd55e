#!/usr/bin/env python3
"""Command line browser for PostgreSQL servers."""
import locale
import typer
from typing import List, Optional, Tuple
from uuid import UUID
from typing_extensions import Annotated
from rich.table import Table

from pgbrowser.session import Session, ConnectionParams
from pgbrowser.results import ResultSet, SortDescriptor
from pgbrowser.common.logger import get_logger
from pgbrowser.common.settings import settings
from pgbrowser.profiles import ProfileStore
from pgbrowser.secrets import EnvironmentSecretStore, resolve_password

from pgbrowser.cli.console import console, print_success, render_result
from pgbrowser.cli.common.decorators import handle_cli_errors
from pgbrowser.cli.commands.profiles import app as profiles_app

app = typer.Typer(
    name="pgbrowser",
    help="Browse PostgreSQL databases, tables and query results.",
    no_args_is_help=True,
    add_completion=False,
)

app.add_typer(profiles_app, name="profiles", help="Manage saved connection profiles.")

logger = get_logger(__name__)

# Shared Options
ProfileOption = Annotated[Optional[str], typer.Option("--profile", "-P", help="Saved connection name or id")]
HostOption = Annotated[Optional[str], typer.Option("--host", "-h", help="Server host")]
PortOption = Annotated[Optional[int], typer.Option("--port", "-p", help="Server port")]
UserOption = Annotated[Optional[str], typer.Option("--user", "-U", help="User name")]
DatabaseOption = Annotated[Optional[str], typer.Option("--database", "-d", help="Database name")]
PasswordOption = Annotated[Optional[str], typer.Option("--password", envvar="PGPASSWORD", help="Password (defaults to the stored one)")]
SortOption = Annotated[Optional[List[str]], typer.Option("--sort", "-s", help="Sort by COLUMN[:asc|desc]; repeat for tie-breakers")]


@app.callback()
def global_callback():
    """
    Browse PostgreSQL databases, tables and query results.
    """
    # Text ordering and date formatting follow the user's locale
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as e:
        logger.warning(f"Unsupported locale settings, using the C locale: {e}")


def resolve_params(
    profile: Optional[str],
    host: Optional[str],
    port: Optional[int],
    user: Optional[str],
    database: Optional[str],
    password: Optional[str],
) -> Tuple[ConnectionParams, Optional[UUID]]:
    """
    Builds connection parameters from a saved profile or the configured defaults.

    Explicit options override the profile's values. A profile's password comes
    from the environment secret store unless ``--password`` is given.

    Returns:
        The parameters and the id of the saved profile they came from, if any.
    """
    if profile:
        store = ProfileStore(settings.profiles_path)
        saved = store.get(profile)
        if password is None:
            password = resolve_password(EnvironmentSecretStore(), saved.id)
        params = saved.to_params(password=password, database=database)
        overrides = {"host": host, "port": port, "username": user}
        return params.model_copy(update={k: v for k, v in overrides.items() if v is not None}), saved.id

    return ConnectionParams(
        host=host if host is not None else settings.default_host,
        port=port if port is not None else settings.default_port,
        username=user if user is not None else settings.default_username,
        password=password or "",
        database=database or settings.default_database,
    ), None


def mark_used(profile_id: Optional[UUID]) -> None:
    """Stamps the saved profile as used once a connection has succeeded."""
    if profile_id is not None:
        ProfileStore(settings.profiles_path).touch(profile_id)


def open_session(params: ConnectionParams, profile_id: Optional[UUID] = None) -> Session:
    session = Session()
    session.connect(params)
    try:
        mark_used(profile_id)
    except Exception:
        session.disconnect()
        raise
    return session


def apply_sort(result: ResultSet, sort: Optional[List[str]]) -> ResultSet:
    if not sort:
        return result
    descriptors = [SortDescriptor.parse(item) for item in sort]
    unknown = [d.column for d in descriptors if d.column not in result.header]
    if unknown and result.has_header:
        raise ValueError(f"Unknown sort column(s): {', '.join(unknown)}")
    return result.sorted_by(descriptors)


def _format_size(size: Optional[int]) -> str:
    if size is None:
        return "-"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


@app.command()
@handle_cli_errors
def test(
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    Check that a connection can be opened.
    """
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    Session().test_connection(params)
    mark_used(profile_id)
    print_success(f"Connected to {params.database} at {params.host}:{params.port}")


@app.command()
@handle_cli_errors
def databases(
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    List databases on the server.
    """
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        items = session.list_databases()

    table = Table(title=f"Databases on {params.host}:{params.port}")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Size", justify="right")
    for item in items:
        table.add_row(item.name, _format_size(item.size_in_bytes))
    console.print(table)


@app.command()
@handle_cli_errors
def tables(
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    List base tables of a database.
    """
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        items = session.list_tables()

    if not items:
        console.print(f"[warning]No tables in {params.database}.[/warning]")
        return
    table = Table(title=f"Tables in {params.database}")
    table.add_column("Schema", style="dim")
    table.add_column("Table", style="cyan", no_wrap=True)
    for item in items:
        table.add_row(item.schema_name, item.name)
    console.print(table)


@app.command()
@handle_cli_errors
def columns(
    table_name: Annotated[str, typer.Argument(metavar="TABLE", help="Table name")],
    schema: Annotated[str, typer.Option("--schema", help="Schema name")] = "public",
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    Describe the columns of a table.
    """
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        items = session.list_columns(schema, table_name)

    table = Table(title=f"{schema}.{table_name}")
    table.add_column("Column", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Nullable")
    table.add_column("Default")
    table.add_column("Keys")
    for item in items:
        keys = [label for flag, label in (
            (item.is_primary_key, "PK"), (item.is_unique, "UNIQUE"), (item.is_foreign_key, "FK"),
        ) if flag]
        table.add_row(
            item.name,
            item.data_type,
            "yes" if item.is_nullable else "no",
            item.default_value or "",
            ", ".join(keys),
        )
    console.print(table)


@app.command()
@handle_cli_errors
def rows(
    table_name: Annotated[str, typer.Argument(metavar="TABLE", help="Table name")],
    schema: Annotated[str, typer.Option("--schema", help="Schema name")] = "public",
    page: Annotated[int, typer.Option("--page", min=1, help="1-based page number")] = 1,
    page_size: Annotated[Optional[int], typer.Option("--page-size", help="Rows per page")] = None,
    sort: SortOption = None,
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    Show one page of a table's rows.
    """
    limit = settings.clamp_page_size(page_size or settings.rows_per_page)
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        result = session.fetch_rows(schema, table_name, offset=(page - 1) * limit, limit=limit)

    render_result(apply_sort(result, sort), title=f"{schema}.{table_name} (page {page})")


@app.command()
@handle_cli_errors
def query(
    sql: Annotated[str, typer.Argument(help="SQL statement to execute")],
    sort: SortOption = None,
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    Execute a SQL statement and show its results.
    """
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        result = session.run_query(sql)

    render_result(apply_sort(result, sort))


@app.command("drop-table")
@handle_cli_errors
def drop_table(
    table_name: Annotated[str, typer.Argument(metavar="TABLE", help="Table name")],
    schema: Annotated[str, typer.Option("--schema", help="Schema name")] = "public",
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    Drop a table.
    """
    if not yes:
        typer.confirm(f"Drop table {schema}.{table_name}?", abort=True)
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        session.drop_table(schema, table_name)
    print_success(f"Table '{schema}.{table_name}' dropped")


@app.command("drop-database")
@handle_cli_errors
def drop_database(
    name: Annotated[str, typer.Argument(help="Database to drop")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    user: UserOption = None,
    database: DatabaseOption = None,
    password: PasswordOption = None,
):
    """
    Drop a database. The drop is issued from the administrative database.
    """
    if not yes:
        typer.confirm(f"Drop database {name}? This cannot be undone.", abort=True)
    params, profile_id = resolve_params(profile, host, port, user, database, password)
    with open_session(params, profile_id) as session:
        session.drop_database(name)
    print_success(f"Database '{name}' dropped")


if __name__ == "__main__":
    app()
