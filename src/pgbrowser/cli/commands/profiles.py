import typer
from typing_extensions import Annotated
from rich.table import Table

from pgbrowser.cli.console import console, print_success
from pgbrowser.cli.common.decorators import handle_cli_errors
from pgbrowser.common.settings import settings
from pgbrowser.profiles import ConnectionProfile, ProfileStore
from pgbrowser.secrets import EnvironmentSecretStore

app = typer.Typer(help="Manage saved connection profiles.")


def get_store() -> ProfileStore:
    return ProfileStore(settings.profiles_path)


@app.command("list")
@handle_cli_errors
def list_profiles(
    recent: Annotated[bool, typer.Option("--recent", help="Order by last use instead of name")] = False,
):
    """
    List saved connection profiles.
    """
    store = get_store()
    profiles = store.recent() if recent else store.list()
    if not profiles:
        console.print("[warning]No saved connections.[/warning]")
        return

    table = Table(title="Saved Connections")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Host")
    table.add_column("Port", justify="right")
    table.add_column("User")
    table.add_column("Database")
    table.add_column("Last Used")
    table.add_column("ID", style="dim")

    for profile in profiles:
        name = f"★ {profile.name}" if profile.is_favorite else profile.name
        last_used = profile.last_used.strftime("%Y-%m-%d %H:%M") if profile.last_used else "-"
        table.add_row(
            name, profile.host, str(profile.port), profile.username,
            profile.database, last_used, str(profile.id),
        )
    console.print(table)


@app.command("add")
@handle_cli_errors
def add_profile(
    name: Annotated[str, typer.Argument(help="Display name for the connection")],
    host: Annotated[str, typer.Option("--host", "-h", help="Server host")] = settings.default_host,
    port: Annotated[int, typer.Option("--port", "-p", help="Server port")] = settings.default_port,
    user: Annotated[str, typer.Option("--user", "-U", help="User name")] = settings.default_username,
    database: Annotated[str, typer.Option("--database", "-d", help="Database name")] = settings.default_database,
    favorite: Annotated[bool, typer.Option("--favorite", help="Mark as favorite")] = False,
):
    """
    Save a new connection profile.
    """
    profile = ConnectionProfile(
        name=name, host=host, port=port, username=user, database=database, is_favorite=favorite,
    )
    get_store().save(profile)
    print_success(f"Saved connection '{name}' ({profile.id})")
    console.print(
        f"[info]Provide its password via {EnvironmentSecretStore().key_for(profile.id)} or --password.[/info]"
    )


@app.command("remove")
@handle_cli_errors
def remove_profile(
    key: Annotated[str, typer.Argument(help="Profile name or id")],
):
    """
    Delete a saved connection profile and its stored password.
    """
    profile = get_store().delete(key)
    EnvironmentSecretStore().delete_password(profile.id)
    print_success(f"Removed connection '{profile.name}'")
