from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from pgbrowser.common.errors import SessionError
from pgbrowser.results.models import ResultSet

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "null": "dim italic",
})

console = Console(theme=custom_theme)

NULL_TEXT = "NULL"


def print_success(message: str) -> None:
    console.print(f"[success]✔ {message}[/success]")


def print_error(message: str, suggestion: Optional[str] = None) -> None:
    console.print(f"[error]✘ {message}[/error]")
    if suggestion:
        console.print(f"[info]{suggestion}[/info]")


def print_session_error(error: SessionError) -> None:
    print_error(error.description, error.recovery_suggestion)


def render_result(result: ResultSet, title: Optional[str] = None) -> None:
    """Prints a ResultSet as a table; NULL cells render as ``NULL``."""
    if not result.has_header:
        if result.rows_affected is not None and result.rows_affected >= 0:
            print_success(f"Statement executed, {result.rows_affected} rows affected")
        else:
            console.print("[warning]Query returned no rows (column names unavailable)[/warning]")
        return

    table = Table(title=title, caption=_caption(result))
    for name in result.header:
        table.add_column(name, no_wrap=True)
    for row in result.to_rows():
        table.add_row(*[Text(NULL_TEXT, style="null") if value is None else Text(value) for value in row])
    console.print(table)


def _caption(result: ResultSet) -> str:
    if result.is_empty:
        caption = "Query returned no rows"
    else:
        caption = f"{result.row_count} rows"
    if result.execution_time_ms is not None:
        caption += f" in {result.execution_time_ms:.1f} ms"
    return caption
