from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from gateway_results.result import ResultSet
from gateway_results.row import Row

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "null": "dim italic",
})

console = Console(theme=custom_theme)


def print_success(message: str) -> None:
    console.print(f"[success]✔ {message}[/success]")


def print_error(message: str) -> None:
    console.print(Text(f"✘ {message}", style="error"))


def format_value(value: Any) -> Text:
    if value is None:
        return Text("NULL", style="null")
    if isinstance(value, Row):
        return Text(repr(value))
    if isinstance(value, bytes):
        return Text("x'" + value.hex() + "'")
    if hasattr(value, "isoformat"):
        return Text(value.isoformat())
    return Text(str(value))


def render_result_set(result: ResultSet, limit: Optional[int] = None) -> Table:
    """Builds a rich table of the result rows, prefixed by the change flag when present."""
    table = Table(show_lines=False, header_style="bold")
    if result.change_flags is not None:
        table.add_column("op", justify="center")
    for column in result.columns:
        table.add_column(
            f"{escape(column.name)}\n[dim]{escape(column.logical_type.as_summary_string())}[/dim]"
        )

    rows = result.data if limit is None else result.data[:limit]
    for index, row in enumerate(rows):
        cells = [format_value(value) for value in row]
        if result.change_flags is not None:
            flag = result.change_flags[index] if index < len(result.change_flags) else None
            cells.insert(0, Text({True: "+", False: "-", None: "?"}[flag]))
        table.add_row(*cells)
    return table
