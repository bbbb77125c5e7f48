"""Command line interface for inspecting gateway result documents."""
import pathlib
from typing import Optional

import typer
from rich.table import Table
from rich.text import Text
from typing_extensions import Annotated

from gateway_results.common.errors import DecodeError
from gateway_results.common.logger import configure_logging
from gateway_results.common.settings import settings
from gateway_results.console import console, print_error, print_success, render_result_set
from gateway_results.decoder import ResultSetDecoder, load_document
from gateway_results.schema import decode_columns

app = typer.Typer(
    name="gateway-results",
    help="Decode SQL gateway result documents.",
    no_args_is_help=True,
    add_completion=False,
)

PathArgument = Annotated[
    pathlib.Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="Path to a result document (JSON)."),
]


@app.callback()
def global_callback(
    json_logs: Annotated[bool, typer.Option("--json-logs", help="Emit JSON log records.")] = False,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Root log level.")] = None,
):
    """
    Gateway results CLI entry point.
    """
    configure_logging(
        level=log_level or settings.log_level,
        json_format=json_logs or settings.log_json,
    )


@app.command()
def decode(
    path: PathArgument,
    max_depth: Annotated[Optional[int], typer.Option("--max-depth", min=1, help="Maximum ROW nesting depth.")] = None,
    ignore_flag_mismatch: Annotated[bool, typer.Option("--ignore-flag-mismatch", help="Accept change flag counts that differ from the row count.")] = False,
    limit: Annotated[Optional[int], typer.Option("--limit", min=0, help="Show at most this many rows.")] = None,
):
    """Decode a result document and print its rows."""
    decoder = ResultSetDecoder(
        max_nesting_depth=max_depth,
        change_flags_policy="ignore" if ignore_flag_mismatch else None,
    )
    try:
        result = decoder.decode(load_document(path.read_bytes()))
    except DecodeError as exc:
        print_error(f"{type(exc).__name__}: {exc}")
        raise typer.Exit(code=1)

    console.print(render_result_set(result, limit=limit))
    print_success(f"Decoded {result.row_count} rows")


@app.command()
def schema(path: PathArgument):
    """Print the column schema of a result document."""
    try:
        document = load_document(path.read_bytes())
        if not isinstance(document, dict) or "columns" not in document:
            print_error("Document has no columns section")
            raise typer.Exit(code=1)
        columns = decode_columns(document["columns"])
    except DecodeError as exc:
        print_error(f"{type(exc).__name__}: {exc}")
        raise typer.Exit(code=1)

    table = Table(header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("name")
    table.add_column("type")
    for index, column in enumerate(columns):
        table.add_row(str(index), Text(column.name), Text(column.logical_type.as_summary_string()))
    console.print(table)


def main() -> None:
    app()
