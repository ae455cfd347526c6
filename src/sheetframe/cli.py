"""CLI entry point for sheetframe."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from sheetframe import __version__
from sheetframe.config import BuildOptions, resolve_options
from sheetframe.errors import FrameBuildError, ShapeMismatchError
from sheetframe.export import write_build_report, write_frame
from sheetframe.headers import collapse_headers
from sheetframe.io import RowListSheet, load_worksheet, write_json
from sheetframe.logs import setup_logging
from sheetframe.models import BuildReport, Frame, RunManifest
from sheetframe.pipeline import build_frame_with_report
from sheetframe.utils import parse_index_list, sha256_file, utcnow_iso

app = typer.Typer(
    name="sheetframe",
    help="sheetframe — Turn messy worksheets into frames with clean, unique headers.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


class ExportFormatOption(str, Enum):
    csv = "csv"
    json = "json"
    xlsx = "xlsx"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {escape(msg)}", soft_wrap=True)


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"sheetframe v{__version__}")
        raise typer.Exit()


def _resolve(
    *,
    profile: Path | None,
    sheet: str | None,
    header_row: list[str] | None,
    data_start: int | None,
    workers: int | None,
    rows: int | None = None,
) -> BuildOptions:
    try:
        header_rows = parse_index_list(header_row or [])
        return resolve_options(
            profile,
            sheet=sheet,
            header_rows=header_rows,
            data_start=data_start,
            workers=workers,
            rows=rows,
        )
    except ValueError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _load(input_file: Path, options: BuildOptions) -> RowListSheet:
    try:
        return load_worksheet(input_file, options.sheet)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _build(sheet: RowListSheet, options: BuildOptions) -> tuple[Frame, BuildReport]:
    try:
        return build_frame_with_report(
            sheet, options.header_rows, options.data_start, workers=options.workers
        )
    except ShapeMismatchError as exc:
        _err(f"Internal consistency error: {exc}")
        raise typer.Exit(code=1)
    except FrameBuildError as exc:
        _err(str(exc))
        console.print(
            f"  Worksheet {escape(repr(sheet.name))} has {sheet.row_count()} rows; "
            "header rows are zero-based (--header-row 0 is the first row)"
        )
        raise typer.Exit(code=2)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)


def _frame_table(frame: Frame, title: str) -> RichTable:
    tbl = RichTable(title=title, show_lines=False)
    for header in frame.headers:
        tbl.add_column(escape(header), overflow="fold")
    for row in frame.rows():
        tbl.add_row(*(escape(value) for value in row))
    return tbl


def _print_warnings(report: BuildReport, quiet: bool) -> None:
    if quiet:
        return
    for w in report.warnings:
        console.print(f"  [yellow]![/yellow] {escape(w)}")
    for renamed in report.renamed_headers:
        console.print(f"  [dim]renamed {escape(renamed)}[/dim]")


# ── Shared options ───────────────────────────────────────────────

_INPUT = typer.Option(
    ..., "--input", "-i",
    help="Path to XLSX, XLS or CSV input file.",
    exists=True, readable=True,
)
_SHEET = typer.Option(
    None, "--sheet", "-s", help="Worksheet name (default: first sheet).",
)
_HEADER_ROW = typer.Option(
    None, "--header-row", "-H",
    help="Zero-based header row index; repeat or use 0,1 for multi-row headers.",
)
_DATA_START = typer.Option(
    None, "--data-start", min=0,
    help="Zero-based index of the first data row (default: after the last header row).",
)
_WORKERS = typer.Option(
    None, "--workers", min=1, help="Thread pool size for column assembly.",
)
_PROFILE = typer.Option(
    None, "--profile", help="Profile file with key=value defaults (sheet, header_rows, ...).",
)
_QUIET = typer.Option(False, "--quiet", "-q", help="Suppress informational output.")
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """sheetframe CLI."""


# ── show command ─────────────────────────────────────────────────


@app.command()
def show(
    input_file: Path = _INPUT,
    sheet: str | None = _SHEET,
    header_row: list[str] | None = _HEADER_ROW,
    data_start: int | None = _DATA_START,
    rows: int | None = typer.Option(
        None, "--rows", "-n", min=0, help="Number of rows to print (default 10).",
    ),
    workers: int | None = _WORKERS,
    profile: Path | None = _PROFILE,
    quiet: bool = _QUIET,
    verbose: bool = _VERBOSE,
) -> None:
    """Print the first rows of the resolved frame."""
    setup_logging(verbose)
    options = _resolve(
        profile=profile, sheet=sheet, header_row=header_row,
        data_start=data_start, workers=workers, rows=rows,
    )
    ws = _load(input_file, options)
    frame, report = _build(ws, options)

    title = escape(f"{input_file.name} [{ws.name}]")
    console.print(_frame_table(frame.head(options.rows), title=title))
    console.print(f"shape: ({frame.row_count}, {frame.column_count})")
    _print_warnings(report, quiet)


# ── headers command ──────────────────────────────────────────────


@app.command()
def headers(
    input_file: Path = _INPUT,
    sheet: str | None = _SHEET,
    header_row: list[str] | None = _HEADER_ROW,
    profile: Path | None = _PROFILE,
    quiet: bool = _QUIET,
    verbose: bool = _VERBOSE,
) -> None:
    """List the resolved column names next to the collapsed header labels."""
    setup_logging(verbose)
    options = _resolve(
        profile=profile, sheet=sheet, header_row=header_row,
        data_start=None, workers=None,
    )
    ws = _load(input_file, options)
    frame, report = _build(ws, options)
    collapsed = collapse_headers([ws.row_at(i) for i in report.header_rows])

    tbl = RichTable(title="Resolved Headers", show_lines=False)
    tbl.add_column("#", justify="right")
    tbl.add_column("Collapsed")
    tbl.add_column("Header", style="bold")
    for idx, (label, final) in enumerate(zip(collapsed, frame.headers)):
        tbl.add_row(str(idx), escape(label), escape(final))
    console.print(tbl)
    _print_warnings(report, quiet)


# ── export command ───────────────────────────────────────────────


@app.command()
def export(
    input_file: Path = _INPUT,
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for the frame + build report + manifest.",
    ),
    fmt: ExportFormatOption = typer.Option(
        ExportFormatOption.csv, "--format", "-f", help="Output format: csv, json, or xlsx.",
    ),
    sheet: str | None = _SHEET,
    header_row: list[str] | None = _HEADER_ROW,
    data_start: int | None = _DATA_START,
    workers: int | None = _WORKERS,
    profile: Path | None = _PROFILE,
    quiet: bool = _QUIET,
    verbose: bool = _VERBOSE,
) -> None:
    """Write the resolved frame plus build_report.json and run_manifest.json."""
    setup_logging(verbose)
    echo = _printer(quiet)
    created_at = utcnow_iso()
    options = _resolve(
        profile=profile, sheet=sheet, header_row=header_row,
        data_start=data_start, workers=workers,
    )

    if not quiet:
        console.print(Panel(
            f"[bold]sheetframe[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {out_dir}",
            title="Export", border_style="blue",
        ))

    echo("[blue]>[/blue] Loading worksheet …")
    ws = _load(input_file, options)
    echo(f"  {ws.row_count()} rows in sheet {escape(repr(ws.name))}")

    echo("[blue]>[/blue] Resolving headers …")
    frame, report = _build(ws, options)
    _print_warnings(report, quiet)

    try:
        echo(f"[blue]>[/blue] Writing {fmt.value.upper()} …")
        frame_path = write_frame(frame, out_dir, fmt.value, stem=input_file.stem)
        report_path = write_build_report(out_dir, report)

        sha256 = ""
        try:
            sha256 = sha256_file(input_file)
        except OSError:
            pass
        manifest = RunManifest(
            version=__version__,
            input_path=str(input_file.resolve()),
            sheet=ws.name,
            output_path=str(frame_path.resolve()),
            created_at_utc=created_at,
            rows=frame.row_count,
            columns=frame.column_count,
            sha256=sha256,
        )
        manifest_path = write_json(out_dir / "run_manifest.json", manifest.to_dict())
    except typer.Exit:
        raise
    except OSError as exc:
        _err(f"Cannot write output: {exc}")
        raise typer.Exit(code=2)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    echo(f"  Frame    -> {frame_path}")
    echo(f"  Report   -> {report_path}")
    echo(f"  Manifest -> {manifest_path}")
    if not quiet:
        console.print(Panel(
            f"[green]Done[/green] — {frame.row_count} rows x {frame.column_count} columns",
            title="Export Complete", border_style="green",
        ))
