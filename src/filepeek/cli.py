"""Command line interface for filepeek."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from filepeek.config import AppConfig, parse_bytes
from filepeek.errors import ConfigError, PreviewError
from filepeek.preview.classifier import classify as classify_name
from filepeek.preview.highlight import resolve_language
from filepeek.preview.service import PreviewService
from filepeek.web.app import app as web_app


console = Console()
app = typer.Typer(help="filepeek - sandboxed file browsing and preview")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _open_service(root: Optional[Path]) -> PreviewService:
    try:
        config = AppConfig.from_env()
        if root is not None:
            config = replace(config, root=root)
        return PreviewService(config)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--root") from exc


def _fail(exc: PreviewError) -> NoReturn:
    console.print(f"[red]{exc.code}: {exc}[/red]")
    raise typer.Exit(code=1)


def _entries_table(entries) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Type")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for entry in entries:
        table.add_row(
            entry.type,
            entry.path,
            "" if entry.type == "dir" else _format_size(entry.size),
            entry.modified.strftime("%Y-%m-%d %H:%M"),
        )
    return table


ROOT_OPTION = typer.Option(None, "--root", "-r", help="Directory to sandbox reads to")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose logging")


@app.command()
def serve(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Directory to serve (env FILEPEEK_ROOT)"),
    host: Optional[str] = typer.Option(None, help="Host interface (env FILEPEEK_HOST)"),
    port: Optional[int] = typer.Option(None, help="Server port (env FILEPEEK_PORT)"),
    preview_max: Optional[str] = typer.Option(
        None, help="Maximum size of a whole-file preview, e.g. 512KB (env FILEPEEK_PREVIEW_MAX)"
    ),
    chunk_size: Optional[str] = typer.Option(
        None, help="Default size of a paged read, e.g. 64KB (env FILEPEEK_CHUNK_SIZE)"
    ),
    base_path: Optional[str] = typer.Option(
        None, help="Path prefix when served behind a reverse proxy (env FILEPEEK_BASE_PATH)"
    ),
    read_timeout: Optional[float] = typer.Option(
        None, help="Seconds before a read is abandoned (env FILEPEEK_READ_TIMEOUT)"
    ),
) -> None:
    """Start the preview web service.

    Settings come from ``FILEPEEK_*`` environment variables; options given on
    the command line take precedence.
    """
    import uvicorn

    overrides: dict = {}
    if root is not None:
        overrides["root"] = root
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if base_path is not None:
        overrides["base_path"] = base_path
    if read_timeout is not None:
        overrides["read_timeout"] = read_timeout or None

    try:
        if preview_max is not None:
            overrides["preview_max"] = parse_bytes(preview_max)
        if chunk_size is not None:
            overrides["chunk_size"] = parse_bytes(chunk_size)
        config = replace(AppConfig.from_env(), **overrides)
        resolved_root = config.resolve_root()
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    config.root = resolved_root
    web_app.state.config = config
    console.print(f"Serving [bold]{resolved_root}[/bold] on http://{config.addr}{config.base_path or '/'}")
    uvicorn.run(
        web_app,
        host=config.host,
        port=config.port,
        root_path=config.base_path,
        reload=False,
        log_level="info",
    )


@app.command("ls")
def list_dir(
    path: str = typer.Argument("/", help="Directory relative to the root"),
    root: Optional[Path] = ROOT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List a directory inside the root."""
    _setup_logging(verbose)
    service = _open_service(root)
    try:
        entries = service.list_dir(path)
    except PreviewError as exc:
        _fail(exc)
    if not entries:
        console.print("[yellow]Directory is empty.[/yellow]")
        return
    console.print(_entries_table(entries))


@app.command("find")
def find(
    query: str = typer.Argument(..., help="Case-insensitive name fragment"),
    path: str = typer.Argument("/", help="Directory to search from"),
    recursive: bool = typer.Option(False, "--recursive", "-R", help="Descend into subdirectories"),
    root: Optional[Path] = ROOT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Find entries by name."""
    _setup_logging(verbose)
    service = _open_service(root)
    try:
        results = service.search(path, query, recursive=recursive)
    except PreviewError as exc:
        _fail(exc)
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return
    console.print(_entries_table(results))


@app.command()
def cat(
    path: str = typer.Argument(..., help="File relative to the root"),
    offset: Optional[int] = typer.Option(None, help="Byte offset to start from"),
    limit: Optional[int] = typer.Option(None, help="Maximum number of bytes to read"),
    root: Optional[Path] = ROOT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print one chunk of a file."""
    _setup_logging(verbose)
    service = _open_service(root)
    try:
        chunk = service.get_chunk(path, offset, limit)
    except PreviewError as exc:
        _fail(exc)
    typer.echo(chunk.content, nl=False)
    if chunk.has_more:
        console.print(
            f"\n[dim]bytes {chunk.offset}-{chunk.next_offset} of {chunk.size}; "
            f"continue with --offset {chunk.next_offset} --limit {chunk.limit}[/dim]",
            highlight=False,
        )


@app.command()
def classify(name: str = typer.Argument(..., help="File name")) -> None:
    """Show how a file name would be previewed."""
    result = classify_name(name)
    console.print(f"category:  {result.category}", highlight=False)
    console.print(f"extension: {result.extension or '-'}", highlight=False)
    if result.category == "code":
        console.print(f"language:  {result.language or 'auto'}", highlight=False)


@app.command()
def render(
    path: str = typer.Argument(..., help="Markdown file relative to the root"),
    root: Optional[Path] = ROOT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Render a markdown file to sanitized HTML."""
    _setup_logging(verbose)
    service = _open_service(root)
    try:
        document = service.render_file(path)
    except PreviewError as exc:
        _fail(exc)
    typer.echo(document.html)


@app.command()
def lang(
    extension: str = typer.Argument(..., help="File extension, with or without the dot"),
    filename: Optional[str] = typer.Option(None, help="File name, for Dockerfile/Makefile detection"),
) -> None:
    """Show the highlighting grammar for an extension."""
    typer.echo(resolve_language(extension, filename) or "auto")
