"""Command line interface for esseldoc."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from esseldoc.buffer import BufferSnapshot
from esseldoc.config import STRATEGIES, AppConfig
from esseldoc.eldoc.resolver import DocResolver, find_enclosing_call
from esseldoc.interpreter.session import RscriptSession
from esseldoc.utils.text import offset_from_position


console = Console()
app = typer.Typer(help="esseldoc - argument hints for R code")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_snapshot(
    source: Path, offset: Optional[int], line: Optional[int], column: Optional[int]
) -> BufferSnapshot:
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read {source}: {exc}") from exc

    if offset is not None:
        if line is not None or column is not None:
            raise typer.BadParameter("Use either --offset or --line/--column, not both")
        if not 0 <= offset <= len(text):
            raise typer.BadParameter(f"Offset {offset} outside 0..{len(text)}")
        return BufferSnapshot(text, offset)

    if line is None:
        raise typer.BadParameter("A cursor position is required: --offset or --line")
    try:
        cursor = offset_from_position(text, line, column or 0)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return BufferSnapshot(text, cursor)


SOURCE = typer.Argument(..., help="R source file.", exists=True, dir_okay=False, resolve_path=True)
OFFSET = typer.Option(None, "--offset", "-o", help="Cursor offset in characters")
LINE = typer.Option(None, "--line", "-l", help="Cursor line (1-based)")
COLUMN = typer.Option(None, "--column", "-c", help="Cursor column (0-based)")


@app.command()
def token(
    source: Path = SOURCE,
    offset: Optional[int] = OFFSET,
    line: Optional[int] = LINE,
    column: Optional[int] = COLUMN,
) -> None:
    """Print the name under the cursor."""
    snapshot = _load_snapshot(source, offset, line, column)
    name = snapshot.token_at()
    if not name:
        console.print("[yellow]No name under cursor.[/yellow]")
        return
    console.print(name)


@app.command()
def call(
    source: Path = SOURCE,
    offset: Optional[int] = OFFSET,
    line: Optional[int] = LINE,
    column: Optional[int] = COLUMN,
) -> None:
    """Print the function whose argument list encloses the cursor."""
    snapshot = _load_snapshot(source, offset, line, column)
    name = find_enclosing_call(snapshot)
    if name is None:
        console.print("[yellow]Cursor is not inside a call.[/yellow]")
        return
    console.print(name)


@app.command()
def doc(
    source: Path = SOURCE,
    offset: Optional[int] = OFFSET,
    line: Optional[int] = LINE,
    column: Optional[int] = COLUMN,
    strategy: str = typer.Option(AppConfig().strategy, help="fallback or cached"),
    rscript: str = typer.Option(AppConfig().rscript, help="Rscript executable"),
    timeout: float = typer.Option(AppConfig().timeout, help="Seconds to wait for R"),
    show_name: bool = typer.Option(False, "--show-name", help="Prefix hints with the function name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show the argument list of the function relevant at the cursor."""
    _setup_logging(verbose)
    if strategy not in STRATEGIES:
        raise typer.BadParameter(f"Strategy must be one of: {', '.join(STRATEGIES)}")
    if timeout <= 0:
        raise typer.BadParameter("Timeout must be positive")

    config = AppConfig(
        strategy=strategy,  # type: ignore[arg-type]
        rscript=rscript,
        timeout=timeout,
        show_name=show_name,
    )
    snapshot = _load_snapshot(source, offset, line, column)

    session = RscriptSession(config)
    if not session.is_active():
        console.print(f"[yellow]R interpreter not available ({config.rscript}).[/yellow]")
        return

    resolver = DocResolver(session.lookup_args, session.is_active, config)
    hint = resolver.provider(snapshot)
    if hint is None:
        console.print("[yellow]No documentation found.[/yellow]")
        return
    console.print(hint, markup=False)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Serve argument hints over HTTP."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from esseldoc.web.app import app as web_app

    console.print(f"Serving argument hints on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
