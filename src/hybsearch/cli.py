"""
hybsearch CLI - Main command-line interface.

This module provides the entry point: ``run`` submits a file to a server
and follows the pipeline, ``pipelines`` shows what a server can run.
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.traceback import install

from hybsearch import __version__
from hybsearch.config import ConfigManager
from hybsearch.errors import HybsearchError
from hybsearch.server import ServerApi
from hybsearch.session import Session, SessionClient
from hybsearch.utils import format_duration, sanitize_error_message

# Install rich traceback handler for better error display
install(show_locals=False)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="hybsearch",
    help="hybsearch CLI - Run analysis pipelines on a remote hybsearch server",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: Optional[bool]) -> None:
    if value:
        console.print(f"hybsearch CLI version {__version__}")
        raise typer.Exit()


# Global options
@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None, "--version", "-v", help="Show version and exit",
        callback=_version_callback, is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Verbose output"
    ),
) -> None:
    """
    hybsearch CLI - Submit a GenBank or FASTA file to a hybsearch server.

    Progress of every pipeline stage is shown as it happens; with --out-dir
    the result of each stage is also saved locally.
    """
    # Other modules read debug mode from the environment
    if verbose:
        os.environ["HYBSEARCH_DEBUG"] = "1"


def _resolve_server(
    config_manager: ConfigManager,
    server: Optional[str],
    thing3: bool,
    thing3_dev: bool,
    localhost: bool,
) -> str:
    return config_manager.resolve_server(server, thing3=thing3, thing3_dev=thing3_dev, localhost=localhost)


@app.command("run")
def run(
    file: Path = typer.Argument(..., help="An input file, either in GenBank or FASTA format"),
    server: Optional[str] = typer.Option(None, "--server", help="A hybsearch server address (host:port)"),
    thing3: bool = typer.Option(False, "--thing3", help="Sets --server to thing3.cs.stolaf.edu:80"),
    thing3_dev: bool = typer.Option(False, "--thing3-dev", help="Sets --server to thing3.cs.stolaf.edu:81"),
    localhost: bool = typer.Option(False, "--localhost", help="Sets --server to localhost:8080"),
    pipeline: Optional[str] = typer.Option(None, "--pipeline", help='Picks a pipeline from the server (defaults to "mbnb")'),
    out_dir: Optional[Path] = typer.Option(
        None, "--out-dir", help="Where to save the results of each step. If omitted, results are not saved"
    ),
) -> None:
    """Run a pipeline on FILE and follow its progress."""
    try:
        config_manager = ConfigManager()
        server = _resolve_server(config_manager, server, thing3, thing3_dev, localhost)
        pipeline = pipeline or config_manager.get_default_pipeline()

        console.print(f"connecting to {escape(server)} to run {escape(pipeline)}")

        session = Session(server=server, pipeline=pipeline, input_file=file, out_dir=out_dir)
        client = SessionClient(config_manager=config_manager)
        asyncio.run(client.run(session))

        if session.server_error is None and session.dest_dir is not None and session.completed_stages:
            console.print(f"✅ Results saved to {escape(str(session.dest_dir))}", style="green")
    except HybsearchError as e:
        err_console.print(f"❌ Error: {sanitize_error_message(str(e))}", style="red")
        raise typer.Exit(1)


@app.command("pipelines")
def pipelines(
    server: Optional[str] = typer.Option(None, "--server", help="A hybsearch server address (host:port)"),
    thing3: bool = typer.Option(False, "--thing3", help="Sets --server to thing3.cs.stolaf.edu:80"),
    thing3_dev: bool = typer.Option(False, "--thing3-dev", help="Sets --server to thing3.cs.stolaf.edu:81"),
    localhost: bool = typer.Option(False, "--localhost", help="Sets --server to localhost:8080"),
) -> None:
    """List the pipelines a server can run."""
    try:
        config_manager = ConfigManager()
        server = _resolve_server(config_manager, server, thing3, thing3_dev, localhost)
        api = ServerApi(server, timeout=config_manager.get_http_timeout(), debug=config_manager.is_debug())

        uptime = api.get_uptime()
        names = api.list_pipelines()

        table = Table(title=f"Pipelines on {escape(server)}")
        table.add_column("Pipeline", style="cyan")
        table.add_column("Default", justify="center")

        default = config_manager.get_default_pipeline()
        for name in names:
            table.add_row(escape(name), "✓" if name == default else "")

        console.print(table)
        console.print(f"server uptime: {format_duration(uptime)}")
    except HybsearchError as e:
        err_console.print(f"❌ Error: {sanitize_error_message(str(e))}", style="red")
        raise typer.Exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        err_console.print("\n⚠️  Operation cancelled by user", style="yellow")
        sys.exit(130)
    except Exception as e:
        # Sanitize error message to prevent Rich markup errors
        error_msg = sanitize_error_message(str(e))
        err_console.print(f"\n❌ Unexpected error: {error_msg}", style="red")
        sys.exit(1)


if __name__ == "__main__":
    main()
