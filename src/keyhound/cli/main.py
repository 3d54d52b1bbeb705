"""Command-line interface for keyhound.

This module provides the Typer-based CLI for scanning a local git
repository for live AWS access key pairs.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from keyhound import __version__
from keyhound.config import KeyhoundConfig, load_config
from keyhound.core.exceptions import (
    ConfigError,
    KeyhoundError,
    OutputError,
    ScanError,
)
from keyhound.core.logging import setup_logging
from keyhound.core.models import ScanResult
from keyhound.core.scanner import RepositoryScanner
from keyhound.outputs import get_formatter
from keyhound.validators.iam import IamValidator

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_NO_FINDINGS = 2

# Initialize Typer app and Rich consoles
app = typer.Typer(
    name="keyhound",
    help="keyhound - Find live AWS access keys anywhere in a git repository's history.",
    add_completion=False,
)
console = Console()
error_console = Console(stderr=True)


def _display_error(error: Exception, title: str = "Error") -> None:
    """Display an error with rich formatting.

    Args:
        error: The exception to display.
        title: The title for the error panel.
    """
    if isinstance(error, ScanError):
        message = f"[bold red]Scan Error[/bold red]\n\n{error.message}"
        if error.path:
            message += f"\n\n[dim]Path:[/dim] {error.path}"
        for key, value in error.context.items():
            if key != "path":
                message += f"\n[dim]{key}:[/dim] {value}"
        error_console.print(Panel(message, title="[red]Scan Error[/red]", border_style="red"))
    elif isinstance(error, ConfigError):
        message = f"[bold red]Configuration Error[/bold red]\n\n{error.message}"
        if error.config_key:
            message += f"\n\n[dim]Config key:[/dim] {error.config_key}"
        error_console.print(Panel(message, title="[red]Config Error[/red]", border_style="red"))
    elif isinstance(error, OutputError):
        message = f"[bold red]Output Error[/bold red]\n\n{error.message}"
        if error.output_path:
            message += f"\n\n[dim]Output path:[/dim] {error.output_path}"
        error_console.print(Panel(message, title="[red]Output Error[/red]", border_style="red"))
    elif isinstance(error, KeyhoundError):
        message = f"[bold red]Error[/bold red]\n\n{error.message}"
        error_console.print(Panel(message, title=f"[red]{title}[/red]", border_style="red"))
    else:
        error_console.print(
            Panel(
                f"[bold red]{title}[/bold red]\n\n{error}",
                title="[red]Error[/red]",
                border_style="red",
            )
        )


def _display_diagnostics(result: ScanResult) -> None:
    """Print branches that could not be fully traversed to stderr."""
    for diagnostic in result.diagnostics:
        where = f" [dim]({diagnostic.branch})[/dim]" if diagnostic.branch else ""
        error_console.print(
            f"[yellow]Warning:[/yellow] {diagnostic.stage}{where}: {diagnostic.message}",
            markup=True,
            highlight=False,
        )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]keyhound[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


def _log_level(config: KeyhoundConfig) -> int:
    if config.output.quiet:
        return logging.ERROR
    if config.output.verbose:
        return logging.DEBUG
    return getattr(logging, config.log_level.value.upper())


def _build_scanner(repo: Path, config: KeyhoundConfig) -> RepositoryScanner:
    validator = IamValidator(
        region=config.validator.region,
        endpoint_url=config.validator.endpoint_url,
        timeout=config.validator.timeout,
    )
    return RepositoryScanner(
        repo,
        validator,
        include_snapshots=config.scan.include_snapshots,
        include_history=config.scan.include_history,
        history_scope=config.scan.history_scope.value,
        branches=config.scan.branches,
        concurrency=config.validator.concurrency,
        timeout=config.validator.timeout,
    )


@app.command()
def scan(
    repo: Annotated[
        Path,
        typer.Argument(
            help="Path to the local git repository to scan",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ],
    branch: Annotated[
        Optional[list[str]],
        typer.Option(
            "--branch",
            "-b",
            help="Only scan this branch (repeatable; default all local branches)",
        ),
    ] = None,
    no_history: Annotated[
        bool,
        typer.Option("--no-history", help="Skip commit history diffs"),
    ] = False,
    no_snapshots: Annotated[
        bool,
        typer.Option("--no-snapshots", help="Skip branch tip snapshots"),
    ] = False,
    history_scope: Annotated[
        Optional[str],
        typer.Option(
            "--history-scope",
            help="List history once from HEAD ('head') or from every branch tip ('branch')",
            case_sensitive=False,
        ),
    ] = None,
    region: Annotated[
        Optional[str],
        typer.Option("--region", help="AWS region for the IAM client"),
    ] = None,
    endpoint_url: Annotated[
        Optional[str],
        typer.Option("--endpoint-url", help="Override the IAM endpoint URL"),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option(
            "--concurrency",
            "-c",
            help="Maximum number of key pairs validated at once",
        ),
    ] = None,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Timeout in seconds for each validation call"),
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option(
            "--format",
            "-f",
            help="Output format (text, json, table)",
            case_sensitive=False,
        ),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write output to file instead of stdout",
        ),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            help="Path to a configuration file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (only show errors)",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """Scan every branch of a git repository for live AWS access keys.

    Each branch tip is scanned in full, then every commit is scanned for the
    lines it added. Candidate key pairs are checked against AWS IAM and only
    pairs AWS accepts are reported.

    Exit codes:
        0: Success (findings found)
        1: Error occurred during scan
        2: No findings found
    """
    cli_args: dict[str, Any] = {
        "branches": branch or None,
        "include_history": False if no_history else None,
        "include_snapshots": False if no_snapshots else None,
        "history_scope": history_scope,
        "region": region,
        "endpoint_url": endpoint_url,
        "concurrency": concurrency,
        "timeout": timeout,
        "format": format,
        "output_path": output,
        "verbose": verbose or None,
        "quiet": quiet or None,
    }

    try:
        config = load_config(config_path=config_file, cli_args=cli_args)
    except ConfigError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None

    setup_logging(level=_log_level(config))
    quiet = config.output.quiet

    if config.output.verbose and not quiet:
        console.print(f"[dim]Scanning:[/dim] {repo}")
        console.print(f"[dim]History scope:[/dim] {config.scan.history_scope.value}")
        console.print(f"[dim]Region:[/dim] {config.validator.region}")
        console.print(f"[dim]Concurrency:[/dim] {config.validator.concurrency}")

    try:
        scanner = _build_scanner(repo, config)
        result = asyncio.run(scanner.scan())
    except KeyhoundError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None
    except KeyboardInterrupt:
        if not quiet:
            error_console.print("\n[yellow]Scan interrupted by user[/yellow]")
        raise typer.Exit(code=EXIT_ERROR) from None
    except Exception as e:
        _display_error(e, title="Error during scan")
        raise typer.Exit(code=EXIT_ERROR) from None

    _display_diagnostics(result)

    try:
        formatted_output = get_formatter(config.output.format.value).format(result)
    except Exception as e:
        _display_error(OutputError(f"Failed to format output: {e}"))
        raise typer.Exit(code=EXIT_ERROR) from None

    output_path = config.output.output_path
    if output_path:
        try:
            Path(output_path).write_text(formatted_output, encoding="utf-8")
            if not quiet:
                console.print(f"[green]Output written to:[/green] {output_path}")
        except OSError as e:
            _display_error(
                OutputError(f"Failed to write output file: {e}", output_path=str(output_path))
            )
            raise typer.Exit(code=EXIT_ERROR) from None
    elif not quiet:
        # Plain print: findings may contain text Rich would read as markup
        print(formatted_output, end="" if formatted_output.endswith("\n") else "\n")

    if len(result.findings) == 0:
        raise typer.Exit(code=EXIT_NO_FINDINGS)

    raise typer.Exit(code=EXIT_SUCCESS)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """keyhound - Find live AWS access keys anywhere in a git repository's history.

    Use 'keyhound scan <repo>' to scan a repository.
    """
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run_cli() -> None:
    """Entry point for the ``keyhound`` console script."""
    app()


if __name__ == "__main__":
    run_cli()
