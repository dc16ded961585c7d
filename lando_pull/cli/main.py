"""
Main CLI entry point for lando-pull.

This module provides the command-line interface using Click with Rich
formatting for the prompts and the run summary.
"""

import asyncio
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text
from rich import box

from lando_pull import __version__
from lando_pull.cli.config_loader import (
    apply_overrides,
    find_config_file,
    load_config,
    write_default_config,
)
from lando_pull.constants import DEFAULT_CONFIG_FILENAME
from lando_pull.core.exceptions import LandoPullError
from lando_pull.models.config import PullConfig, PullOptions
from lando_pull.models.result import PullResult, PullStatus
from lando_pull.orchestrator.orchestrator import PullOrchestrator
from lando_pull.utils.helpers import format_duration
from lando_pull.utils.logging import setup_logging

console = Console()

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_PARTIAL = 2

_STATUS_STYLES = {
    PullStatus.COMPLETE: ("green", "Pull completed successfully"),
    PullStatus.PARTIAL: ("yellow", "Pull completed with some errors"),
    PullStatus.FAILED: ("red", "Pull failed completely"),
}


def _resolve_config(config_path: Optional[str]) -> PullConfig:
    path = find_config_file(config_path)
    if path is None:
        console.print("[red]Config file not found[/red]")
        console.print(
            f"[dim]Create a {DEFAULT_CONFIG_FILENAME} or specify a config file with --config <path>[/dim]"
        )
        if Confirm.ask(f"[cyan]Generate a default {DEFAULT_CONFIG_FILENAME}?[/cyan]", default=False):
            written = write_default_config()
            console.print(f"[green]Default config file created at {written}[/green]")
            console.print("[dim]Update the default configuration and run the command again.[/dim]")
        sys.exit(EXIT_FAILURE)

    return load_config(path)


def print_summary(result: PullResult, options: PullOptions) -> None:
    """Print the run summary panel."""
    style, headline = _STATUS_STYLES[result.status]

    table = Table(box=box.MINIMAL, show_header=False)
    table.add_column("Stage", style="cyan", width=12)
    table.add_column("Result")
    table.add_row("Database", _channel_label(result.db_success, options.skip_db))
    table.add_row("Files", _channel_label(result.files_success, options.skip_files))
    table.add_row("Duration", format_duration(result.duration))

    console.print(table)
    console.print(Panel.fit(Text(headline, style=f"bold {style}"), title="Summary", border_style=style))


def _channel_label(success: bool, skipped: bool) -> str:
    if skipped:
        return "[dim]skipped[/dim]"
    return "[green]ok[/green]" if success else "[red]failed[/red]"


def _exit_code(result: PullResult) -> int:
    if result.status == PullStatus.COMPLETE:
        return EXIT_SUCCESS
    if result.status == PullStatus.PARTIAL:
        return EXIT_PARTIAL
    return EXIT_FAILURE


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(__version__, prog_name="lando-pull")
@click.option('--config', '-c', 'config_path', type=click.Path(), help='Path to the configuration file (default: .landorc)')
@click.option('--skip-db', is_flag=True, help='Skip database')
@click.option('--skip-files', is_flag=True, help='Skip files')
@click.option('--auth-method', type=click.Choice(['key', 'password']), help='Authentication method')
@click.option('--key-path', help='Path to SSH private key (for key-based auth)')
@click.option('--password', help='Remote server password (prefer the LANDO_REMOTE_PASSWORD env var)')
@click.option('--debug', is_flag=True, help='Keep local scratch files for inspection')
@click.option('--retries', type=click.IntRange(1, 20), default=3, show_default=True, help='Pipe import attempts')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=300.0, show_default=True,
              help='Seconds allowed per import attempt')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Only log errors')
@click.option('--log-file', type=click.Path(), help='Also write logs to this file')
@click.option('--log-json', is_flag=True, help='Emit structured JSON logs')
def main(
    config_path: Optional[str],
    skip_db: bool,
    skip_files: bool,
    auth_method: Optional[str],
    key_path: Optional[str],
    password: Optional[str],
    debug: bool,
    retries: int,
    timeout: float,
    verbose: bool,
    quiet: bool,
    log_file: Optional[str],
    log_json: bool
):
    """
    Sync a remote database and files into your local Lando environment.
    """
    level = "DEBUG" if verbose else "ERROR" if quiet else "INFO"
    setup_logging(level=level, log_file=log_file, structured_logging=log_json)

    if skip_db and skip_files:
        console.print("[red]Skipping both database and files. Nothing to do![/red]")
        sys.exit(EXIT_FAILURE)

    try:
        config = _resolve_config(config_path)
        config = apply_overrides(config, auth_method=auth_method, key_path=key_path, password=password)

        options = PullOptions(
            skip_db=skip_db,
            skip_files=skip_files,
            debug=debug,
            import_retries=retries,
            import_timeout=timeout
        )

        if not quiet:
            console.print(Panel.fit(
                f"[bold blue]Running Lando Pull[/bold blue]\n"
                f"Remote: [bold]{config.remote.user}@{config.remote.host}[/bold]",
                border_style="blue"
            ))

        result = asyncio.run(PullOrchestrator(config).pull(options))

    except LandoPullError as e:
        console.print(f"[red]Pull failed: {e.message}[/red]")
        output = e.details.get('output')
        if output:
            console.print(f"[dim]{output}[/dim]")
        sys.exit(EXIT_FAILURE)
    except KeyboardInterrupt:
        console.print("[yellow]Pull cancelled by user[/yellow]")
        sys.exit(EXIT_FAILURE)

    print_summary(result, options)
    sys.exit(_exit_code(result))


if __name__ == "__main__":
    main()
