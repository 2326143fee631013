"""
Main CLI entry point for Flex Pinot.

This module provides the command-line interface that creates Flex storage,
folder and inbox resources from a CSV file.
"""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from flex_pinot import __version__
from flex_pinot.cli.decorators import handle_errors
from flex_pinot.cli.utils import (
    echo_error,
    echo_info,
    echo_success,
    print_banner,
    resolve_credentials,
)
from flex_pinot.client.flex_client import FlexClient
from flex_pinot.config import ImportOptions, RunConfig, build_run_config, load_settings
from flex_pinot.importer.orchestrator import ResourceImporter
from flex_pinot.reporting.console import ImportReporter
from flex_pinot.reporting.report import write_json_report
from flex_pinot.utils.logging import configure_logging, get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

HELP_EPILOG = """\b
CSV Format Requirements:
  - Headers must include: Type, Ref
  - For storage: Protocol, Hostname, Bucket, Path, Key, Secret, Shard
  - For folder/inbox: Link to (references storage Ref)
  - For inbox: Optional WorkflowID, WorkflowOwner, InboxMetadata
  - Tags column can contain comma-separated tags

\b
Validation:
  - By default, the tool validates resources don't already exist
  - For inboxes, it validates that WorkflowID, WorkflowOwner, and
    InboxMetadata exist
  - Use --skip-validation to bypass these checks
  - Use --force to create resources even if they already exist

\b
Examples:
  flex-pinot -u https://flex.example.com -U admin resources.csv
  flex-pinot --dry-run --verbose resources.csv
  flex-pinot --force --skip-validation -u https://flex.example.com resources.csv
"""


def build_client(config: RunConfig) -> FlexClient:
    """Create the Flex API client for a run."""
    return FlexClient(
        config=config.flex,
        log_payloads=config.options.verbose,
        max_payload_size=config.max_payload_size,
    )


@click.command(context_settings=CONTEXT_SETTINGS, epilog=HELP_EPILOG)
@click.version_option(
    __version__,
    "-v",
    "--version",
    prog_name="flex-pinot",
    message="Flex Pinot CLI v%(version)s",
)
@click.option("-u", "--url", help="API base URL (e.g., https://flex.example.com)")
@click.option("-U", "--username", help="Flex username")
@click.option(
    "-P",
    "--password",
    help="Flex password (warning: using this flag exposes password in command history)",
)
@click.option("-d", "--dry-run", is_flag=True, help="Validate but don't execute API calls")
@click.option("-V", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-s",
    "--skip-validation",
    is_flag=True,
    help="Skip validation of existing resources and dependencies",
)
@click.option(
    "-f", "--force", is_flag=True, help="Force creation even if resources already exist"
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to YAML configuration file",
    envvar="FLEX_PINOT_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Console logging level (default: WARNING, DEBUG with --verbose)",
)
@click.option("--log-file", type=click.Path(path_type=Path), help="Also log to this file (JSON)")
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a JSON report of every processed row",
)
@click.argument("csv_path", required=False, type=click.Path(path_type=Path))
@click.pass_context
@handle_errors
def cli(
    ctx: click.Context,
    url: str | None,
    username: str | None,
    password: str | None,
    dry_run: bool,
    verbose: bool,
    skip_validation: bool,
    force: bool,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    report_path: Path | None,
    csv_path: Path | None,
) -> None:
    """Flex Pinot CLI - creates resources in Flex from CSV data.

    Reads CSV_PATH and creates the storage resources first, then the folders
    and inboxes that mount on them.
    """
    if csv_path is None:
        echo_error("Missing CSV file path")
        click.echo(ctx.get_help())
        raise click.exceptions.Exit(1)

    if not csv_path.is_file():
        echo_error(f"CSV file not found: {csv_path}")
        raise click.exceptions.Exit(1)

    settings = load_settings(config_path)

    effective_level = "DEBUG" if verbose else (log_level or settings.logging.level)
    effective_log_file = str(log_file) if log_file else settings.logging.file
    configure_logging(
        level=effective_level,
        log_format=settings.logging.format,
        log_file=effective_log_file,
    )

    options = ImportOptions(
        dry_run=dry_run,
        verbose=verbose,
        skip_validation=skip_validation,
        force=force,
    )
    url, username, password = resolve_credentials(url, username, password, settings)
    run_config = build_run_config(url, username, password, options, settings)

    logger.debug("CLI initialized", csv_path=str(csv_path), options=options.model_dump())

    if dry_run:
        echo_info("DRY RUN MODE: No API calls will be executed", icon="🔍")

    print_banner()
    echo_info(f"Connecting to: {run_config.flex.url}", icon="🔌")

    reporter = ImportReporter()
    with build_client(run_config) as client:
        importer = ResourceImporter(client, run_config, reporter)
        results = importer.run(csv_path)

    reporter.print_summary(results)

    if report_path:
        write_json_report(report_path, csv_path, run_config, results)
        echo_info(f"Report written to {report_path}", icon="📝")

    click.echo()
    echo_success("Operation completed successfully")


def main() -> int:
    """Main entry point for CLI."""
    try:
        rv = cli(standalone_mode=False)
    except click.ClickException as e:
        echo_error(f"Error parsing command-line arguments: {e.format_message()}")
        click.echo("Try 'flex-pinot --help' for help.")
        return 1
    except click.Abort:
        echo_error("Aborted")
        return 1
    return rv if isinstance(rv, int) else 0


if __name__ == "__main__":
    sys.exit(main())
