"""
Utility functions for the CLI.

This module provides helpers for user-facing output and for collecting the
connection settings (flags, settings file/environment, interactive prompt).
"""

import sys

import click

from flex_pinot import __version__
from flex_pinot.client.exceptions import InputError
from flex_pinot.config import ToolSettings

BANNER = r"""
 ______ _            ______ _             _
 |  ___| |           | ___ (_)           | |
 | |_  | | _____  __ | |_/ /_ _ __   ___ | |_
 |  _| | |/ _ \ \/ / |  __/| | '_ \ / _ \| __|
 | |   | |  __/>  <  | |   | | | | | (_) | |_
 \_|   |_|\___/_/\_\ \_|   |_|_| |_|\___/ \__|

       F L E X   P I N O T   🍷
  Pouring media resources with flavor
"""


def echo_success(message: str) -> None:
    """Print success message in green."""
    click.secho(f"✅ {message}", fg="green")


def echo_error(message: str) -> None:
    """Print error message in red (on stdout, like the rest of the report)."""
    click.secho(f"❌ {message}", fg="red")


def echo_info(message: str, icon: str = "ℹ️") -> None:
    """Print info message in cyan."""
    click.secho(f"{icon} {message}", fg="cyan")


def print_banner() -> None:
    click.echo(BANNER)
    click.echo(f"  🚀 Starting Flex Pinot CLI v{__version__}\n")


def is_interactive() -> bool:
    """True when a user can answer prompts on this terminal."""
    return sys.stdin.isatty()


def resolve_credentials(
    url: str | None,
    username: str | None,
    password: str | None,
    settings: ToolSettings,
) -> tuple[str, str, str]:
    """Collect URL, username and password.

    Flags win over settings (config file / environment); anything still
    missing is prompted for, which requires a terminal.

    Raises:
        InputError: If values are missing and no terminal is attached
    """
    url = url or settings.url
    username = username or settings.username
    password = password if password is not None else settings.password

    if url and username and password is not None:
        return url, username, password

    if not is_interactive():
        raise InputError(
            "This command must be run from a terminal to accept secure password input, "
            "or all credentials must be provided via command-line options."
        )

    if not url:
        url = click.prompt("🌐 Enter API base URL (e.g., https://flex.example.com)").strip()
    if not username:
        username = click.prompt("👤 Enter Flex username").strip()
    if password is None:
        password = click.prompt("🔐 Enter Flex password", hide_input=True).strip()

    return url, username, password
