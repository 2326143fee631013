"""
Decorators for CLI commands.

This module provides the error handling decorator that turns exceptions into
user-facing messages and exit codes.
"""

import functools
from collections.abc import Callable

import click

from flex_pinot.cli.utils import echo_error
from flex_pinot.client.exceptions import FlexPinotError
from flex_pinot.utils.logging import get_logger

logger = get_logger(__name__)


def handle_errors(f: Callable) -> Callable:
    """
    Decorator to handle errors in CLI commands.

    Any error that escapes the command is printed as ``❌ Error: ...`` and
    ends the process with exit code 1. Per-row problems never get here; the
    importer reports those itself and keeps going.
    """

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except (click.exceptions.Exit, click.Abort):
            raise

        except FlexPinotError as e:
            logger.error("Run aborted", error_type=type(e).__name__, error=str(e))
            echo_error(f"Error: {e}")
            raise click.exceptions.Exit(1) from e

        except Exception as e:
            logger.error("Unexpected error", error=str(e), exc_info=True)
            echo_error(f"Error: {e}")
            raise click.exceptions.Exit(1) from e

    return wrapper
