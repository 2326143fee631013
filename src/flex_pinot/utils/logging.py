"""Structured logging for Flex Pinot.

structlog events are handed to stdlib logging and rendered per handler: a
Rich console handler on stderr and, optionally, a log file with one JSON
object per line. The import report itself never goes through logging.
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.typing import EventDict, Processor, WrappedLogger

from flex_pinot import __version__

REDACTED = "[REDACTED]"

# Substrings of dict keys whose values never reach a log line
SENSITIVE_KEYS = ("password", "secret", "token", "authorization", "key")


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the tool name and version."""
    event_dict.setdefault("app", "flex-pinot")
    event_dict.setdefault("version", __version__)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
    ]


def _level(name: str | None, default: int) -> int:
    return getattr(logging, (name or "").upper(), default)


def configure_logging(
    level: str = "WARNING",
    log_format: str = "json",
    log_file: str | None = None,
    file_level: str | None = None,
) -> None:
    """Route structlog through stdlib logging to the console and an optional file.

    Args:
        level: Console log level
        log_format: Log file format, ``json`` or ``console``
        log_file: Optional path of a log file
        file_level: Log file level (defaults to DEBUG)
    """
    console_level = _level(level, logging.WARNING)
    file_log_level = _level(file_level, logging.DEBUG)
    shared = _shared_processors()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
        )
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
    root_level = console_level

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        renderer: Processor = (
            structlog.processors.JSONRenderer(default=str)
            if log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_log_level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    renderer,
                ],
            )
        )
        root_logger.addHandler(file_handler)
        root_level = min(console_level, file_log_level)

    root_logger.setLevel(root_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_exchange(
    logger: structlog.stdlib.BoundLogger, response: httpx.Response, duration_ms: float
) -> None:
    """Log one finished HTTP exchange; errors are louder than successes."""
    request = response.request
    log = logger.debug if response.is_success else logger.info
    log(
        "api_request",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )


def _is_sensitive(key: Any) -> bool:
    name = str(key).lower()
    return any(part in name for part in SENSITIVE_KEYS)


def sanitize_payload(payload: Any) -> Any:
    """Return a copy of a payload with credential values redacted.

    Storage configurations carry object-store keys and secrets; any dict key
    containing one of SENSITIVE_KEYS is replaced with ``[REDACTED]`` at any
    depth.
    """
    if isinstance(payload, dict):
        return {
            key: REDACTED if _is_sensitive(key) else sanitize_payload(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [sanitize_payload(item) for item in payload]
    return payload


def truncate_payload(payload: Any, max_size: int = 10000) -> str:
    """Render a payload as indented JSON, cut to ``max_size`` characters."""
    try:
        text = json.dumps(payload, indent=2, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        text = repr(payload)

    if len(text) <= max_size:
        return text
    return f"{text[:max_size]}\n... [truncated, {len(text)} chars total]"
