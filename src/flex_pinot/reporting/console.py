"""Console output for import runs.

Everything the user is meant to read goes to stdout through a Rich console,
independent of the log level. Diagnostics go through structlog instead.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flex_pinot.client.flex_client import ResourceId
from flex_pinot.resources import ResourceTypeInfo, get_import_order


class ReportColors:
    """Rich color names used for console output."""

    INFO = "cyan"
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "red"
    PHASE = "magenta"
    HEADER = "bold bright_white"


class RowStatus(str, Enum):
    """Final state of one processed CSV row."""

    CREATED = "created"
    PARTIAL = "partial"  # created, but configure/tag/enable failed
    SKIPPED = "skipped"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class RowResult:
    """Outcome of importing one CSV row."""

    resource_type: str
    ref: str
    line: int
    status: RowStatus
    resource_id: ResourceId | None = None
    detail: str | None = None

    def to_dict(self) -> dict:
        return {
            "resource_type": self.resource_type,
            "ref": self.ref,
            "line": self.line,
            "status": self.status.value,
            "resource_id": self.resource_id,
            "detail": self.detail,
        }


PASS_LABELS = ("First", "Second", "Third", "Fourth", "Fifth")


class ImportReporter:
    """Prints import progress in the tool's emoji-prefixed style."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def _print(self, message: str, style: str | None = None) -> None:
        self.console.print(escape(message), style=style, emoji=False, soft_wrap=True)

    def info(self, message: str, icon: str = "🔍") -> None:
        self._print(f"{icon} {message}", style=ReportColors.INFO)

    def success(self, message: str, icon: str = "✅") -> None:
        self._print(f"{icon} {message}", style=ReportColors.SUCCESS)

    def warning(self, message: str) -> None:
        self._print(f"⚠️ {message}", style=ReportColors.WARNING)

    def error(self, message: str) -> None:
        self._print(f"❌ {message}", style=ReportColors.ERROR)

    def pass_started(self, index: int, info: ResourceTypeInfo) -> None:
        label = PASS_LABELS[index] if index < len(PASS_LABELS) else f"#{index + 1}"
        self._print("")
        self._print(
            f"📊 {label} pass: Creating {info.name} resources...", style=ReportColors.PHASE
        )

    def row_skipped(self, line: int, reason: str) -> None:
        self._print("")
        self.warning(f"Skipping row {line}: {reason}")

    def resource_started(self, info: ResourceTypeInfo, ref: str) -> None:
        self._print("")
        self._print(f"{info.icon} Creating {info.label}: {ref}", style=ReportColors.HEADER)

    def print_summary(self, results: list[RowResult]) -> None:
        """Print a table of row outcomes per resource type."""
        if not results:
            self._print("")
            self.info("No resources were processed", icon="ℹ️")
            return

        counts: dict[str, Counter] = {}
        for result in results:
            counts.setdefault(result.resource_type, Counter())[result.status] += 1

        table = Table(title="Import Summary")
        table.add_column("Type")
        for status in RowStatus:
            table.add_column(status.value.replace("_", " ").title(), justify="right")

        for info in get_import_order():
            if info.name not in counts:
                continue
            row_counts = counts[info.name]
            table.add_row(info.label, *[str(row_counts[status]) for status in RowStatus])

        self._print("")
        self.console.print(table)
