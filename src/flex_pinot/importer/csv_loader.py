"""CSV loading for the resource import.

The first line of the file is the header row; every header and every cell is
trimmed. Header validation is left to the validator.
"""

import csv
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from flex_pinot.client.exceptions import InputError
from flex_pinot.utils.logging import get_logger

logger = get_logger(__name__)

Row = dict[str, str]


@dataclass
class CsvTable:
    """Parsed CSV: trimmed header names plus the raw data lines."""

    headers: list[str]
    lines: list[list[str]] = field(default_factory=list)

    def build_row(self, values: list[str]) -> Row:
        """Map one data line onto the headers.

        Missing trailing cells become empty strings; cells beyond the last
        header are ignored.
        """
        return {
            header: values[i].strip() if i < len(values) else ""
            for i, header in enumerate(self.headers)
        }

    def iter_rows(self) -> Iterator[tuple[int, Row]]:
        """Yield ``(line_number, row)`` pairs; data starts on file line 2."""
        for index, values in enumerate(self.lines):
            yield index + 2, self.build_row(values)

    def __len__(self) -> int:
        return len(self.lines)


def load_csv(csv_path: str | Path) -> CsvTable:
    """Read a CSV file into a CsvTable.

    Args:
        csv_path: Path to the CSV file

    Returns:
        CsvTable with trimmed headers

    Raises:
        InputError: If the file is missing, unreadable, not valid CSV or empty
    """
    csv_path = Path(csv_path)

    if not csv_path.is_file():
        raise InputError(f"CSV file not found: {csv_path}")

    try:
        # utf-8-sig drops the BOM spreadsheet exports like to prepend
        with open(csv_path, newline="", encoding="utf-8-sig") as f:
            records = list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise InputError(f"Error reading CSV file {csv_path}: {e}") from e

    if not records:
        raise InputError(f"CSV file is empty: {csv_path}")

    table = CsvTable(headers=[h.strip() for h in records[0]], lines=records[1:])
    logger.debug("csv_loaded", path=str(csv_path), headers=table.headers, rows=len(table))
    return table
