"""JSON run report.

Records the options a run used and the outcome of every processed row so a
batch can be audited (or re-run with only the failed rows) afterwards.
"""

import json
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from flex_pinot import __version__
from flex_pinot.config import RunConfig
from flex_pinot.reporting.console import RowResult, RowStatus
from flex_pinot.utils.logging import get_logger

logger = get_logger(__name__)


def build_report(
    csv_path: str | Path,
    config: RunConfig,
    results: list[RowResult],
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the report document for a finished run."""
    generated_at = generated_at or datetime.now(UTC)
    totals = Counter(result.status.value for result in results)

    return {
        "report_version": "1.0",
        "tool_version": __version__,
        "generated_at": generated_at.isoformat(),
        "csv_file": str(csv_path),
        "url": config.flex.url,
        "options": config.options.model_dump(),
        "totals": {status.value: totals.get(status.value, 0) for status in RowStatus},
        "results": [result.to_dict() for result in results],
    }


def write_json_report(
    output_path: str | Path,
    csv_path: str | Path,
    config: RunConfig,
    results: list[RowResult],
) -> str:
    """Write the JSON report and return it as a string."""
    report = build_report(csv_path, config, results)
    json_str = json.dumps(report, indent=2, default=str)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json_str)
    logger.info("json_report_saved", path=str(output_path))

    return json_str
