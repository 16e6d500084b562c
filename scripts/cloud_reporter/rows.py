"""Construction and validation of measurement rows."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .schema import HEADER_NAMES, metric_column, param_column

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .models import BenchmarkParam, MeasurementRow, TableSchema


def new_run_id() -> str:
    """Generate an identifier for one benchmark run."""
    return str(uuid.uuid4())


def make_row(
    run_id: str,
    index: int,
    params: Iterable[BenchmarkParam],
    metrics: Mapping[str, float],
    *,
    browser: str,
    force_gc: bool = False,
    creation_time: datetime | None = None,
) -> MeasurementRow:
    """Build one measurement row for a sample of a benchmark run.

    Args:
        run_id: Identifier shared by every sample of the run.
        index: Position of the sample within the run.
        params: Parameters the benchmark ran with.
        metrics: Metric values measured for this sample. Metrics that were not
            measured are simply left out.
        browser: Platform the benchmark ran on.
        force_gc: Whether garbage collection was forced after each action.
        creation_time: When the sample was taken, now by default.

    Returns:
        The row, keyed by column name.
    """
    creation_time = creation_time or datetime.now(tz=UTC)
    row: MeasurementRow = {
        "runId": run_id,
        "index": index,
        "creationTime": creation_time.isoformat(),
        "browser": browser,
        "forceGc": force_gc,
    }
    row.update({param_column(param.name): param.value for param in params})
    row.update({metric_column(name): value for name, value in metrics.items()})
    return row


def validate_row(row: MeasurementRow, schema: TableSchema) -> None:
    """Check a row against the table schema before it is sent.

    Raises:
        ValueError: If a header column is missing or a column is unknown.
    """
    missing = sorted(HEADER_NAMES - row.keys())
    if missing:
        msg = f"Row is missing header columns: {', '.join(missing)}"
        raise ValueError(msg)

    known = {column.name for column in schema}
    unknown = sorted(set(row) - known)
    if unknown:
        msg = f"Row has columns not in the table schema: {', '.join(unknown)}"
        raise ValueError(msg)
