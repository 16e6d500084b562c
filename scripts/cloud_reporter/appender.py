"""Batched row appends with aggregated per-row error reporting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .logger import logger
from .rows import validate_row

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .bigquery_api import BigQueryDirect
    from .models import MeasurementRow, TableConfig


class PartialInsertError(Exception):
    """BigQuery accepted the batch but rejected some of its rows."""

    def __init__(self, message: str, insert_errors: list[dict[str, Any]]) -> None:
        """Initialise PartialInsertError.

        Args:
            message: Every rejected row's error messages, newline-joined.
            insert_errors: The raw ``insertErrors`` entries from the response.
        """
        super().__init__(message)
        self.insert_errors = insert_errors


def insert_request(rows: Sequence[MeasurementRow]) -> dict[str, Any]:
    """Wrap rows in a tabledata.insertAll request body, keeping their order."""
    return {
        "kind": "bigquery#tableDataInsertAllRequest",
        "rows": [{"json": row} for row in rows],
    }


def format_insert_errors(insert_errors: list[dict[str, Any]]) -> str:
    """Join the messages of every rejected row into one message.

    Returns:
        One line per error message, grouped by row in response order.
    """
    return "\n".join(
        "\n".join(error.get("message", "") for error in row_error.get("errors", []))
        for row_error in insert_errors
    )


def append_rows(
    client: BigQueryDirect, table_config: TableConfig, rows: Sequence[MeasurementRow]
) -> None:
    """Append rows to the destination table in a single request.

    The batch is not split and not retried, keep it within the BigQuery
    request limits.

    Raises:
        ValueError: If ``rows`` is empty or a row does not fit the schema.
        BigQueryAPIError: If the request itself is rejected.
        PartialInsertError: If any row was rejected.
    """
    if not rows:
        msg = "append_rows needs at least one row"
        raise ValueError(msg)
    for row in rows:
        validate_row(row, table_config.schema)

    identity = table_config.identity
    result = client.insert_all(identity, insert_request(rows))

    insert_errors = result.get("insertErrors") or []
    if insert_errors:
        logger.error(
            "❌ %d of %d rows rejected by %s", len(insert_errors), len(rows), identity
        )
        raise PartialInsertError(format_insert_errors(insert_errors), insert_errors)

    logger.info("📤 Appended %d rows to %s", len(rows), identity)
