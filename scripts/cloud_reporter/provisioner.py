"""Destination table provisioning.

Makes sure the reporting table exists before rows are appended: look it up
and create it only when the lookup says it is missing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .bigquery_api import BigQueryAPIError, TableNotFoundError
from .logger import logger

if TYPE_CHECKING:
    from .bigquery_api import BigQueryDirect
    from .models import TableConfig


def table_resource(table_config: TableConfig) -> dict[str, Any]:
    """Build the tables.insert resource for a table config."""
    return {
        "kind": "bigquery#table",
        "tableReference": table_config.identity.to_resource(),
        "schema": {"fields": table_config.fields},
    }


def ensure_table(client: BigQueryDirect, table_config: TableConfig) -> None:
    """Create the destination table unless it already exists.

    Performs one lookup and at most one creation. An existing table is
    accepted as is, its schema is not compared with ``table_config.schema``.
    Two runs provisioning the same table at once may both try to create it;
    the second creation fails and its error is raised to the caller, whose
    next attempt will find the table.

    Raises:
        BigQueryAPIError: If the lookup fails for any reason other than the
            table missing, or if the creation fails.
    """
    identity = table_config.identity
    try:
        client.get_table(identity)
    except TableNotFoundError:
        logger.info("🆕 Table %s not found, creating it", identity)
    else:
        logger.info("✅ Table %s already exists", identity)
        return

    try:
        client.create_table(identity, table_resource(table_config))
    except BigQueryAPIError as e:
        logger.error("❌ Failed to create table %s (HTTP %s)", identity, e.status_code)
        raise

    logger.info("✅ Created table %s with %d columns", identity, len(table_config.schema))
