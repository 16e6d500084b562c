"""End-to-end reporting of a benchmark run to BigQuery.

The pipeline is strictly sequential: derive the schema, authenticate, make
sure the table exists, then append each batch of rows. Any failure stops the
run and is raised to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .appender import append_rows
from .auth import authenticate
from .bigquery_api import BigQueryDirect
from .logger import logger
from .models import TABLE_ID
from .provisioner import ensure_table
from .schema import create_table_config

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    import requests

    from .models import BenchmarkConfig, MeasurementRow, TableConfig


class CloudReporter:
    """Reports the measurements of one benchmark run.

    Holds the table config and the authorised client for the run only;
    create a new reporter for every run.
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        table_id: str = TABLE_ID,
        authenticator: Callable[[dict[str, Any]], requests.Session] = authenticate,
    ) -> None:
        """Initialise the reporter and derive the destination table config."""
        self.config = config
        self.authenticator = authenticator
        self.table_config: TableConfig = create_table_config(config, table_id)
        self.client: BigQueryDirect | None = None

    def start(self) -> CloudReporter:
        """Authenticate and provision the destination table.

        Returns:
            The reporter, ready to report rows.
        """
        logger.info(
            "🚀 Reporting to %s (%d columns)",
            self.table_config.identity,
            len(self.table_config.schema),
        )
        session = self.authenticator(self.config.cloud_reporter.auth)
        client = BigQueryDirect(session)
        ensure_table(client, self.table_config)
        self.client = client
        return self

    def report(self, rows: Sequence[MeasurementRow]) -> None:
        """Append one batch of measurement rows.

        Raises:
            RuntimeError: If the reporter has not been started.
        """
        if self.client is None:
            msg = "CloudReporter.start() must be called before reporting rows"
            raise RuntimeError(msg)
        append_rows(self.client, self.table_config, rows)


def run(
    config: BenchmarkConfig,
    table_id: str = TABLE_ID,
    batches: Iterable[Sequence[MeasurementRow]] = (),
    authenticator: Callable[[dict[str, Any]], requests.Session] = authenticate,
) -> CloudReporter:
    """Run the whole reporting pipeline for a benchmark.

    Args:
        config: Benchmark configuration to derive the schema from.
        table_id: Destination table within the configured dataset.
        batches: Row batches to append, consumed lazily one after the other.
        authenticator: Exchanges the configured key for an authorised session.

    Returns:
        The started reporter, so further batches can still be reported.
    """
    reporter = CloudReporter(config, table_id, authenticator).start()
    for batch in batches:
        reporter.report(batch)
    return reporter
