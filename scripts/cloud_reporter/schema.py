"""Table schema derivation from a benchmark configuration.

Every table starts with the same header columns describing the sample,
followed by one FLOAT column per benchmark parameter and one per metric.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import ColumnSpec, ColumnType, TableConfig, TableIdentity

if TYPE_CHECKING:
    from .models import BenchmarkConfig, TableSchema

PARAM_PREFIX = "p_"
METRIC_PREFIX = "m_"

HEADER_FIELDS: tuple[ColumnSpec, ...] = (
    ColumnSpec("runId", ColumnType.STRING, "uuid for the benchmark run"),
    ColumnSpec("index", ColumnType.INTEGER, "index within the sample"),
    ColumnSpec("creationTime", ColumnType.TIMESTAMP),
    ColumnSpec("browser", ColumnType.STRING, "navigator.platform"),
    ColumnSpec("forceGc", ColumnType.BOOLEAN, "whether gc was forced at end of action"),
)

HEADER_NAMES = frozenset(column.name for column in HEADER_FIELDS)


def param_column(name: str) -> str:
    return f"{PARAM_PREFIX}{name}"


def metric_column(name: str) -> str:
    return f"{METRIC_PREFIX}{name}"


def build_schema(config: BenchmarkConfig) -> TableSchema:
    """Derive the destination table schema for a benchmark.

    Args:
        config: Benchmark configuration declaring params and metrics.

    Returns:
        Header columns, then parameter columns, then metric columns, each
        group in declaration order.
    """
    params = [ColumnSpec(param_column(param.name), ColumnType.FLOAT) for param in config.params]
    metrics = [ColumnSpec(metric_column(name), ColumnType.FLOAT) for name in config.metrics]
    return (*HEADER_FIELDS, *params, *metrics)


def create_table_config(config: BenchmarkConfig, table_id: str) -> TableConfig:
    """Pair the derived schema with the destination named by the configuration."""
    identity = TableIdentity(
        project_id=config.cloud_reporter.project_id,
        dataset_id=config.cloud_reporter.dataset_id,
        table_id=table_id,
    )
    return TableConfig(identity=identity, schema=build_schema(config))
