"""Data models and configuration classes for benchmark cloud reporting.

This module contains the dataclasses shared across the reporter: column and
table descriptions sent to BigQuery, and the benchmark configuration the
schema is derived from.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

# Global defaults from environment variables
TABLE_ID = os.getenv("CLOUD_TABLE_ID", "benchmarks")
BIGQUERY_API_URL = os.getenv("BIGQUERY_API_URL", "https://bigquery.googleapis.com/bigquery/v2")
BIGQUERY_TIMEOUT = int(os.getenv("BIGQUERY_TIMEOUT", "30"))

# A row maps column names to scalar values; derived columns may be absent
MeasurementRow = dict[str, Any]


class ColumnType(StrEnum):
    """Column types understood by the BigQuery table schema."""

    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"


@dataclass(frozen=True)
class ColumnSpec:
    """A single column of a destination table."""

    name: str
    type: ColumnType
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate the name and coerce the type into a ColumnType.

        Raises:
            ValueError: If the name is empty or the type is unknown.
        """
        if not self.name:
            msg = "Column name must not be empty"
            raise ValueError(msg)
        try:
            object.__setattr__(self, "type", ColumnType(self.type))
        except ValueError as e:
            msg = f"Unsupported column type for {self.name}: {self.type}"
            raise ValueError(msg) from e

    def to_resource(self) -> dict[str, str]:
        """Serialise to the BigQuery TableFieldSchema representation."""
        resource = {"name": self.name, "type": self.type.value}
        if self.description is not None:
            resource["description"] = self.description
        return resource


TableSchema = tuple[ColumnSpec, ...]


@dataclass(frozen=True)
class TableIdentity:
    """Project, dataset and table triple identifying a destination table."""

    project_id: str
    dataset_id: str
    table_id: str

    def __post_init__(self) -> None:
        for name in ("project_id", "dataset_id", "table_id"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                msg = f"TableIdentity.{name} must be a non-empty string, got {value!r}"
                raise ValueError(msg)

    def to_resource(self) -> dict[str, str]:
        """Serialise to a BigQuery tableReference."""
        return {
            "projectId": self.project_id,
            "datasetId": self.dataset_id,
            "tableId": self.table_id,
        }

    def __str__(self) -> str:
        return f"{self.project_id}.{self.dataset_id}.{self.table_id}"


@dataclass(frozen=True)
class TableConfig:
    """Destination table together with the schema it should have."""

    identity: TableIdentity
    schema: TableSchema

    @property
    def fields(self) -> list[dict[str, str]]:
        """Schema fields in the form expected by tables.insert."""
        return [column.to_resource() for column in self.schema]


@dataclass(frozen=True)
class BenchmarkParam:
    """A named benchmark parameter and the value it was run with."""

    name: str
    value: Any = None


def parse_params(entries: list[dict[str, Any]]) -> list[BenchmarkParam]:
    """Parse ``[{"name", "value"}]`` parameter entries.

    Raises:
        ValueError: If an entry is not a mapping or has no name.
    """
    params = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("name"):
            msg = f"Parameter {position} has no name: {entry!r}"
            raise ValueError(msg)
        params.append(BenchmarkParam(name=entry["name"], value=entry.get("value")))
    return params


@dataclass(frozen=True)
class CloudReporterConfig:
    """Where to report to and which service account to report as."""

    project_id: str
    dataset_id: str
    auth: dict[str, Any] = field(repr=False)


@dataclass
class BenchmarkConfig:
    """Benchmark configuration driving schema derivation and reporting.

    The parameters and metrics are declared in the order their columns
    should appear in the destination table.
    """

    cloud_reporter: CloudReporterConfig
    params: list[BenchmarkParam] = field(default_factory=list)
    metrics: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchmarkConfig:
        """Create configuration from the JSON-style benchmark configuration.

        Expects ``{"cloudReporter": {"projectId", "datasetId", "auth"},
        "params": [{"name", "value"}], "metrics": [name]}``.

        Returns:
            BenchmarkConfig: The parsed configuration.

        Raises:
            ValueError: If the cloudReporter section is incomplete or a
                parameter has no name.
        """
        reporter = data.get("cloudReporter") or {}
        missing = [key for key in ("projectId", "datasetId", "auth") if key not in reporter]
        if missing:
            msg = f"Missing cloudReporter settings: {', '.join(missing)}"
            raise ValueError(msg)

        return cls(
            cloud_reporter=CloudReporterConfig(
                project_id=reporter["projectId"],
                dataset_id=reporter["datasetId"],
                auth=reporter["auth"],
            ),
            params=parse_params(data.get("params", [])),
            metrics=list(data.get("metrics", [])),
        )

    @classmethod
    def from_dotenv(cls, env_file: str = ".env") -> BenchmarkConfig:
        """Create configuration from .env file.

        The returned configuration has no params or metrics yet, attach them
        with :meth:`with_benchmark` once the benchmark results are known.

        Returns:
            BenchmarkConfig: An instance populated with the reporter settings
            from the .env file.
        """
        config = dotenv_values(env_file)

        def get_required(key: str) -> str:
            value = config.get(key)
            if value is None:
                msg = f"Missing required environment variable: {key}"
                raise ValueError(msg)
            return value

        secret_path = Path(get_required("CLOUD_SECRET_PATH"))
        try:
            auth = json.loads(secret_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Could not read service account key from {secret_path}: {e}"
            raise ValueError(msg) from e

        return cls(
            cloud_reporter=CloudReporterConfig(
                project_id=get_required("CLOUD_PROJECT_ID"),
                dataset_id=get_required("CLOUD_DATASET_ID"),
                auth=auth,
            )
        )

    def with_benchmark(self, params: list[BenchmarkParam], metrics: list[str]) -> BenchmarkConfig:
        """Return a copy of this configuration with the given params and metrics."""
        return replace(self, params=list(params), metrics=list(metrics))
