#!/usr/bin/env python3
"""Benchmark Results Cloud Reporter.

Uploads the samples of a finished benchmark run to a BigQuery table. The table
schema is derived from the benchmark's parameters and metrics; the table is
created on first use and every sample becomes one row.

Reporter settings are read from a .env file:
- CLOUD_PROJECT_ID: Google Cloud project holding the dataset
- CLOUD_DATASET_ID: BigQuery dataset holding the table
- CLOUD_SECRET_PATH: Path to the service account JSON key

The results file has the form:
    {
        "params": [{"name": "param1", "value": 10}],
        "metrics": ["metric1"],
        "samples": [{"forceGc": false, "values": {"metric1": 1.5}}]
    }
"""

from __future__ import annotations

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from cloud_reporter.logger import logger, set_log_level
from cloud_reporter.models import (
    TABLE_ID,
    BenchmarkConfig,
    BenchmarkParam,
    MeasurementRow,
    parse_params,
)
from cloud_reporter.reporter import run
from cloud_reporter.rows import make_row, new_run_id


def parse_arguments() -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Report benchmark results to BigQuery",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Configuration:
  Default table: {TABLE_ID} (override with CLOUD_TABLE_ID or --table)
        """,
    )
    parser.add_argument("results", type=Path, help="JSON file with the benchmark results")
    parser.add_argument("--table", default=TABLE_ID, help="destination table id")
    parser.add_argument("--env-file", default=".env", help="file holding the reporter settings")
    parser.add_argument(
        "--browser", default=platform.platform(), help="platform the benchmark ran on"
    )
    parser.add_argument("--verbose", action="store_true", help="log API requests")
    return parser.parse_args()


def load_results(path: Path) -> dict[str, Any]:
    """Load and sanity check a benchmark results file.

    Returns:
        The decoded results.

    Raises:
        ValueError: If the file has no samples.
    """
    results: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    if not results.get("samples"):
        msg = f"No samples found in {path}"
        raise ValueError(msg)
    return results


def build_rows(
    results: dict[str, Any], params: list[BenchmarkParam], browser: str
) -> list[MeasurementRow]:
    """Turn every sample of the results into a row of the same run.

    Returns:
        One row per sample, indexed by position.
    """
    run_id = new_run_id()
    logger.info("🆔 Run id: %s", run_id)
    return [
        make_row(
            run_id,
            index,
            params,
            sample.get("values", {}),
            browser=browser,
            force_gc=bool(sample.get("forceGc", False)),
        )
        for index, sample in enumerate(results["samples"])
    ]


def main() -> None:
    """Main entry point for reporting.

    Loads configuration and results, then runs the reporting pipeline with
    all samples as a single batch.
    """
    args = parse_arguments()
    if args.verbose:
        set_log_level(logging.DEBUG)

    try:
        results = load_results(args.results)
        params = parse_params(results.get("params", []))
        config = BenchmarkConfig.from_dotenv(args.env_file).with_benchmark(
            params, results.get("metrics", [])
        )
        rows = build_rows(results, params, args.browser)

        logger.info(
            "📊 %d params, %d metrics, %d samples", len(params), len(config.metrics), len(rows)
        )
        run(config, args.table, [rows])
    except KeyboardInterrupt:
        logger.info("⏹️ Reporting interrupted by user")
        sys.exit(130)
    except Exception:
        logger.exception("💥 Reporting failed")
        sys.exit(1)

    logger.info("✓ Results reported to %s.%s", config.cloud_reporter.dataset_id, args.table)


if __name__ == "__main__":
    main()
