"""Cloud reporting of benchmark measurements into BigQuery.

This package derives a table schema from a benchmark configuration, makes sure
the destination table exists and streams measurement rows into it.
"""

from __future__ import annotations
