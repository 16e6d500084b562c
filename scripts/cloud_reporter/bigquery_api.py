"""Direct REST client for BigQuery table operations.

This module provides a thin client for the three BigQuery v2 calls the
reporter needs: looking up a table, creating it and streaming rows into it.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from .logger import logger
from .models import BIGQUERY_API_URL, BIGQUERY_TIMEOUT

if TYPE_CHECKING:
    import requests

    from .models import TableIdentity


class BigQueryAPIError(Exception):
    """Error response returned by the BigQuery API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialise BigQueryAPIError with the serialised response.

        Args:
            message: The full error payload, pretty-printed.
            status_code: HTTP status of the failed response.
            errors: The structured ``error.errors`` list, when present.
        """
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class TableNotFoundError(BigQueryAPIError):
    """The looked up table does not exist."""


class BigQueryDirect:
    """Direct API implementation for BigQuery tables and tabledata."""

    def __init__(
        self,
        session: requests.Session,
        base_url: str = BIGQUERY_API_URL,
        timeout: int = BIGQUERY_TIMEOUT,
    ) -> None:
        """Initialise the client around an authorised session."""
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _tables_url(self, identity: TableIdentity) -> str:
        return (
            f"{self.base_url}/projects/{identity.project_id}"
            f"/datasets/{identity.dataset_id}/tables"
        )

    def get_table(self, identity: TableIdentity) -> dict[str, Any]:
        """Look up table metadata.

        Returns:
            The BigQuery table resource.

        Raises:
            TableNotFoundError: If the table does not exist.
            BigQueryAPIError: For any other error response.
        """
        url = f"{self._tables_url(identity)}/{identity.table_id}"
        logger.debug("[API] GET %s - Looking up table", url)
        response = self.session.get(url, timeout=self.timeout)

        if response.status_code == 404:
            message, errors = self._parse_api_error(response)
            raise TableNotFoundError(message, response.status_code, errors)
        return self._check(response)

    def create_table(self, identity: TableIdentity, resource: dict[str, Any]) -> dict[str, Any]:
        """Create a table from a table resource.

        Returns:
            The created table resource.

        Raises:
            BigQueryAPIError: If the table could not be created, including
                when it already exists.
        """
        url = self._tables_url(identity)
        logger.debug("[API] POST %s - Creating table %s", url, identity)
        response = self.session.post(url, json=resource, timeout=self.timeout)
        return self._check(response)

    def insert_all(self, identity: TableIdentity, resource: dict[str, Any]) -> dict[str, Any]:
        """Stream a batch of rows into a table.

        A successful response may still report rejected rows in
        ``insertErrors``; callers decide what to do with them.

        Returns:
            The tableDataInsertAllResponse.

        Raises:
            BigQueryAPIError: If the request as a whole was rejected.
        """
        url = f"{self._tables_url(identity)}/{identity.table_id}/insertAll"
        logger.debug("[API] POST %s - Inserting %d rows", url, len(resource.get("rows", [])))
        response = self.session.post(url, json=resource, timeout=self.timeout)
        return self._check(response)

    def _check(self, response: requests.Response) -> dict[str, Any]:
        """Return the decoded body of a successful response.

        Raises:
            BigQueryAPIError: If the response is not a success.
        """
        logger.debug("📥 Response status: %d", response.status_code)
        if not response.ok:
            # Debug log the raw API response for troubleshooting
            logger.debug("Raw API error response: %s", response.text)
            message, errors = self._parse_api_error(response)
            raise BigQueryAPIError(message, response.status_code, errors)

        if not response.content:
            return {}
        data: dict[str, Any] = response.json()
        return data

    def _parse_api_error(self, response: requests.Response) -> tuple[str, list[dict[str, Any]]]:
        """Serialise an error response without dropping any of its detail.

        Returns:
            The pretty-printed error payload and its ``errors`` list.
        """
        try:
            error_data = response.json()
        except ValueError:
            # Fallback if response isn't valid JSON
            return f"HTTP {response.status_code}: {response.text}", []

        # Unwrap only the standard {"error": {...}} envelope, keep anything else whole
        if (
            isinstance(error_data, dict)
            and set(error_data) == {"error"}
            and isinstance(error_data["error"], dict)
        ):
            error_data = error_data["error"]
        errors = error_data.get("errors", []) if isinstance(error_data, dict) else []
        if not isinstance(errors, list):
            errors = []
        return json.dumps(error_data, indent=2), errors
