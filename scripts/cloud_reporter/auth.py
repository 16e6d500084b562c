"""Service account authentication for BigQuery requests.

This module exchanges a service account key for an authorised HTTP session
which signs every request sent to the BigQuery REST API.
"""

from __future__ import annotations

from typing import Any

from google.auth.exceptions import GoogleAuthError, TransportError
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2 import service_account

from .logger import logger

BIGQUERY_SCOPE = "https://www.googleapis.com/auth/bigquery"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


class AuthenticationError(Exception):
    """Raised when the service account credentials cannot be exchanged for a token."""


def authenticate(auth_config: dict[str, Any], scopes: list[str] | None = None) -> AuthorizedSession:
    """Authorise a session with the given service account key.

    The token is fetched eagerly so that bad credentials fail here rather
    than on the first table lookup.

    Args:
        auth_config: Service account key, at least ``client_email`` and ``private_key``.
        scopes: OAuth scopes to request, BigQuery by default.

    Returns:
        A requests session that authorises each request it sends.

    Raises:
        AuthenticationError: If the key is incomplete, malformed or rejected.
        google.auth.exceptions.TransportError: If the token endpoint cannot be
            reached, raised unchanged.
    """
    missing = [key for key in ("client_email", "private_key") if not auth_config.get(key)]
    if missing:
        msg = f"Service account key is missing: {', '.join(missing)}"
        raise AuthenticationError(msg)

    info = {"token_uri": DEFAULT_TOKEN_URI, **auth_config}
    logger.debug("🔑 Authorising %s", info["client_email"])

    try:
        credentials = service_account.Credentials.from_service_account_info(
            info, scopes=scopes or [BIGQUERY_SCOPE]
        )
        credentials.refresh(Request())
    except TransportError:
        logger.error("❌ Token endpoint unreachable for %s", info["client_email"])
        raise
    except (GoogleAuthError, ValueError) as e:
        logger.error("❌ Authentication failed for %s: %s", info["client_email"], e)
        msg = f"Could not authorise {info['client_email']}: {e}"
        raise AuthenticationError(msg) from e

    logger.info("🔓 Authorised as %s", info["client_email"])
    return AuthorizedSession(credentials)
