"""Credential resolution for Google Secret Manager."""
import logging
from pathlib import Path
from typing import Optional, Union

import google.auth
import google.auth.credentials
import google.auth.exceptions
import google.auth.transport.requests

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class Token:
    """Short-lived bearer credential that renders itself as a header value."""

    def __init__(self, credentials: google.auth.credentials.Credentials):
        self._credentials = credentials

    @property
    def credentials(self) -> google.auth.credentials.Credentials:
        return self._credentials

    def header_value(self) -> str:
        """
        Render the credential as an ``authorization`` header value.

        Refreshes the underlying credentials first when they are missing a
        token or the token has expired.

        Returns:
            Header value of the form ``Bearer <access token>``

        Raises:
            google.auth.exceptions.GoogleAuthError: If the token cannot be refreshed
        """
        if not self._credentials.valid:
            logger.debug("Refreshing access token")
            self._credentials.refresh(google.auth.transport.requests.Request())
        return f"Bearer {self._credentials.token}"


def load_token(credentials_file: Optional[Union[str, Path]] = None) -> Token:
    """
    Resolve a token from an explicit credentials file or default discovery.

    Args:
        credentials_file: Path to a service account or authorized user JSON
            file. When None, application default credentials are used
            (GOOGLE_APPLICATION_CREDENTIALS, gcloud ADC, metadata server).

    Returns:
        Token wrapping the resolved credentials (not yet refreshed)

    Raises:
        ConfigurationError: If the credentials source is missing or malformed
    """
    try:
        if credentials_file is not None:
            logger.debug(f"Loading credentials from file: {credentials_file}")
            credentials, _ = google.auth.load_credentials_from_file(
                str(credentials_file), scopes=[CLOUD_PLATFORM_SCOPE]
            )
        else:
            logger.debug("Loading application default credentials")
            credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except (google.auth.exceptions.GoogleAuthError, OSError, ValueError) as e:
        source = credentials_file or "application default credentials"
        raise ConfigurationError(f"Google credentials are invalid ({source}): {e}") from e

    return Token(credentials)
