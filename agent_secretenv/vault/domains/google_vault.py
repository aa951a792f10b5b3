"""Vault backed by Google Cloud Secret Manager."""
import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from google.api_core import exceptions as api_exceptions

from .auth_client import AuthenticatedClient
from .base import Vault
from .channel import DEFAULT_CONNECT_TIMEOUT, build_channel
from .convert import decode_env_from_json
from .credentials import load_token
from .errors import EmptySecretError, RemoteCallError, UnimplementedError
from .models import EnvEntry, SecretReference

logger = logging.getLogger(__name__)


def _status_name(error: api_exceptions.GoogleAPICallError) -> Optional[str]:
    code = error.grpc_status_code
    if code is not None:
        return code.name
    return type(error).__name__


class GoogleVault(Vault):
    """Reads the latest version of secrets from one Google Cloud project.

    Each call resolves a fresh token and opens a fresh channel; nothing is
    shared between calls, so one instance may be used from several threads.
    """

    def __init__(
        self,
        project: str,
        credentials_file: Optional[Union[str, Path]] = None,
        connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.project = project
        self.credentials_file = credentials_file
        self.connect_timeout = connect_timeout

    def to_client(self) -> AuthenticatedClient:
        """
        Build an authenticated client for a single retrieval.

        Credentials are resolved before the channel is opened, so a bad
        credentials file never causes a network connection.

        Raises:
            ConfigurationError: If credentials cannot be resolved
            TransportError: If the channel cannot be established
        """
        token = load_token(self.credentials_file)
        channel = build_channel(self.connect_timeout)
        return AuthenticatedClient(channel, token)

    def download_prefixed(self, prefix: str) -> List[EnvEntry]:
        raise UnimplementedError(
            f"Downloading secrets by prefix ('{prefix}') is not implemented for Google Secret Manager"
        )

    def download_json(self, secret_name: str) -> List[EnvEntry]:
        """
        Fetch the latest version of a JSON secret and decode it.

        Args:
            secret_name: Name of the secret in Secret Manager

        Returns:
            Decoded (KEY, value) pairs

        Raises:
            ConfigurationError: If credentials cannot be resolved
            TransportError: If the channel cannot be established
            RemoteCallError: If Secret Manager rejects the call
            EmptySecretError: If the secret version has no payload
            json.JSONDecodeError: If the payload is not valid JSON
            DecodeError: If the JSON does not decode into environment entries
        """
        reference = SecretReference(self.project, secret_name)

        with self.to_client() as client:
            try:
                response = client.access_secret_version(reference)
            except api_exceptions.GoogleAPICallError as e:
                status = _status_name(e)
                raise RemoteCallError(
                    f"Cannot load secret '{secret_name}' from Secret Manager ({status}): {e.message}",
                    status=status,
                ) from e

        if "payload" not in response or not response.payload.data:
            raise EmptySecretError(f"Secret '{reference.resource_name}' is empty")

        logger.info(f"Loaded secret {reference.resource_name}")
        value = json.loads(response.payload.data)
        return decode_env_from_json(secret_name, value)
