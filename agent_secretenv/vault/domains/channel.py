"""Secure gRPC channel to Google Secret Manager."""
import logging
from typing import Optional

import certifi
import grpc

from .errors import TransportError

logger = logging.getLogger(__name__)

SECRET_MANAGER_DOMAIN = "secretmanager.googleapis.com"
SECRET_MANAGER_ENDPOINT = f"{SECRET_MANAGER_DOMAIN}:443"
DEFAULT_CONNECT_TIMEOUT = 30.0


def _root_certificates() -> bytes:
    """Read the pinned root bundle shipped with certifi (host store is ignored)."""
    with open(certifi.where(), "rb") as f:
        return f.read()


def build_channel(connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT) -> grpc.Channel:
    """
    Open a TLS channel to Secret Manager and wait for the handshake.

    The server certificate is validated against the certifi root bundle and
    the Secret Manager domain name.

    Args:
        connect_timeout: Seconds to wait for the channel to become ready.
            None waits indefinitely.

    Returns:
        Connected grpc.Channel. The caller owns it and must close it.

    Raises:
        TransportError: If the channel cannot be configured or does not connect
    """
    try:
        tls_credentials = grpc.ssl_channel_credentials(root_certificates=_root_certificates())
        channel = grpc.secure_channel(
            SECRET_MANAGER_ENDPOINT,
            tls_credentials,
            options=[("grpc.ssl_target_name_override", SECRET_MANAGER_DOMAIN)],
        )
    except (OSError, ValueError) as e:
        raise TransportError(f"Failed to configure TLS channel to {SECRET_MANAGER_ENDPOINT}: {e}") from e

    try:
        grpc.channel_ready_future(channel).result(timeout=connect_timeout)
    except grpc.FutureTimeoutError as e:
        channel.close()
        raise TransportError(
            f"Timed out after {connect_timeout}s connecting to {SECRET_MANAGER_ENDPOINT}"
        ) from e
    except Exception as e:
        channel.close()
        raise TransportError(f"Failed to connect to {SECRET_MANAGER_ENDPOINT}: {e}") from e

    logger.debug(f"Channel to {SECRET_MANAGER_ENDPOINT} is ready")
    return channel
