"""Error taxonomy for vault operations.

Library code raises these; only the CLI turns them into messages and exit
codes. Wrapping raises always chain the underlying exception so the cause
stays available on ``__cause__``.
"""
from typing import Optional


class VaultError(Exception):
    """Base class for every vault failure."""
    pass


class ConfigurationError(VaultError):
    """Credentials or configuration are missing, unreadable or invalid."""
    pass


class TransportError(VaultError):
    """Secure channel could not be built or the TLS handshake failed."""
    pass


class RemoteCallError(VaultError):
    """The secret store answered with a non-success status."""

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status


class EmptySecretError(VaultError):
    """The secret version exists but carries no payload."""
    pass


class DecodeError(VaultError, ValueError):
    """Secret payload does not match the environment decoding contract."""
    pass


class UnimplementedError(VaultError, NotImplementedError):
    """The backend does not provide this capability."""
    pass
