"""Secret Manager client that authenticates every request with a bearer token."""
import collections
import logging
from typing import Any, Callable

import google.auth.exceptions
import grpc
from google.cloud import secretmanager
from google.cloud.secretmanager_v1.services.secret_manager_service.transports import (
    SecretManagerServiceGrpcTransport,
)

from .credentials import Token
from .models import SecretReference

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "authorization"


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


class AuthHeaderError(grpc.RpcError, grpc.Call, grpc.Future):
    """Request-level failure raised when the token cannot be rendered.

    Behaves like a finished call with status UNKNOWN, so enclosing
    interceptors and google.api_core can treat it as any other RPC error.
    """

    def __init__(self, details: str):
        super().__init__(details)
        self._details = details

    def code(self) -> grpc.StatusCode:
        return grpc.StatusCode.UNKNOWN

    def details(self) -> str:
        return self._details

    def initial_metadata(self):
        return None

    def trailing_metadata(self):
        return None

    def is_active(self) -> bool:
        return False

    def time_remaining(self):
        return None

    def add_callback(self, callback) -> bool:
        return False

    def cancel(self) -> bool:
        return False

    def cancelled(self) -> bool:
        return False

    def running(self) -> bool:
        return False

    def done(self) -> bool:
        return True

    def result(self, timeout=None):
        raise self

    def exception(self, timeout=None):
        return self

    def traceback(self, timeout=None):
        return self.__traceback__

    def add_done_callback(self, fn) -> None:
        fn(self)


class AuthMetadataInterceptor(grpc.UnaryUnaryClientInterceptor):
    """Attaches the token as an ``authorization`` header to each unary call."""

    def __init__(self, token: Token):
        self._token = token

    def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.ClientCallDetails, Any], grpc.Call],
        client_call_details: grpc.ClientCallDetails,
        request: Any,
    ) -> grpc.Call:
        try:
            header = self._token.header_value()
        except (google.auth.exceptions.GoogleAuthError, ValueError) as e:
            # Fails this request only; the channel stays usable
            raise AuthHeaderError(str(e)) from e

        metadata = [
            (key, value)
            for key, value in (client_call_details.metadata or ())
            if key != AUTHORIZATION_HEADER
        ]
        metadata.append((AUTHORIZATION_HEADER, header))

        details = _ClientCallDetails(
            client_call_details.method,
            client_call_details.timeout,
            metadata,
            client_call_details.credentials,
            getattr(client_call_details, "wait_for_ready", None),
            getattr(client_call_details, "compression", None),
        )
        logger.debug(f"Authorized gRPC call to {client_call_details.method}")
        return continuation(details, request)


class AuthenticatedClient:
    """Secret Manager client bound to one channel and one token.

    Owns the channel: closing the client (or leaving its ``with`` block)
    closes the channel.
    """

    def __init__(self, channel: grpc.Channel, token: Token):
        self._channel = channel
        intercepted = grpc.intercept_channel(channel, AuthMetadataInterceptor(token))
        transport = SecretManagerServiceGrpcTransport(channel=intercepted)
        self._client = secretmanager.SecretManagerServiceClient(transport=transport)

    def access_secret_version(self, reference: SecretReference) -> secretmanager.AccessSecretVersionResponse:
        """Issue a single AccessSecretVersion call for the reference.

        The generated client's default retry policy is disabled: every
        status, UNAVAILABLE included, reaches the caller after one attempt.
        """
        return self._client.access_secret_version(
            request={"name": reference.resource_name},
            retry=None,
        )

    def close(self) -> None:
        self._channel.close()

    def __enter__(self) -> "AuthenticatedClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
