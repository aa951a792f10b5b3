"""Shared fixtures: an in-process Secret Manager double and static tokens."""
from concurrent import futures
from typing import Dict, List, Optional, Tuple

import grpc
import pytest
from google.cloud import secretmanager

SERVICE_NAME = "google.cloud.secretmanager.v1.SecretManagerService"


class StaticToken:
    """Token double that renders a fixed bearer value."""

    def __init__(self, value: str = "ya29.test-token"):
        self.value = value
        self.renders = 0

    def header_value(self) -> str:
        self.renders += 1
        return f"Bearer {self.value}"


class FakeSecretManager:
    """Serves AccessSecretVersion from a dict of resource name -> payload bytes.

    A payload of None answers with a response that has no payload; unknown
    names answer NOT_FOUND. Statuses queued in ``failures`` for a name are
    answered first, one per request.
    """

    def __init__(self):
        self.payloads: Dict[str, Optional[bytes]] = {}
        self.failures: Dict[str, List[grpc.StatusCode]] = {}
        self.requests: List[Tuple[str, Dict[str, str]]] = []

    def access_secret_version(self, request, context):
        self.requests.append((request.name, dict(context.invocation_metadata())))
        pending = self.failures.get(request.name)
        if pending:
            status = pending.pop(0)
            context.abort(status, f"{status.name} for {request.name}")
        if request.name not in self.payloads:
            context.abort(grpc.StatusCode.NOT_FOUND, f"Secret [{request.name}] not found or has no versions.")
        data = self.payloads[request.name]
        if data is None:
            return secretmanager.AccessSecretVersionResponse(name=request.name)
        return secretmanager.AccessSecretVersionResponse(
            name=request.name,
            payload=secretmanager.SecretPayload(data=data),
        )


@pytest.fixture
def fake_secret_manager():
    """Start a plaintext gRPC server speaking the Secret Manager protocol.

    Yields (servicer, address).
    """
    servicer = FakeSecretManager()
    handler = grpc.method_handlers_generic_handler(
        SERVICE_NAME,
        {
            "AccessSecretVersion": grpc.unary_unary_rpc_method_handler(
                servicer.access_secret_version,
                request_deserializer=secretmanager.AccessSecretVersionRequest.deserialize,
                response_serializer=secretmanager.AccessSecretVersionResponse.serialize,
            )
        },
    )
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=2))
    server.add_generic_rpc_handlers((handler,))
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    try:
        yield servicer, f"127.0.0.1:{port}"
    finally:
        server.stop(None)


@pytest.fixture
def make_token():
    """Factory for StaticToken doubles."""
    return StaticToken
