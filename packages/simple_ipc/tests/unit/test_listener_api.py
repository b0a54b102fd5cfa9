"""Unit tests for the listener HTTP endpoints."""

from __future__ import annotations

from typing import Any, ClassVar

import msgpack
import pytest
from fastapi.testclient import TestClient
from simple_ipc.api import create_listener_app
from simple_ipc.application.services import Dispatcher, HandlerRegistry
from simple_ipc.domain.messages import IpcMessage
from simple_ipc.domain.ports import PortPair
from simple_ipc.infrastructure.serialization import CONTENT_TYPE, encode_message


class Note(IpcMessage):
    message_type: ClassVar[str] = "test.note"

    text: str


class Other(IpcMessage):
    message_type: ClassVar[str] = "test.other"


@pytest.fixture
def registry() -> HandlerRegistry:
    """Create an empty registry."""
    return HandlerRegistry()


@pytest.fixture
def client(registry: HandlerRegistry) -> TestClient:
    """Create a test client for a listener app on port 4000."""
    app = create_listener_app(
        Dispatcher(registry),
        PortPair(port=4000, partner_port=4001),
        lambda: registry.message_types,
    )
    return TestClient(app)


def post(client: TestClient, body: bytes, path: str = "/") -> Any:
    return client.post(path, content=body, headers={"Content-Type": CONTENT_TYPE})


class TestReceiveEnvelope:
    """Test the envelope endpoint."""

    def test_delivered_message_accepted(
        self, client: TestClient, registry: HandlerRegistry
    ) -> None:
        """Test a handled message gets 202 after the handler ran."""
        received: list[Note] = []
        registry.register(Note, received.append)

        response = post(client, encode_message(Note(text="hi")))

        assert response.status_code == 202
        assert response.content == b""
        assert received == [Note(text="hi")]

    def test_unhandled_message_accepted(
        self, client: TestClient, registry: HandlerRegistry
    ) -> None:
        """Test an unhandled message is still acknowledged."""
        received: list[Note] = []
        registry.register(Note, received.append)

        response = post(client, encode_message(Other()))

        assert response.status_code == 202
        assert received == []

    def test_malformed_envelope_rejected(self, client: TestClient) -> None:
        """Test malformed bodies get 400."""
        response = post(client, msgpack.packb(["not", "a", "map"]))

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "ENVELOPE_DECODE_ERROR"

    def test_payload_mismatch_is_server_error(
        self, client: TestClient, registry: HandlerRegistry
    ) -> None:
        """Test a bad payload for a registered type gets 500."""
        registry.register(Note, lambda message: None)

        response = post(client, msgpack.packb({"type": "test.note", "payload": {"text": 5}}))

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["error_code"] == "PAYLOAD_DECODE_ERROR"
        assert detail["details"]["message_type"] == "test.note"

    def test_handler_failure_is_server_error(
        self, client: TestClient, registry: HandlerRegistry
    ) -> None:
        """Test a raising handler gets 500."""

        def broken(message: Note) -> None:
            raise ValueError("cannot handle")

        registry.register(Note, broken)

        response = post(client, encode_message(Note(text="hi")))

        assert response.status_code == 500
        assert response.json()["detail"]["error_code"] == "HANDLER_ERROR"

    def test_custom_path(self, registry: HandlerRegistry) -> None:
        """Test the envelope path is configurable."""
        app = create_listener_app(
            Dispatcher(registry),
            PortPair(port=4000, partner_port=4001),
            lambda: registry.message_types,
            path="/ipc",
        )
        client = TestClient(app)

        assert post(client, encode_message(Other()), path="/ipc").status_code == 202
        assert post(client, encode_message(Other()), path="/").status_code in (404, 405)


class TestHealth:
    """Test the health endpoint."""

    def test_reports_ports_and_types(
        self, client: TestClient, registry: HandlerRegistry
    ) -> None:
        """Test health lists the port pair and registered types."""
        registry.register(Note, lambda message: None)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "port": 4000,
            "partner_port": 4001,
            "message_types": ["test.note"],
            "pending_handlers": 0,
        }
