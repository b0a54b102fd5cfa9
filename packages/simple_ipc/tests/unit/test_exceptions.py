"""Unit tests for the exception hierarchy."""

from __future__ import annotations

import pytest
from simple_ipc.domain.exceptions import (
    ApplicationError,
    ConflictError,
    DeliveryError,
    DomainError,
    DuplicateHandlerError,
    EnvelopeDecodeError,
    EnvelopeEncodeError,
    HandlerError,
    InfrastructureError,
    InterfaceClosedError,
    ListenerStartupError,
    MessageTypeError,
    PartnerUnavailableError,
    PayloadDecodeError,
    PortConfigurationError,
    SendTimeoutError,
    SimpleIPCError,
    TransportError,
    ValidationError,
)


class TestSimpleIPCError:
    """Tests for the base exception."""

    def test_basic_exception(self) -> None:
        """Test creating a basic exception."""
        error = SimpleIPCError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.error_code == "SimpleIPCError"
        assert error.details == {}

    def test_exception_with_code_and_details(self) -> None:
        """Test custom code and details are kept."""
        error = SimpleIPCError("Failed", error_code="CUSTOM", details={"k": "v"})

        assert error.error_code == "CUSTOM"
        assert error.details == {"k": "v"}


class TestHierarchy:
    """Tests for layer membership and error codes."""

    @pytest.mark.parametrize(
        "error,layer,code",
        [
            (PortConfigurationError(0, "range"), ValidationError, "PORT_CONFIGURATION_ERROR"),
            (MessageTypeError("Foo", "no tag"), DomainError, "MESSAGE_TYPE_ERROR"),
            (DuplicateHandlerError("t", "h"), ConflictError, "DUPLICATE_HANDLER"),
            (InterfaceClosedError("send message", 1), ApplicationError, "INTERFACE_CLOSED"),
            (HandlerError("t", "boom"), ApplicationError, "HANDLER_ERROR"),
            (TransportError("http://x/", "reset"), InfrastructureError, "TRANSPORT_ERROR"),
            (PartnerUnavailableError("http://x/", "down"), TransportError, "PARTNER_UNAVAILABLE"),
            (SendTimeoutError("http://x/", 2.0), TransportError, "SEND_TIMEOUT"),
            (DeliveryError("http://x/", 500, "body"), TransportError, "DELIVERY_ERROR"),
            (EnvelopeEncodeError("t", "overflow"), InfrastructureError, "ENVELOPE_ENCODE_ERROR"),
            (EnvelopeDecodeError("empty"), InfrastructureError, "ENVELOPE_DECODE_ERROR"),
            (PayloadDecodeError("t", "bad"), InfrastructureError, "PAYLOAD_DECODE_ERROR"),
            (ListenerStartupError("h", 1, "busy"), InfrastructureError, "LISTENER_STARTUP_ERROR"),
        ],
    )
    def test_layer_and_code(
        self, error: SimpleIPCError, layer: type[SimpleIPCError], code: str
    ) -> None:
        """Test each error sits in its layer and carries its code."""
        assert isinstance(error, layer)
        assert error.error_code == code

    def test_transport_error_details(self) -> None:
        """Test transport errors keep the endpoint and extra details."""
        error = SendTimeoutError("http://127.0.0.1:5001/", 1.5)

        assert error.details == {
            "endpoint": "http://127.0.0.1:5001/",
            "reason": "timed out after 1.5 seconds",
            "timeout_seconds": 1.5,
        }
        assert "http://127.0.0.1:5001/" in str(error)

    def test_delivery_error_status(self) -> None:
        """Test delivery errors expose the status code."""
        error = DeliveryError("http://127.0.0.1:5001/", 503, "unavailable")

        assert error.status_code == 503
        assert error.details["body"] == "unavailable"

    def test_port_error_details(self) -> None:
        """Test port errors name the offending field."""
        error = PortConfigurationError(70000, "too large", field="partner_port")

        assert error.details == {"port": 70000, "reason": "too large", "field": "partner_port"}
        assert str(error) == "Invalid partner_port 70000: too large"
