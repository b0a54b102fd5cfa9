"""Exceptions for SimpleIPC.

This module defines the exception hierarchy for the IPC interface. Domain
exceptions describe invalid configuration or message definitions, application
exceptions describe misuse of an interface, and infrastructure exceptions wrap
failures of the HTTP transport and the envelope codec.
"""

from typing import Any


class SimpleIPCError(Exception):
    """Base exception for all SimpleIPC errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for programmatic handling
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class DomainError(SimpleIPCError):
    """Base class for domain-layer errors."""

    pass


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None, **kwargs: Any) -> None:
        """
        Initialize validation error.

        Args:
            message: Validation error message
            field: Field that failed validation
            **kwargs: Additional error details
        """
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)


class PortConfigurationError(ValidationError):
    """Raised when a listening or partner port is unusable."""

    def __init__(self, port: int, reason: str, field: str = "port") -> None:
        """
        Initialize port configuration error.

        Args:
            port: The offending port value
            reason: Why the port was rejected
            field: Which setting carried the port
        """
        super().__init__(
            f"Invalid {field} {port}: {reason}",
            field=field,
            details={"port": port, "reason": reason},
        )
        self.error_code = "PORT_CONFIGURATION_ERROR"


class MessageTypeError(DomainError):
    """Raised when a message class does not declare a usable discriminator."""

    def __init__(self, type_name: str, reason: str) -> None:
        """
        Initialize message type error.

        Args:
            type_name: Python name of the offending class
            reason: Why the class cannot be used as a message type
        """
        super().__init__(
            f"Message class '{type_name}' is not routable: {reason}",
            error_code="MESSAGE_TYPE_ERROR",
            details={"type_name": type_name, "reason": reason},
        )


class ConflictError(DomainError):
    """Raised when an operation conflicts with existing state."""

    def __init__(
        self, message: str, conflicting_resource: str | None = None, **kwargs: Any
    ) -> None:
        """
        Initialize conflict error.

        Args:
            message: Conflict description
            conflicting_resource: Identifier of conflicting resource
            **kwargs: Additional error details
        """
        details = kwargs.pop("details", {})
        if conflicting_resource:
            details["conflicting_resource"] = conflicting_resource
        super().__init__(message, error_code="CONFLICT", details=details)


class DuplicateHandlerError(ConflictError):
    """Raised when a handler is already registered for a message type."""

    def __init__(self, message_type: str, existing_handler: str) -> None:
        """
        Initialize duplicate handler error.

        Args:
            message_type: Discriminator that already has a handler
            existing_handler: Qualified name of the handler already registered
        """
        super().__init__(
            f"A handler is already registered for message type '{message_type}'",
            conflicting_resource=message_type,
            details={"message_type": message_type, "existing_handler": existing_handler},
        )
        self.error_code = "DUPLICATE_HANDLER"


class ApplicationError(SimpleIPCError):
    """Base class for application-layer errors."""

    pass


class InterfaceClosedError(ApplicationError):
    """Raised when an operation is attempted on a closed interface."""

    def __init__(self, operation: str, port: int) -> None:
        """
        Initialize interface closed error.

        Args:
            operation: Operation that was attempted
            port: Listening port of the closed interface
        """
        super().__init__(
            f"Cannot {operation}: interface on port {port} is closed",
            error_code="INTERFACE_CLOSED",
            details={"operation": operation, "port": port},
        )


class HandlerError(ApplicationError):
    """Raised when a registered handler fails while processing a message."""

    def __init__(self, message_type: str, reason: str) -> None:
        """
        Initialize handler error.

        Args:
            message_type: Discriminator of the message being handled
            reason: Error raised by the handler
        """
        super().__init__(
            f"Handler for message type '{message_type}' failed: {reason}",
            error_code="HANDLER_ERROR",
            details={"message_type": message_type, "reason": reason},
        )


class InfrastructureError(SimpleIPCError):
    """Base class for infrastructure-layer errors."""

    pass


class TransportError(InfrastructureError):
    """Raised when the HTTP hop to the partner fails."""

    def __init__(self, endpoint: str, reason: str, **kwargs: Any) -> None:
        """
        Initialize transport error.

        Args:
            endpoint: URL the message was posted to
            reason: Underlying failure description
            **kwargs: Additional error details
        """
        message = f"Failed to deliver message to {endpoint}: {reason}"
        details = {
            "endpoint": endpoint,
            "reason": reason,
            **kwargs.pop("details", {}),
        }
        error_code = kwargs.pop("error_code", "TRANSPORT_ERROR")
        super().__init__(message, error_code=error_code, details=details)


class PartnerUnavailableError(TransportError):
    """Raised when nothing is listening on the partner port."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(endpoint, reason, error_code="PARTNER_UNAVAILABLE")


class SendTimeoutError(TransportError):
    """Raised when the partner does not answer within the send timeout."""

    def __init__(self, endpoint: str, timeout_seconds: float) -> None:
        super().__init__(
            endpoint,
            f"timed out after {timeout_seconds} seconds",
            error_code="SEND_TIMEOUT",
            details={"timeout_seconds": timeout_seconds},
        )


class DeliveryError(TransportError):
    """Raised when the partner answers with a non-success status."""

    def __init__(self, endpoint: str, status_code: int, body: str) -> None:
        """
        Initialize delivery error.

        Args:
            endpoint: URL the message was posted to
            status_code: HTTP status returned by the partner
            body: Response body returned by the partner
        """
        super().__init__(
            endpoint,
            f"partner responded with HTTP {status_code}",
            error_code="DELIVERY_ERROR",
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code


class EnvelopeEncodeError(InfrastructureError):
    """Raised when an outbound message cannot be packed into an envelope."""

    def __init__(self, message_type: str, reason: str) -> None:
        super().__init__(
            f"Message of type '{message_type}' could not be encoded: {reason}",
            error_code="ENVELOPE_ENCODE_ERROR",
            details={"message_type": message_type, "reason": reason},
        )


class EnvelopeDecodeError(InfrastructureError):
    """Raised when an inbound body is not a valid envelope."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Malformed message envelope: {reason}",
            error_code="ENVELOPE_DECODE_ERROR",
            details={"reason": reason},
        )


class PayloadDecodeError(InfrastructureError):
    """Raised when a payload cannot be decoded into its registered type."""

    def __init__(self, message_type: str, reason: str) -> None:
        """
        Initialize payload decode error.

        Args:
            message_type: Discriminator carried by the envelope
            reason: Validation failure description
        """
        super().__init__(
            f"Payload for message type '{message_type}' could not be decoded: {reason}",
            error_code="PAYLOAD_DECODE_ERROR",
            details={"message_type": message_type, "reason": reason},
        )


class ListenerStartupError(InfrastructureError):
    """Raised when the HTTP listener cannot be bound or started."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        """
        Initialize listener startup error.

        Args:
            host: Interface address the listener tried to bind
            port: Port the listener tried to bind
            reason: Underlying failure description
        """
        super().__init__(
            f"Failed to start listener on {host}:{port}: {reason}",
            error_code="LISTENER_STARTUP_ERROR",
            details={"host": host, "port": port, "reason": reason},
        )
