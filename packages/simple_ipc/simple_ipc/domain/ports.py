"""Port pair derivation for interface pairs.

Two interfaces interoperate when each one's listening port is the other's
partner port. These helpers keep the derivation free of any socket work so
it can be checked on its own.
"""

from __future__ import annotations

from dataclasses import dataclass

from simple_ipc.domain.exceptions import PortConfigurationError

MIN_PORT = 1
MAX_PORT = 65535
EPHEMERAL_PORT = 0


@dataclass(frozen=True)
class PortPair:
    """Resolved endpoint identity of one interface.

    Attributes:
        port: Port the interface listens on
        partner_port: Port the interface posts messages to
    """

    port: int
    partner_port: int

    def swapped(self) -> PortPair:
        """Return the pair the partner interface must be created with."""
        return PortPair(port=self.partner_port, partner_port=self.port)

    def pairs_with(self, other: PortPair) -> bool:
        """Check whether two pairs address each other."""
        return self.port == other.partner_port and self.partner_port == other.port


def _check_port(value: int, field: str) -> None:
    if not MIN_PORT <= value <= MAX_PORT:
        raise PortConfigurationError(
            value, f"must be between {MIN_PORT} and {MAX_PORT}", field=field
        )


def requested_listen_port(listen_port: int | None, default_port: int) -> int:
    """Pick the port to bind before any socket is opened.

    Args:
        listen_port: Port supplied by the caller, ``0`` for OS-assigned
        default_port: Configured fallback when the caller supplied nothing

    Returns:
        Port to hand to ``bind``; ``0`` means the OS chooses
    """
    port = default_port if listen_port is None else listen_port
    if port != EPHEMERAL_PORT:
        _check_port(port, "port")
    return port


def resolve_ports(
    listen_port: int,
    partner_port: int | None = None,
    *,
    partner_offset: int = 1,
) -> PortPair:
    """Resolve the full port pair from a concrete listening port.

    When no partner port is supplied it is derived as
    ``listen_port + partner_offset``, so two zero-argument interfaces
    created on each side still agree once one side swaps the pair.

    Args:
        listen_port: Bound listening port
        partner_port: Explicit partner port, if any
        partner_offset: Distance of the derived partner port

    Returns:
        Resolved PortPair

    Raises:
        PortConfigurationError: If a port is out of range or both ports are equal
    """
    _check_port(listen_port, "port")

    if partner_port is None:
        partner_port = listen_port + partner_offset
    _check_port(partner_port, "partner_port")

    if partner_port == listen_port:
        raise PortConfigurationError(
            partner_port, "must differ from the listening port", field="partner_port"
        )

    return PortPair(port=listen_port, partner_port=partner_port)
