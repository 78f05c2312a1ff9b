"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The low-level networking pieces: where to listen, how to listen, and the
accepted connections that come out of it.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ADDRESS                                     │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • parse_address(): "10.0.0.1" / "::1" → NetworkAddress             │
    │  • ListenAddress: NetworkAddress + port, from IP_ADDR and PORT      │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ bind(listen_address)
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                        SOCKET SERVER                                 │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Listener: the bound, listening TCP socket                        │
    │  • ConnectionAcceptor: accept() with retry on transient failures    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one connection at a time
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps the client socket: line stream, sendall, graceful close   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .address import (
    AddressFamily,
    NetworkAddress,
    ListenAddress,
    parse_address,
    AddressParseError,
    InvalidAddressFormatError,
    InvalidOctetError,
    InvalidIpError,
    InvalidPortError,
)
from .connection import Connection, ConnectionState
from .socket_server import (
    bind,
    Listener,
    ConnectionAcceptor,
    ServerError,
    BindError,
    BindFailure,
    AcceptError,
    ListenerClosedError,
)

__all__ = [
    # Addresses
    "AddressFamily",
    "NetworkAddress",
    "ListenAddress",
    "parse_address",
    "AddressParseError",
    "InvalidAddressFormatError",
    "InvalidOctetError",
    "InvalidIpError",
    "InvalidPortError",

    # Connections
    "Connection",
    "ConnectionState",

    # Listening
    "bind",
    "Listener",
    "ConnectionAcceptor",
    "ServerError",
    "BindError",
    "BindFailure",
    "AcceptError",
    "ListenerClosedError",
]
