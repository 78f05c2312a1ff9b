"""
=============================================================================
LOW-LEVEL TCP LISTENER AND ACCEPT LOOP
=============================================================================

This module binds the listening socket and turns it into a stream of
accepted connections. It is the "ears" of the server.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with IP:PORT        ── bind()
    3. listen()    Start queueing incoming connections      ── bind()
    4. accept()    Wait for one client, get a NEW socket    ── accept_one()
    5. close()     Release the listening socket             ── close()

                    ┌───────────────────────┐
                    │       Listener        │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ ConnectionAcceptor.accept()
                                ▼
                          ┌───────────┐
                          │ Connection│   one at a time
                          └───────────┘

=============================================================================
ERROR POLICY
=============================================================================

    bind() fails            ──► BindError            (fatal, never retried)
    accept() fails once     ──► AcceptError          (logged, retried at once)
    listener closed         ──► ListenerClosedError  (fatal)

A failed accept() usually means something went wrong with ONE pending
client (it reset the connection before we got to it, we briefly ran out
of file descriptors, ...). The listener itself is still fine, so the
acceptor logs the error and tries again immediately: no backoff, no
retry cap. Availability wins over failing fast.

Once the listening socket has been closed, no accept() can ever succeed
again. That is reported as ListenerClosedError and ends the server.

=============================================================================
"""

import errno
import socket
import logging
from enum import Enum
from typing import Iterator, Optional, Tuple

from .address import ListenAddress
from .connection import Connection


logger = logging.getLogger(__name__)


# accept() errnos meaning the listening socket itself is unusable.
# Linux reports EINVAL once a listening socket has been shut down.
_LISTENER_GONE_ERRNOS = frozenset({errno.EBADF, errno.EINVAL, errno.ENOTSOCK})


class ServerError(Exception):
    """Base class for listener and accept errors."""


class BindFailure(Enum):
    """Why bind() failed."""
    ADDRESS_IN_USE = "address in use"
    PERMISSION_DENIED = "permission denied"
    INVALID_ADDRESS = "invalid address"
    OTHER = "other"


class BindError(ServerError):
    """
    The listening socket could not be created, bound or put in listen mode.

    Attributes:
        address: The ListenAddress that was being bound.
        reason: BindFailure classification.
        cause: The underlying OSError.
    """

    def __init__(self, address: ListenAddress, cause: OSError):
        self.address = address
        self.cause = cause
        self.reason = _classify_bind_error(cause)
        super().__init__(f"Failed to bind to {address}: {cause}")


class AcceptError(ServerError):
    """A single accept() attempt failed; the listener is still usable."""

    def __init__(self, cause: OSError):
        super().__init__(f"Connection failed: {cause}")
        self.cause = cause


class ListenerClosedError(ServerError):
    """The listening socket is closed; no further connections can arrive."""

    def __init__(self, cause: Optional[OSError] = None):
        super().__init__("Listener closed")
        self.cause = cause


def _classify_bind_error(error: OSError) -> BindFailure:
    if isinstance(error, socket.gaierror):
        # getaddrinfo() could not make sense of the address
        return BindFailure.INVALID_ADDRESS
    if error.errno == errno.EADDRINUSE:
        return BindFailure.ADDRESS_IN_USE
    if error.errno in (errno.EACCES, errno.EPERM):
        return BindFailure.PERMISSION_DENIED
    if error.errno in (errno.EADDRNOTAVAIL, errno.EAFNOSUPPORT, errno.EINVAL):
        return BindFailure.INVALID_ADDRESS
    return BindFailure.OTHER


class Listener:
    """
    A bound, listening TCP socket.

    Owned exclusively by whoever called bind(). Nothing else touches the
    socket, and nothing runs concurrently with it (except close(), which
    may be called from another thread to stop a blocked accept).
    """

    def __init__(self, sock: socket.socket, listen_address: ListenAddress):
        self._socket = sock
        self.listen_address = listen_address

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), as reported by the OS."""
        sockname = self._socket.getsockname()
        return (sockname[0], sockname[1])

    @property
    def is_closed(self) -> bool:
        return self._socket.fileno() == -1

    def accept_one(self) -> Connection:
        """
        Perform exactly one accept().

        BLOCKS until a client connects. There is no timeout.

        Returns:
            The accepted Connection.

        Raises:
            AcceptError: This attempt failed but the listener is fine.
            ListenerClosedError: The listener is closed.
        """
        if self.is_closed:
            raise ListenerClosedError()

        try:
            client_socket, client_address = self._socket.accept()
        except OSError as e:
            if self.is_closed or e.errno in _LISTENER_GONE_ERRNOS:
                raise ListenerClosedError(e) from e
            raise AcceptError(e) from e

        return Connection(socket=client_socket, address=client_address)

    def close(self):
        """
        Close the listening socket.

        shutdown() first: on Linux this wakes up a thread blocked in
        accept() (close() alone does not).

        Safe to call more than once.
        """
        if self.is_closed:
            return

        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Not connected / already closed
        try:
            self._socket.close()
        except OSError:
            pass
        logger.info(f"Listener on {self.listen_address} closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def bind(listen_address: ListenAddress, backlog: int = 128) -> Listener:
    """
    Create a listening socket for a ListenAddress.

    =========================================================================
    ADDRESS FAMILY
    =========================================================================

    V4 addresses get an AF_INET socket, V6 literals an AF_INET6 socket.
    The host is resolved with getaddrinfo(AI_NUMERICHOST), so a bogus V6
    literal (which parse_address lets through) fails HERE with
    BindFailure.INVALID_ADDRESS.

    =========================================================================

    Args:
        listen_address: Where to listen.
        backlog: listen() queue size.

    Returns:
        A Listener ready for accept_one().

    Raises:
        BindError: On any failure. The caller should not retry.
    """
    family = socket.AF_INET if listen_address.address.is_v4 else socket.AF_INET6

    try:
        addrinfo = socket.getaddrinfo(
            listen_address.host,
            listen_address.port,
            family,
            socket.SOCK_STREAM,
            0,
            socket.AI_NUMERICHOST | socket.AI_PASSIVE,
        )
    except OSError as e:
        logger.error(f"Failed to bind to {listen_address}: {e}")
        raise BindError(listen_address, e) from e

    family, sock_type, proto, _, sockaddr = addrinfo[0]
    sock = socket.socket(family, sock_type, proto)

    try:
        # SO_REUSEADDR: bind again right after a restart instead of
        # waiting out TIME_WAIT. It does NOT allow two live listeners on
        # one port, so "address in use" is still reported.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(sockaddr)
        sock.listen(backlog)
    except OSError as e:
        sock.close()
        logger.error(f"Failed to bind to {listen_address}: {e}")
        raise BindError(listen_address, e) from e

    logger.info(f"Listening on {listen_address}")
    return Listener(sock, listen_address)


class ConnectionAcceptor:
    """
    Produces accepted connections from a Listener, one at a time.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         accept() Flow                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   loop:                                                              │
    │       listener.accept_one()                                          │
    │           ├── Connection           ──► return it                     │
    │           ├── AcceptError          ──► log, loop again               │
    │           └── ListenerClosedError  ──► propagate                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        acceptor = ConnectionAcceptor(bind(listen_address))
        for conn in acceptor:
            with conn:
                ...   # next accept() happens only after this block
    """

    def __init__(self, listener: Listener):
        self.listener = listener

    def accept(self) -> Connection:
        """
        Block until a connection is accepted.

        Transient failures are logged and invisible to the caller.

        Raises:
            ListenerClosedError: The listener is closed.
        """
        while True:
            try:
                conn = self.listener.accept_one()
            except AcceptError as e:
                logger.warning(f"Connection failed: {e.cause}")
                continue

            logger.debug(f"[{conn.id}] Accepted connection from {conn.peer}")
            return conn

    def incoming(self) -> Iterator[Connection]:
        """
        Infinite generator of accepted connections.

        Each connection is accepted only when the previous one has been
        pulled, so at most one is in flight. The generator never ends
        normally; it stops only by raising ListenerClosedError.
        """
        while True:
            yield self.accept()

    def __iter__(self) -> Iterator[Connection]:
        return self.incoming()
