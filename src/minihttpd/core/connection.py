"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps an accepted client socket with the small API the serving
loop needs: a line-oriented read stream, a "send everything" write, and a
close that is always safe to call.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request like

    GET / HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

may arrive in one recv() or in ten. We never call recv() directly while
reading a request. Instead, socket.makefile("rb") gives us a buffered
binary stream whose readline() keeps reading until it sees "\n" (or the
peer closes), which is exactly the unit the request reader works in.

=============================================================================
OWNERSHIP
=============================================================================

A Connection is owned by exactly one handler at a time. The server loop
uses it as a context manager, so the socket is closed when handling
finishes, whether the response was sent or an error occurred:

    with conn:
        lines = read_request_lines(conn.stream)
        conn.send_response(response.to_bytes())
    # conn is closed here

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)

# Upper bound on unread request bytes discarded at close.
_DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states (for logging and debugging)."""
    NEW = "new"              # Just accepted, haven't read anything yet
    READING = "reading"      # Reading request lines
    WRITING = "writing"      # Sending response data
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents one accepted client connection.

    Attributes:
        socket: The client socket.
        address: Peer address as returned by accept().
        id: Short identifier used as a log prefix.
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    _stream: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Accepted sockets inherit nothing useful from the listener.
        # Reads and writes block with no timeout.
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def peer(self) -> str:
        """Peer address formatted for logs."""
        return f"{self.client_ip}:{self.client_port}"

    # =========================================================================
    # READING
    # =========================================================================

    @property
    def stream(self) -> BinaryIO:
        """
        Buffered binary read stream over the socket.

        Created on first access and reused, so bytes buffered by one
        readline() are not lost. Closed together with the connection.
        """
        if self._stream is None:
            self.state = ConnectionState.READING
            self._stream = self.socket.makefile("rb")
        return self._stream

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so the whole response goes out. Regular send()
        might only send part of it.

        Returns:
            True if send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            # Covers ConnectionResetError and BrokenPipeError
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. Drain: discard request bytes that already arrived but were never
           read (closing with unread data makes the kernel send RST, which
           can destroy the response before the client reads it). Only what
           is buffered right now is dropped; close() never waits on the peer.
        3. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._discard_pending()

        if self._stream is not None:
            try:
                self._stream.close()
            except OSError:
                pass
            self._stream = None

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _discard_pending(self):
        """Read and drop up to _DRAIN_LIMIT bytes that are already queued."""
        drained = 0
        try:
            self.socket.setblocking(False)
            while drained < _DRAIN_LIMIT:
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # BlockingIOError: nothing more queued

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
