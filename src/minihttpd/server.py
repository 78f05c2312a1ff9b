"""
=============================================================================
SERVER LOOP
=============================================================================

Ties everything together: resolve the listening address once, bind once,
then accept and serve connections one at a time, forever.

=============================================================================
STATE MACHINE
=============================================================================

    ┌───────────┐  ok   ┌─────────┐  ok   ┌───────────┐ conn  ┌─────────┐
    │ RESOLVING │ ────► │ BINDING │ ────► │ ACCEPTING │ ────► │ SERVING │
    └─────┬─────┘       └────┬────┘       └─────┬─────┘ ◄──── └─────────┘
          │ ConfigError      │ BindError        │ ListenerClosedError
          ▼                  ▼                  ▼       (done / any error)
    ┌──────────────────────────────────────────────────┐
    │                      FATAL                       │  exception raised
    └──────────────────────────────────────────────────┘  to the caller

There is no "finished successfully" state. The loop runs until something
fatal happens or the process is killed.

=============================================================================
ERROR ISOLATION
=============================================================================

    Before binding:  errors are fatal (bad config, port in use, ...)
    After binding:   errors belong to ONE connection

Anything that goes wrong while serving a connection (client reset, write
failure, missing default content) is logged, that connection is closed,
and the loop goes back to accepting. The next client never notices.

=============================================================================
CONCURRENCY
=============================================================================

None. One connection is accepted, fully served, and closed before the
next accept(). A client that connects and then sends nothing blocks every
other client: there are no timeouts on reads, writes or accepts.

=============================================================================
"""

import logging
import threading
from enum import Enum
from typing import Optional

from .config import ConfigError, ConfigSource, ServerConfig
from .core import (
    ListenAddress,
    Listener,
    Connection,
    ConnectionAcceptor,
    BindError,
    ListenerClosedError,
    bind,
)
from .http import ResponseBuilder, read_request_lines


logger = logging.getLogger(__name__)


class ServerState(Enum):
    """Where the server loop currently is."""
    RESOLVING = "resolving"
    BINDING = "binding"
    ACCEPTING = "accepting"
    SERVING = "serving"
    FATAL = "fatal"


class ServerLoop:
    """
    Sequential accept-and-serve loop.

    =========================================================================
    USAGE
    =========================================================================

        source = ConfigSource.from_environment()     # IP_ADDR, PORT
        provider = StaticFileProvider("./public")
        server = ServerLoop(source, provider)
        server.run()    # blocks; raises on fatal errors

    =========================================================================
    """

    def __init__(
        self,
        source: ConfigSource,
        content_provider,
        config: Optional[ServerConfig] = None,
    ):
        """
        Args:
            source: Where IP_ADDR and PORT come from.
            content_provider: Object with default_content() -> bytes.
            config: Ambient settings. Defaults if not provided.
        """
        self.source = source
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._builder = ResponseBuilder(content_provider)
        self._listener: Optional[Listener] = None
        self._state = ServerState.RESOLVING

        # Set once the listener is bound; tests and embedders wait on it
        self.ready = threading.Event()

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def listener(self) -> Optional[Listener]:
        return self._listener

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Resolve, bind, then serve forever (blocking).

        Raises:
            ConfigError: IP_ADDR / PORT missing or malformed.
            BindError: The address could not be bound.
            ListenerClosedError: The listener was closed (e.g. shutdown()).
        """
        self._setup_logging()

        listen_address = self._resolve()
        self._listener = self._bind(listen_address)
        self.ready.set()

        self._print_startup_banner(listen_address)

        try:
            self.serve_forever(ConnectionAcceptor(self._listener))
        finally:
            self._listener.close()

    def _resolve(self) -> ListenAddress:
        self._state = ServerState.RESOLVING
        try:
            return ListenAddress.from_source(self.source)
        except ConfigError as e:
            self._state = ServerState.FATAL
            logger.error(f"Failed to parse socket address: {e}")
            raise

    def _bind(self, listen_address: ListenAddress) -> Listener:
        self._state = ServerState.BINDING
        try:
            return bind(listen_address, backlog=self.config.backlog)
        except BindError:
            self._state = ServerState.FATAL
            raise

    def serve_forever(self, acceptor: ConnectionAcceptor):
        """
        Accept and serve connections until the acceptor fails fatally.

        Raises:
            ListenerClosedError: No more connections can be accepted.
        """
        while True:
            self._state = ServerState.ACCEPTING
            try:
                conn = acceptor.accept()
            except ListenerClosedError:
                self._state = ServerState.FATAL
                logger.error("Listener closed, no more connections can be accepted")
                raise

            self._state = ServerState.SERVING
            self.serve_connection(conn)

    def shutdown(self):
        """
        Close the listener.

        A run() blocked in accept() wakes up and raises ListenerClosedError.
        Safe to call from another thread.
        """
        if self._listener is not None:
            self._listener.close()

    def _print_startup_banner(self, listen_address: ListenAddress):
        """Print where we are listening."""
        print(f"🚀 Listening on {listen_address}")

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def serve_connection(self, conn: Connection):
        """
        Serve one connection: read lines, build response, send, close.

        Never raises. Errors are logged and only affect this connection;
        the connection is always closed.

        Args:
            conn: The accepted client connection.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                request_lines = read_request_lines(conn.stream)
                response = self._builder.build(request_lines)

                if conn.send_response(response.to_bytes()):
                    # Empty requests are worth seeing at the default level
                    level = logging.WARNING if response.status.is_error else logging.DEBUG
                    logger.log(level, f"[{conn.id}] {conn.peer} -> {response.status_line}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")
