"""
=============================================================================
MINIHTTPD - A Minimal Sequential HTTP Endpoint
=============================================================================

Listens on an address taken from configuration and answers every
connection with a fixed response.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttpd)
    ├── server.py            # ServerLoop: resolve → bind → accept ⇄ serve
    ├── config.py            # ConfigSource (env + .env), ServerConfig
    ├── core/
    │   ├── address.py       # parse_address, NetworkAddress, ListenAddress
    │   ├── socket_server.py # bind, Listener, ConnectionAcceptor
    │   └── connection.py    # Connection wrapper
    ├── http/
    │   ├── request.py       # read_request_lines
    │   ├── response.py      # HTTPResponse, ResponseBuilder
    │   └── status_codes.py  # HTTPStatus
    └── handlers/
        └── static.py        # StaticFileProvider (default response body)

=============================================================================
QUICK START
=============================================================================

    $ echo '<h1>Hello</h1>' > index.html
    $ IP_ADDR=127.0.0.1 PORT=8080 python -m minihttpd
    🚀 Listening on 127.0.0.1:8080

    $ curl -i http://127.0.0.1:8080/
    HTTP/1.1 200 OK
    Content-Length: 15

    <h1>Hello</h1>

Or from code:

    from minihttpd import ServerLoop, ConfigSource
    from minihttpd.handlers import StaticFileProvider

    source = ConfigSource({"IP_ADDR": "127.0.0.1", "PORT": "8080"})
    ServerLoop(source, StaticFileProvider(".")).run()

=============================================================================
"""

__version__ = "0.1.0"

from .server import ServerLoop, ServerState
from .config import ConfigSource, ConfigKey, ConfigError, MissingConfigError, ServerConfig

__all__ = [
    "ServerLoop",
    "ServerState",
    "ConfigSource",
    "ConfigKey",
    "ConfigError",
    "MissingConfigError",
    "ServerConfig",
    "__version__",
]
