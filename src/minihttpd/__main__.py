"""
=============================================================================
MINIHTTPD CLI ENTRY POINT
=============================================================================

    # Address from the environment
    IP_ADDR=127.0.0.1 PORT=8080 python -m minihttpd

    # Address from a dotfile (.env in the working directory or a parent)
    python -m minihttpd

    # Explicit dotfile, content directory and default page
    python -m minihttpd --env-file deploy/.env --root ./public --index home.html

The listening address is only ever read from IP_ADDR and PORT; there are
no --host/--port flags.

=============================================================================
EXIT BEHAVIOR
=============================================================================

    Fatal error (bad config, bind failure, listener closed)
        └── "Error: <message>" on stderr, exit status 1

    Ctrl+C
        └── exit quietly

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ConfigError, ConfigSource, ServerConfig
from .core import ServerError
from .handlers import StaticFileProvider
from .server import ServerLoop


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="minihttpd",
        description="Minimal sequential HTTP endpoint (address from IP_ADDR and PORT)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  IP_ADDR=127.0.0.1 PORT=8080 python -m minihttpd
  python -m minihttpd --env-file .env.local
  python -m minihttpd --root ./public --index home.html
        """
    )

    parser.add_argument(
        "--env-file", "-e",
        default=None,
        help="Dotfile to read IP_ADDR/PORT from (default: nearest .env)"
    )

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory to serve the default page from (default: CONTENT_ROOT or .)"
    )

    parser.add_argument(
        "--index", "-i",
        default=None,
        help="Default page, relative to --root (default: INDEX_FILE or index.html)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttpd {__version__}"
    )

    args = parser.parse_args()

    try:
        source = ConfigSource.from_environment(env_file=args.env_file)

        # CLI flags override environment/dotfile values
        config = ServerConfig.from_source(source)
        if args.root is not None:
            config.content_root = args.root
        if args.index is not None:
            config.index_file = args.index
        if args.log_level is not None:
            config.log_level = args.log_level

        provider = StaticFileProvider(config.content_root, config.index_file)
        server = ServerLoop(source, provider, config)
        server.run()
    except KeyboardInterrupt:
        pass
    except (ConfigError, ServerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
