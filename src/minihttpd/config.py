"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Configuration management for the endpoint.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments (ambient settings only)                 │
    │      └── python -m minihttpd --root ./public                       │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── IP_ADDR=0.0.0.0 PORT=8080 python -m minihttpd             │
    │                                                                      │
    │   3. Dotfile                                                        │
    │      └── .env (found in the working directory or a parent)         │
    │                                                                      │
    │   4. Default values (in ServerConfig)                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The listening address has NO default. IP_ADDR and PORT must be present in
the environment or the dotfile, otherwise startup fails with a
MissingConfigError naming the absent key.

=============================================================================
WHY A ConfigSource?
=============================================================================

Reading os.environ directly from address-resolution code makes that code
untestable without mutating the process environment. Instead, everything
that needs configuration receives a ConfigSource: a read-only snapshot of
key/value strings.

    Production:   ConfigSource.from_environment()     # env + .env
    Tests:        ConfigSource({"IP_ADDR": "127.0.0.1", "PORT": "8080"})

The dotfile is read with python-dotenv's dotenv_values(), which parses
the file WITHOUT touching os.environ.

=============================================================================
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from dotenv import dotenv_values, find_dotenv


class ConfigKey(str, Enum):
    """Configuration keys that make up the listening address."""
    IP_ADDR = "IP_ADDR"
    PORT = "PORT"


class ConfigError(Exception):
    """
    Base class for startup configuration errors.

    Every ConfigError is fatal: the server reports it once and never
    starts serving.

    Attributes:
        component: The ConfigKey the error is about.
    """

    def __init__(self, message: str, component: ConfigKey):
        super().__init__(message)
        self.component = component


class MissingConfigError(ConfigError):
    """A required configuration value is absent."""

    def __init__(self, key: ConfigKey):
        super().__init__(f"Missing configuration value: '{key.value}'", key)
        self.key = key


class ConfigSource:
    """
    Read-only view over configuration strings.

    Values are snapshotted at construction; later changes to the mapping
    passed in (or to os.environ) are not observed.
    """

    def __init__(self, values: Optional[Mapping[str, Optional[str]]] = None):
        # dotenv_values() yields None for bare keys ("KEY" with no "=")
        self._values = {
            name: value
            for name, value in (values or {}).items()
            if value is not None
        }

    @classmethod
    def from_environment(
        cls,
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ConfigSource":
        """
        Build a source from a dotfile and the process environment.

        =====================================================================
        MERGE ORDER
        =====================================================================

        Values in the environment win over values in the dotfile. A
        variable that is already exported is never overridden by .env,
        so the dotfile only fills in what is missing.

        =====================================================================

        Args:
            env_file: Path to the dotfile. When omitted, the nearest .env
                      in the working directory or its parents is used
                      (if there is one).
            environ: Environment mapping (defaults to os.environ).

        Returns:
            ConfigSource with the merged values.

        Raises:
            ValueError: env_file was given explicitly but is not a file.
        """
        if env_file is None:
            env_file = find_dotenv(usecwd=True)
        elif not os.path.isfile(env_file):
            raise ValueError(f"Environment file not found: {env_file}")

        values: dict = {}
        if env_file:
            values.update(dotenv_values(env_file))
        values.update(os.environ if environ is None else environ)
        return cls(values)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a raw string value, or default if absent."""
        return self._values.get(name, default)

    def require(self, key: ConfigKey) -> str:
        """
        Get a required value.

        An empty string counts as present; it is the parser's job to
        reject it.

        Raises:
            MissingConfigError: If the key is absent.
        """
        value = self._values.get(key.value)
        if value is None:
            raise MissingConfigError(key)
        return value

    def __contains__(self, name: str) -> bool:
        return name in self._values


@dataclass
class ServerConfig:
    """
    Ambient settings for the server.

    The listening address is NOT part of this dataclass: it is resolved
    separately (see ListenAddress.from_source) so that missing and
    malformed address values surface as ConfigError subclasses.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    backlog: int = 128
    """
    Maximum number of queued connections.
    Connections wait here while the current one is being served.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    content_root: str = "."
    """Directory the default resource is served from."""

    index_file: str = "index.html"
    """The default resource, relative to content_root."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_source(cls, source: ConfigSource) -> "ServerConfig":
        """
        Create configuration from a ConfigSource.

        =====================================================================
        VARIABLES
        =====================================================================

        BACKLOG         Listen backlog (default: 128)
        CONTENT_ROOT    Content directory (default: .)
        INDEX_FILE      Default resource (default: index.html)
        LOG_LEVEL       Logging level (default: INFO)

        =====================================================================
        """
        backlog = source.get("BACKLOG", "128")
        try:
            backlog_value = int(backlog)
        except ValueError:
            raise ValueError(f"Invalid BACKLOG: {backlog!r}") from None

        return cls(
            backlog=backlog_value,
            content_root=source.get("CONTENT_ROOT", "."),
            index_file=source.get("INDEX_FILE", "index.html"),
            log_level=source.get("LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead
        of on the first request.
        """
        if self.backlog < 0:
            raise ValueError(f"backlog must be >= 0, got {self.backlog}")

        if not self.index_file:
            raise ValueError("index_file must not be empty")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. ConfigKey names the two address settings (IP_ADDR, PORT)
# 2. ConfigSource is an injectable snapshot of env + .env
# 3. ServerConfig holds the ambient settings and validates them at startup
# 4. ConfigError is the root of all startup configuration failures
# =============================================================================
