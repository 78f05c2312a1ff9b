"""
=============================================================================
LISTENING ADDRESS RESOLUTION
=============================================================================

Turns two untyped configuration strings (IP_ADDR and PORT) into a single
validated endpoint the server can bind to.

=============================================================================
ADDRESS SHAPES
=============================================================================

    "192.168.1.1"     4 dot-separated parts   ──►  V4(192, 168, 1, 1)
    "::1"             contains a colon        ──►  V6("::1")
    "localhost"       neither                 ──►  InvalidAddressFormatError

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       parse_address(text)                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   text.split(".")                                                   │
    │       │                                                              │
    │       ├── exactly 4 parts? ──► each part a 0-255 decimal? ──► V4   │
    │       │                              │                               │
    │       │                              └── no ──► InvalidOctetError   │
    │       │                                                              │
    │       └── otherwise: ":" in text? ──► V6 (kept verbatim)            │
    │                          │                                           │
    │                          └── no ──► InvalidAddressFormatError       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

IPv6 validation is deliberately weak: any colon-containing string is
accepted here. A bogus literal is only rejected when the socket layer
tries to bind it (see socket_server.bind).

=============================================================================
CANONICAL FORM
=============================================================================

A ListenAddress prints as "{address}:{port}":

    V4  ──►  "192.168.1.1:8080"
    V6  ──►  "::1:8080"          (verbatim, no brackets)

This is the single text form used for logging and for bind errors.

=============================================================================
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..config import ConfigError, ConfigKey, ConfigSource


# Unsigned decimal: ASCII digits with an optional leading "+".
# int() alone would also accept whitespace, underscores and "-0".
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


def parse_unsigned(text: str, bits: int) -> int:
    """
    Parse an unsigned base-10 integer that fits in `bits` bits.

    Raises:
        ValueError: If text is not a plain decimal or is out of range.
    """
    if not _UNSIGNED_RE.fullmatch(text):
        raise ValueError(f"invalid digit found in {text!r}")

    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"number too large to fit in target type: {text!r}")
    return value


# =============================================================================
# PARSE ERRORS
# =============================================================================

class AddressParseError(ValueError):
    """Base class for errors from parse_address()."""


class InvalidAddressFormatError(AddressParseError):
    """The text is neither a 4-part dotted quad nor a colon literal."""

    def __init__(self, text: str):
        super().__init__("Invalid IP address format")
        self.text = text


class InvalidOctetError(AddressParseError):
    """
    A dotted-quad component is not an 8-bit unsigned integer.

    Attributes:
        part: The offending component.
        cause: The underlying ValueError.
    """

    def __init__(self, part: str, cause: ValueError):
        super().__init__(f"Failed to parse IP component: {cause}")
        self.part = part
        self.cause = cause


# =============================================================================
# NETWORK ADDRESS
# =============================================================================

class AddressFamily(Enum):
    """Tag for the NetworkAddress variant."""
    V4 = "v4"
    V6 = "v6"


@dataclass(frozen=True)
class NetworkAddress:
    """
    A parsed IP address: either V4 (four octets) or V6 (opaque literal).

    Build one with NetworkAddress.v4(), NetworkAddress.v6() or
    parse_address(). Only the field matching `family` is set.
    """

    family: AddressFamily
    octets: Optional[Tuple[int, int, int, int]] = None
    literal: Optional[str] = None

    def __post_init__(self):
        if self.family is AddressFamily.V4:
            if self.literal is not None:
                raise ValueError("V4 address cannot carry a literal")
            if self.octets is None or len(self.octets) != 4:
                raise ValueError(f"V4 address needs exactly 4 octets: {self.octets!r}")
            for octet in self.octets:
                if not 0 <= octet <= 255:
                    raise ValueError(f"Octet out of range: {octet}")
            object.__setattr__(self, "octets", tuple(self.octets))
        else:
            if self.octets is not None:
                raise ValueError("V6 address cannot carry octets")
            if not self.literal or ":" not in self.literal:
                raise ValueError(f"V6 literal must contain a colon: {self.literal!r}")

    @classmethod
    def v4(cls, a: int, b: int, c: int, d: int) -> "NetworkAddress":
        return cls(AddressFamily.V4, octets=(a, b, c, d))

    @classmethod
    def v6(cls, literal: str) -> "NetworkAddress":
        return cls(AddressFamily.V6, literal=literal)

    @property
    def is_v4(self) -> bool:
        return self.family is AddressFamily.V4

    @property
    def is_v6(self) -> bool:
        return self.family is AddressFamily.V6

    def __str__(self) -> str:
        if self.family is AddressFamily.V4:
            return ".".join(str(octet) for octet in self.octets)
        return self.literal


def parse_address(text: str) -> NetworkAddress:
    """
    Parse a textual IP address.

    Args:
        text: Dotted-quad ("10.0.0.1") or colon literal ("::1").

    Returns:
        The parsed NetworkAddress.

    Raises:
        InvalidOctetError: 4 dot-separated parts, but one is not 0-255.
        InvalidAddressFormatError: Neither shape matches.
    """
    parts = text.split(".")
    if len(parts) == 4:
        octets = []
        for part in parts:
            try:
                octets.append(parse_unsigned(part, 8))
            except ValueError as e:
                raise InvalidOctetError(part, e) from e
        return NetworkAddress.v4(*octets)

    if ":" in text:
        return NetworkAddress.v6(text)

    raise InvalidAddressFormatError(text)


# =============================================================================
# LISTEN ADDRESS
# =============================================================================

class InvalidIpError(ConfigError):
    """IP_ADDR is present but does not parse."""

    def __init__(self, cause: AddressParseError):
        super().__init__(f"IP parse error: {cause}", ConfigKey.IP_ADDR)
        self.cause = cause


class InvalidPortError(ConfigError):
    """PORT is present but is not a 16-bit unsigned integer."""

    def __init__(self, cause: ValueError):
        super().__init__(f"Invalid port: {cause}", ConfigKey.PORT)
        self.cause = cause


@dataclass(frozen=True)
class ListenAddress:
    """
    The endpoint the server listens on.

    Built once at startup, read-only afterwards.
    """

    address: NetworkAddress
    port: int

    def __post_init__(self):
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"Port out of range: {self.port}")

    @classmethod
    def from_config(cls, ip_text: str, port_text: str) -> "ListenAddress":
        """
        Build a ListenAddress from raw configuration strings.

        The IP is checked first, so when both values are bad the error
        names the IP.

        Raises:
            InvalidIpError: ip_text does not parse.
            InvalidPortError: port_text is not in 0-65535.
        """
        address = cls._parse_ip(ip_text)
        port = cls._parse_port(port_text)
        return cls(address, port)

    @classmethod
    def from_source(cls, source: ConfigSource) -> "ListenAddress":
        """
        Resolve IP_ADDR and PORT from a ConfigSource.

        Each value is looked up and parsed in turn: a malformed IP_ADDR
        is reported even if PORT is missing.

        Raises:
            MissingConfigError: A key is absent.
            InvalidIpError / InvalidPortError: A value is malformed.
        """
        address = cls._parse_ip(source.require(ConfigKey.IP_ADDR))
        port = cls._parse_port(source.require(ConfigKey.PORT))
        return cls(address, port)

    @staticmethod
    def _parse_ip(ip_text: str) -> NetworkAddress:
        try:
            return parse_address(ip_text)
        except AddressParseError as e:
            raise InvalidIpError(e) from e

    @staticmethod
    def _parse_port(port_text: str) -> int:
        try:
            return parse_unsigned(port_text, 16)
        except ValueError as e:
            raise InvalidPortError(e) from e

    @property
    def host(self) -> str:
        """The address part as a string, suitable for getaddrinfo()."""
        return str(self.address)

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"
