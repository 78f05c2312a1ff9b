"""
Unit tests for address parsing and ListenAddress construction.
"""

import dataclasses

import pytest

from minihttpd.config import ConfigError, ConfigKey, ConfigSource, MissingConfigError
from minihttpd.core.address import (
    AddressFamily,
    AddressParseError,
    InvalidAddressFormatError,
    InvalidIpError,
    InvalidOctetError,
    InvalidPortError,
    ListenAddress,
    NetworkAddress,
    parse_address,
    parse_unsigned,
)


class TestParseAddress:
    """Tests for parse_address()."""

    @pytest.mark.parametrize("text", [
        "0.0.0.0",
        "127.0.0.1",
        "192.168.1.1",
        "255.255.255.255",
        "10.20.30.40",
    ])
    def test_dotted_quad_round_trips(self, text: str):
        """Well-formed dotted quads parse to V4 and print back unchanged."""
        address = parse_address(text)

        assert address.family is AddressFamily.V4
        assert address.is_v4
        assert str(address) == text

    def test_octets(self):
        """Octets are stored in order."""
        assert parse_address("192.168.1.1").octets == (192, 168, 1, 1)

    def test_leading_plus_accepted(self):
        """A leading '+' is an accepted unsigned form."""
        assert parse_address("+1.2.3.4").octets == (1, 2, 3, 4)

    @pytest.mark.parametrize("text", [
        "256.1.1.1",        # out of range
        "1.2.3.999",
        "192.168.1.x",      # not numeric
        "1..2.3",           # empty component
        "1.2.3.",
        " 1.2.3.4",         # whitespace is not tolerated
        "1.2.3.4 ",
        "-1.2.3.4",         # no sign for unsigned
        "1_0.2.3.4",        # int() would accept this
        "::ffff:1.2.3.4",   # 4 dot parts wins over the colon check
    ])
    def test_bad_dotted_quad_fails(self, text: str):
        """Four dot-separated parts with a bad component never succeed."""
        with pytest.raises(InvalidOctetError) as exc_info:
            parse_address(text)

        assert isinstance(exc_info.value, AddressParseError)
        assert isinstance(exc_info.value.cause, ValueError)

    def test_bad_octet_identifies_component(self):
        """The error names the component that failed."""
        with pytest.raises(InvalidOctetError) as exc_info:
            parse_address("10.0.300.1")

        assert exc_info.value.part == "300"
        assert "Failed to parse IP component" in str(exc_info.value)

    @pytest.mark.parametrize("text", [
        "::1",
        "::",
        "fe80::1%eth0",
        "2001:db8::8a2e:370:7334",
        "not:really:an:address",   # weak validation: any colon passes
    ])
    def test_colon_literal_is_v6(self, text: str):
        """Colon-containing strings are kept verbatim as V6."""
        address = parse_address(text)

        assert address.family is AddressFamily.V6
        assert address.is_v6
        assert address.literal == text
        assert str(address) == text

    @pytest.mark.parametrize("text", [
        "",
        "localhost",
        "1.2.3",
        "1.2.3.4.5",
        "12345",
    ])
    def test_invalid_format(self, text: str):
        """Strings matching neither shape fail with InvalidAddressFormatError."""
        with pytest.raises(InvalidAddressFormatError) as exc_info:
            parse_address(text)

        assert str(exc_info.value) == "Invalid IP address format"


class TestNetworkAddress:
    """Tests for the NetworkAddress value type."""

    def test_v4_rejects_out_of_range(self):
        """V4 octets must be 0-255."""
        with pytest.raises(ValueError):
            NetworkAddress.v4(1, 2, 3, 256)

    @pytest.mark.parametrize("kwargs", [
        {"octets": (999, 0, 0, 0)},
        {"octets": (1, 2, 3)},
        {},
        {"octets": (1, 2, 3, 4), "literal": "::1"},
    ])
    def test_direct_v4_construction_validated(self, kwargs):
        """The dataclass constructor enforces the same V4 rules as v4()."""
        with pytest.raises(ValueError):
            NetworkAddress(AddressFamily.V4, **kwargs)

    @pytest.mark.parametrize("kwargs", [
        {},
        {"literal": "localhost"},
        {"literal": "::1", "octets": (0, 0, 0, 1)},
    ])
    def test_direct_v6_construction_validated(self, kwargs):
        """A V6 address holds a colon literal and nothing else."""
        with pytest.raises(ValueError):
            NetworkAddress(AddressFamily.V6, **kwargs)

    def test_direct_construction_matches_factory(self):
        """Valid direct construction equals the factory result."""
        address = NetworkAddress(AddressFamily.V4, octets=(10, 0, 0, 1))

        assert address == NetworkAddress.v4(10, 0, 0, 1)
        assert str(address) == "10.0.0.1"

    def test_immutable(self):
        """Addresses cannot be modified after construction."""
        address = NetworkAddress.v6("::1")

        with pytest.raises(dataclasses.FrozenInstanceError):
            address.literal = "::2"

    def test_equality(self):
        """Equal variants compare equal."""
        assert parse_address("1.2.3.4") == NetworkAddress.v4(1, 2, 3, 4)
        assert parse_address("::1") == NetworkAddress.v6("::1")
        assert parse_address("::1") != NetworkAddress.v6("::2")


class TestParseUnsigned:
    """Tests for parse_unsigned()."""

    def test_bounds(self):
        assert parse_unsigned("0", 16) == 0
        assert parse_unsigned("65535", 16) == 65535

        with pytest.raises(ValueError):
            parse_unsigned("65536", 16)

    def test_leading_zeros(self):
        assert parse_unsigned("0080", 16) == 80


class TestListenAddress:
    """Tests for ListenAddress.from_config() and from_source()."""

    def test_canonical_form_v4(self):
        """IPv4 renders as dotted decimal followed by the port."""
        listen = ListenAddress.from_config("192.168.1.1", "8080")

        assert str(listen) == "192.168.1.1:8080"
        assert listen.port == 8080
        assert listen.host == "192.168.1.1"

    def test_canonical_form_v6(self):
        """IPv6 literals are rendered verbatim."""
        listen = ListenAddress.from_config("::1", "443")

        assert str(listen) == "::1:443"

    @pytest.mark.parametrize("port_text", ["0", "1", "65535"])
    def test_port_range(self, port_text: str):
        """Every 16-bit value is a valid port."""
        listen = ListenAddress.from_config("127.0.0.1", port_text)
        assert listen.port == int(port_text)

    @pytest.mark.parametrize("port_text", ["", "abc", "65536", "-1", " 80", "80.0"])
    def test_invalid_port(self, port_text: str):
        """A bad port with a good address is reported as a port error."""
        with pytest.raises(InvalidPortError) as exc_info:
            ListenAddress.from_config("127.0.0.1", port_text)

        assert exc_info.value.component is ConfigKey.PORT
        assert isinstance(exc_info.value, ConfigError)
        assert str(exc_info.value).startswith("Invalid port")

    def test_invalid_ip(self):
        """A bad address with a good port is reported as an IP error."""
        with pytest.raises(InvalidIpError) as exc_info:
            ListenAddress.from_config("localhost", "8080")

        assert exc_info.value.component is ConfigKey.IP_ADDR
        assert isinstance(exc_info.value.cause, InvalidAddressFormatError)
        assert str(exc_info.value).startswith("IP parse error")

    def test_invalid_ip_octet_cause(self):
        """Octet failures are carried as the cause."""
        with pytest.raises(InvalidIpError) as exc_info:
            ListenAddress.from_config("1.2.3.400", "8080")

        assert isinstance(exc_info.value.cause, InvalidOctetError)

    def test_ip_checked_first(self):
        """When both values are bad, the IP error wins."""
        with pytest.raises(InvalidIpError):
            ListenAddress.from_config("bogus", "bogus")

    def test_from_source(self):
        """IP_ADDR and PORT are read from the source."""
        source = ConfigSource({"IP_ADDR": "10.0.0.1", "PORT": "9000"})

        assert str(ListenAddress.from_source(source)) == "10.0.0.1:9000"

    def test_from_source_missing_ip(self):
        """A missing IP_ADDR names the key."""
        source = ConfigSource({"PORT": "9000"})

        with pytest.raises(MissingConfigError) as exc_info:
            ListenAddress.from_source(source)

        assert exc_info.value.key is ConfigKey.IP_ADDR

    def test_from_source_missing_port(self):
        """A missing PORT names the key."""
        source = ConfigSource({"IP_ADDR": "10.0.0.1"})

        with pytest.raises(MissingConfigError) as exc_info:
            ListenAddress.from_source(source)

        assert exc_info.value.key is ConfigKey.PORT
        assert "PORT" in str(exc_info.value)

    def test_from_source_bad_ip_before_missing_port(self):
        """The IP is parsed before PORT is looked up."""
        source = ConfigSource({"IP_ADDR": "nope"})

        with pytest.raises(InvalidIpError):
            ListenAddress.from_source(source)

    def test_from_source_missing_vs_malformed_distinguishable(self):
        """Missing and malformed values raise different exception types."""
        with pytest.raises(MissingConfigError):
            ListenAddress.from_source(ConfigSource({"IP_ADDR": "1.2.3.4"}))

        with pytest.raises(InvalidPortError):
            ListenAddress.from_source(ConfigSource({"IP_ADDR": "1.2.3.4", "PORT": "x"}))
