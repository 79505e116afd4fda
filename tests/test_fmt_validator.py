import pytest

from hy2config.fmt.profile import ConnectionProfile
from hy2config.fmt.validator import validate_profile, validate_server_port


def _profile(**fields):
    base = {"server": "example.com:443", "auth": "secret"}
    base.update(fields)
    return ConnectionProfile(**base)


def test_valid_profile():
    result = validate_profile(_profile())

    assert result.is_valid is True
    assert result.errors == ()
    assert result.error_message == ""


def test_port_out_of_range():
    result = validate_profile(_profile(server="host:70000"))

    assert result.is_valid is False
    assert any("65535" in e for e in result.errors)


def test_port_range_start_not_below_end():
    result = validate_profile(_profile(server="host:1000-500"))

    assert result.is_valid is False
    assert result.errors == ("Port range start must be less than end",)


def test_negative_bandwidth():
    result = validate_profile(_profile(bandwidth_up=-1))

    assert result.is_valid is False
    assert "Bandwidth must not be negative" in result.errors


@pytest.mark.parametrize(
    ("server", "expected"),
    [
        ("host:443", []),
        ("host", []),
        ("host:20000-30000", []),
        ("[::1]:443", []),
        ("host:0", ["Invalid server port (must be 1-65535)"]),
        ("host:abc", ["Invalid server port (must be 1-65535)"]),
        ("host:", ["Invalid server port (must be 1-65535)"]),
        ("host:1-2-3", ["Invalid port range format, expected port1-port2"]),
        ("host:a-b", ["Port range must be numeric"]),
        ("host:0-100", ["Port range values must be between 1 and 65535"]),
        ("host:100-70000", ["Port range values must be between 1 and 65535"]),
        ("host:500-500", ["Port range start must be less than end"]),
        ("host:443\n", ["Invalid server port (must be 1-65535)"]),
        ("host:100-200\n", ["Port range must be numeric"]),
    ],
)
def test_validate_server_port(server, expected):
    assert validate_server_port(server) == expected


def test_trailing_newline_in_port_is_rejected():
    result = validate_profile(_profile(server="host:443\n"))

    assert result.is_valid is False
    assert result.errors == ("Invalid server port (must be 1-65535)",)


def test_all_checks_are_collected():
    profile = ConnectionProfile(
        server="",
        auth=" ",
        bandwidth_up=20000,
        quic_max_idle_timeout=4,
        quic_keep_alive_period=61,
        obfs_enabled=True,
        obfs_password="",
        port_hop_interval=-1,
    )

    result = validate_profile(profile)

    assert result.errors == (
        "Server address must not be empty",
        "Authentication must not be empty",
        "Bandwidth is too large (at most 10000 Mbps)",
        "Max idle timeout must be between 5 and 300 seconds",
        "Keep-alive period must be between 5 and 60 seconds",
        "Obfuscation password is required when obfuscation is enabled",
        "Port hop interval must not be negative",
    )


def test_boundaries_are_inclusive():
    profile = _profile(
        bandwidth_up=0,
        bandwidth_down=10000,
        quic_max_idle_timeout=300,
        quic_keep_alive_period=5,
        server="host:1-65535",
    )

    assert validate_profile(profile).is_valid is True
