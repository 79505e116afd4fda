from __future__ import annotations

import re
from dataclasses import dataclass

from hy2config.fmt.profile import ConnectionProfile

MIN_PORT = 1
MAX_PORT = 65535
MAX_BANDWIDTH_MBPS = 10000
IDLE_TIMEOUT_RANGE = (5, 300)
KEEP_ALIVE_RANGE = (5, 60)

_INT_RE = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class ProfileValidationResult:
    """Profile validation result."""

    is_valid: bool
    errors: tuple[str, ...] = ()

    @property
    def error_message(self) -> str:
        return "\n".join(self.errors)


def _to_int(value: str) -> int | None:
    return int(value) if _INT_RE.fullmatch(value) else None


def _port_in_range(port: int) -> bool:
    return MIN_PORT <= port <= MAX_PORT


def validate_server_port(server: str) -> list[str]:
    """
    Check the port part of a server address.

    Accepts ``host:port`` and ``host:start-end``. Addresses without a colon
    are not checked.
    """
    if ":" not in server:
        return []

    port_part = server.rpartition(":")[2]

    if "-" not in port_part:
        port = _to_int(port_part)
        if port is None or not _port_in_range(port):
            return [f"Invalid server port (must be {MIN_PORT}-{MAX_PORT})"]
        return []

    port_range = port_part.split("-")
    if len(port_range) != 2:
        return ["Invalid port range format, expected port1-port2"]

    start, end = _to_int(port_range[0]), _to_int(port_range[1])
    if start is None or end is None:
        return ["Port range must be numeric"]
    if not _port_in_range(start) or not _port_in_range(end):
        return [f"Port range values must be between {MIN_PORT} and {MAX_PORT}"]
    if start >= end:
        return ["Port range start must be less than end"]
    return []


def validate_profile(profile: ConnectionProfile) -> ProfileValidationResult:
    """
    Validate a connection profile.

    Every check runs and all problems are reported.
    """
    errors: list[str] = []

    if not profile.server.strip():
        errors.append("Server address must not be empty")
    if not profile.auth.strip():
        errors.append("Authentication must not be empty")

    errors.extend(validate_server_port(profile.server))

    if profile.bandwidth_up < 0 or profile.bandwidth_down < 0:
        errors.append("Bandwidth must not be negative")
    if profile.bandwidth_up > MAX_BANDWIDTH_MBPS or profile.bandwidth_down > MAX_BANDWIDTH_MBPS:
        errors.append(f"Bandwidth is too large (at most {MAX_BANDWIDTH_MBPS} Mbps)")

    low, high = IDLE_TIMEOUT_RANGE
    if not low <= profile.quic_max_idle_timeout <= high:
        errors.append(f"Max idle timeout must be between {low} and {high} seconds")
    low, high = KEEP_ALIVE_RANGE
    if not low <= profile.quic_keep_alive_period <= high:
        errors.append(f"Keep-alive period must be between {low} and {high} seconds")

    if profile.obfs_enabled and not profile.obfs_password.strip():
        errors.append("Obfuscation password is required when obfuscation is enabled")

    if profile.port_hop_interval < 0:
        errors.append("Port hop interval must not be negative")

    return ProfileValidationResult(is_valid=not errors, errors=tuple(errors))
