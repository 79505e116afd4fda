from __future__ import annotations

import logging

from hy2config.fmt.profile import ConnectionProfile
from hy2config.routing.acl import render_acl

logger = logging.getLogger("hy2config.renderer")

OBFS_TYPE = "salamander"
BANDWIDTH_UNIT = "mbps"
TIME_UNIT = "s"
INDENT = "  "


class _Builder:
    """Line buffer for the YAML-style client config."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def line(self, text: str = "", depth: int = 0) -> None:
        self._lines.append(f"{INDENT * depth}{text}" if text else "")

    def block(self, header: str, *entries: tuple[int, str]) -> None:
        """Header line, indented entries and a trailing blank line."""
        self.line(header)
        for depth, text in entries:
            self.line(text, depth)
        self.line()

    def build(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)


def _seconds(value: int) -> str:
    return f"{value}{TIME_UNIT}"


def render_config(profile: ConnectionProfile, log: logging.Logger | None = None) -> str:
    """
    Render the client configuration file.

    Block order is fixed. Optional blocks are omitted when they carry no
    non-default value. Route rules are not embedded, see
    ``render_acl_fragment``.
    """
    log = log or logger
    log.debug("Rendering config for profile %s (%s)", profile.id, profile.display_name)

    out = _Builder()

    out.block(f"server: {profile.server}")
    out.block(f"auth: {profile.auth}")

    if profile.tls_sni.strip() or profile.tls_insecure or profile.tls_pin_sha256.strip():
        tls = []
        if profile.tls_sni.strip():
            tls.append((1, f"sni: {profile.tls_sni}"))
        if profile.tls_insecure:
            tls.append((1, "insecure: true"))
        if profile.tls_pin_sha256.strip():
            tls.append((1, f"pinSHA256: {profile.tls_pin_sha256}"))
        out.block("tls:", *tls)

    if profile.obfs_enabled and profile.obfs_password.strip():
        out.block(
            "obfs:",
            (1, f"type: {OBFS_TYPE}"),
            (1, f"{OBFS_TYPE}:"),
            (2, f"password: {profile.obfs_password}"),
        )

    # 0/0 means BBR congestion control
    if profile.bandwidth_up > 0 or profile.bandwidth_down > 0:
        out.block(
            "bandwidth:",
            (1, f"up: {profile.bandwidth_up} {BANDWIDTH_UNIT}"),
            (1, f"down: {profile.bandwidth_down} {BANDWIDTH_UNIT}"),
        )

    quic = [
        (1, f"maxIdleTimeout: {_seconds(profile.quic_max_idle_timeout)}"),
        (1, f"keepAlivePeriod: {_seconds(profile.quic_keep_alive_period)}"),
    ]
    if profile.quic_disable_path_mtu_discovery:
        quic.append((1, "disablePathMTUDiscovery: true"))
    out.block("quic:", *quic)

    if profile.port_hop_interval > 0:
        log.debug("Port hopping enabled, interval %ss", profile.port_hop_interval)
        out.block(
            "transport:",
            (1, "type: udp"),
            (1, "udp:"),
            (2, f"hopInterval: {_seconds(profile.port_hop_interval)}"),
        )

    # Dual mode: HTTP shares the SOCKS5 listener.
    http_listen = profile.socks5_listen if profile.dual_mode_proxy else profile.http_listen
    out.block("socks5:", (1, f"listen: {profile.socks5_listen}"))
    out.block("http:", (1, f"listen: {http_listen}"))

    if profile.fast_open:
        out.block("fastOpen: true")
    if profile.lazy:
        out.block("lazy: true")

    return out.build()


def render_acl_fragment(profile: ConnectionProfile, log: logging.Logger | None = None) -> str:
    """ACL fragment for the profile's route rules, empty without rules."""
    if profile.route_rules is None:
        return ""
    return render_acl(profile.route_rules, log=log)
