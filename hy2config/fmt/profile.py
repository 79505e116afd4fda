from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from hy2config.db.config import ConfigBase
from hy2config.routing.rules import RuleSet

DEFAULT_PROFILE_NAME = "Default"
COPY_SUFFIX = " (copy)"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ConnectionProfile(ConfigBase):
    """
    Hysteria 2 client connection profile.

    Immutable: use ``with_changes`` to derive a modified profile.
    """

    id: str = field(default_factory=_new_id)
    name: str = DEFAULT_PROFILE_NAME
    # host:port, or host:port1-port2 for port hopping
    server: str = ""
    # password, or username:password for userpass auth
    auth: str = ""
    # TLS
    tls_sni: str = ""
    tls_insecure: bool = False
    tls_pin_sha256: str = ""
    # Salamander obfuscation
    obfs_enabled: bool = False
    obfs_password: str = ""
    # Mbps, 0 = BBR instead of Brutal
    bandwidth_up: int = 100
    bandwidth_down: int = 200
    # QUIC, seconds
    quic_max_idle_timeout: int = 30
    quic_keep_alive_period: int = 10
    quic_disable_path_mtu_discovery: bool = False
    # Seconds, 0 = disabled
    port_hop_interval: int = 0
    # Local proxies
    socks5_listen: str = "127.0.0.1:1080"
    http_listen: str = "127.0.0.1:1081"
    dual_mode_proxy: bool = False
    # Performance
    fast_open: bool = True
    lazy: bool = False
    route_rules: RuleSet | None = None

    @property
    def display_name(self) -> str:
        return self.name if self.name else self.server

    @property
    def uses_port_hopping(self) -> bool:
        """Server address carries a port range."""
        _, sep, port = self.server.rpartition(":")
        return bool(sep) and "-" in port

    @classmethod
    def create_default(cls, **overrides) -> ConnectionProfile:
        """Profile with recommended settings."""
        return cls(**overrides)

    def duplicate(self) -> ConnectionProfile:
        """Copy with a new id and a marked name. Route rules follow the copy."""
        new_id = _new_id()
        route_rules = self.route_rules.with_changes(profile_id=new_id) if self.route_rules else None
        return self.with_changes(
            id=new_id,
            name=f"{self.name}{COPY_SUFFIX}",
            route_rules=route_rules,
        )

    def with_route_rules(self, rule_set: RuleSet | None) -> ConnectionProfile:
        """Attach a rule set, binding it to this profile."""
        if rule_set is not None and rule_set.profile_id != self.id:
            rule_set = rule_set.with_changes(profile_id=self.id)
        return self.with_changes(route_rules=rule_set)
