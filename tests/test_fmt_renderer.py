from hy2config.fmt.profile import ConnectionProfile
from hy2config.fmt.renderer import render_acl_fragment, render_config
from hy2config.routing.presets import most_direct
from hy2config.routing.rules import RoutePolicy, RouteRule


def test_render_default_profile():
    profile = ConnectionProfile(server="example.com:443", auth="secret")

    assert render_config(profile) == (
        "server: example.com:443\n"
        "\n"
        "auth: secret\n"
        "\n"
        "bandwidth:\n"
        "  up: 100 mbps\n"
        "  down: 200 mbps\n"
        "\n"
        "quic:\n"
        "  maxIdleTimeout: 30s\n"
        "  keepAlivePeriod: 10s\n"
        "\n"
        "socks5:\n"
        "  listen: 127.0.0.1:1080\n"
        "\n"
        "http:\n"
        "  listen: 127.0.0.1:1081\n"
        "\n"
        "fastOpen: true\n"
        "\n"
    )


def test_render_all_blocks():
    profile = ConnectionProfile(
        server="example.com:20000-30000",
        auth="user:pass",
        tls_sni="sni.example.com",
        tls_insecure=True,
        tls_pin_sha256="AB:CD",
        obfs_enabled=True,
        obfs_password="obfs",
        bandwidth_up=0,
        bandwidth_down=50,
        quic_max_idle_timeout=60,
        quic_keep_alive_period=20,
        quic_disable_path_mtu_discovery=True,
        port_hop_interval=30,
        socks5_listen="0.0.0.0:1080",
        http_listen="0.0.0.0:8080",
        dual_mode_proxy=True,
        fast_open=False,
        lazy=True,
    )

    assert render_config(profile) == (
        "server: example.com:20000-30000\n"
        "\n"
        "auth: user:pass\n"
        "\n"
        "tls:\n"
        "  sni: sni.example.com\n"
        "  insecure: true\n"
        "  pinSHA256: AB:CD\n"
        "\n"
        "obfs:\n"
        "  type: salamander\n"
        "  salamander:\n"
        "    password: obfs\n"
        "\n"
        "bandwidth:\n"
        "  up: 0 mbps\n"
        "  down: 50 mbps\n"
        "\n"
        "quic:\n"
        "  maxIdleTimeout: 60s\n"
        "  keepAlivePeriod: 20s\n"
        "  disablePathMTUDiscovery: true\n"
        "\n"
        "transport:\n"
        "  type: udp\n"
        "  udp:\n"
        "    hopInterval: 30s\n"
        "\n"
        "socks5:\n"
        "  listen: 0.0.0.0:1080\n"
        "\n"
        "http:\n"
        "  listen: 0.0.0.0:1080\n"
        "\n"
        "lazy: true\n"
        "\n"
    )


def test_tls_block_only_with_set_fields():
    text = render_config(ConnectionProfile(tls_insecure=True))

    assert "tls:\n  insecure: true\n\n" in text
    assert "sni:" not in text
    assert "pinSHA256" not in text


def test_optional_blocks_omitted():
    profile = ConnectionProfile(
        tls_sni="  ",
        obfs_enabled=True,
        obfs_password="",
        bandwidth_up=0,
        bandwidth_down=0,
        fast_open=False,
    )

    text = render_config(profile)

    assert "tls:" not in text
    assert "obfs:" not in text
    assert "bandwidth:" not in text
    assert "transport:" not in text
    assert "fastOpen" not in text
    assert "lazy" not in text
    assert "quic:" in text


def test_obfs_password_without_enabled_flag_is_ignored():
    assert "obfs:" not in render_config(ConnectionProfile(obfs_password="x"))


def test_rendering_is_deterministic():
    profile = ConnectionProfile(server="h:443", auth="a").with_route_rules(most_direct("x"))

    assert render_config(profile) == render_config(profile)
    assert render_acl_fragment(profile) == render_acl_fragment(profile)


def test_route_rules_are_not_embedded():
    rule_set = most_direct("x").add_rule(RouteRule(pattern="ads.com", policy=RoutePolicy.BLOCK))
    with_rules = ConnectionProfile(id="p", server="h:443", auth="a").with_route_rules(rule_set)
    without_rules = with_rules.with_route_rules(None)

    assert render_config(with_rules) == render_config(without_rules)
    assert "reject(" not in render_config(with_rules)
    assert render_acl_fragment(with_rules).startswith("reject(ads.com)\n")


def test_acl_fragment_empty_without_rules():
    assert render_acl_fragment(ConnectionProfile()) == ""
