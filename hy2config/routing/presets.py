from __future__ import annotations

from collections.abc import Callable

from hy2config.routing.rules import RoutePolicy, RouteRule, RuleSet

# (pattern, description)
COMMON_WHITELIST_DOMAINS: list[tuple[str, str]] = [
    ("*.cn", "Mainland China domains"),
    ("*.com.cn", "Chinese commercial domains"),
    ("*.gov.cn", "Chinese government domains"),
    ("*.baidu.com", "Baidu"),
    ("*.qq.com", "Tencent"),
    ("*.taobao.com", "Taobao"),
    ("*.alipay.com", "Alipay"),
    ("*.jd.com", "JD"),
    ("*.weibo.com", "Weibo"),
    ("*.163.com", "NetEase"),
    ("*.bilibili.com", "Bilibili"),
    ("*.douyin.com", "Douyin"),
    ("*.xiaomi.com", "Xiaomi"),
]

COMMON_BLACKLIST_DOMAINS: list[tuple[str, str]] = [
    ("*.doubleclick.net", "Google ads"),
    ("*.googleadservices.com", "Google ad services"),
    ("*.googlesyndication.com", "Google ad network"),
    ("*.google-analytics.com", "Google analytics"),
]


def _rules(entries: list[tuple[str, str]], policy: RoutePolicy, enabled: bool = True) -> tuple[RouteRule, ...]:
    return tuple(
        RouteRule(pattern=pattern, policy=policy, description=desc, enabled=enabled)
        for pattern, desc in entries
    )


def create_default(profile_id: str) -> RuleSet:
    """Disabled rule set with a few disabled example rules."""
    return RuleSet(
        profile_id=profile_id,
        default_policy=RoutePolicy.TUNNEL,
        rules=(
            RouteRule(pattern="*.cn", policy=RoutePolicy.DIRECT,
                      description="Mainland China domains direct", enabled=False),
            RouteRule(pattern="*.baidu.com", policy=RoutePolicy.DIRECT,
                      description="Baidu direct", enabled=False),
            RouteRule(pattern="*.ad.com", policy=RoutePolicy.BLOCK,
                      description="Block ad domains", enabled=False),
        ),
        enabled=False,
    )


def most_direct(profile_id: str) -> RuleSet:
    """
    Most traffic goes direct.

    Meant for "tunnel only specific domains": add TUNNEL rules on top.
    """
    return RuleSet(
        profile_id=profile_id,
        default_policy=RoutePolicy.DIRECT,
        rules=_rules(
            [
                ("geoip:private", "Private IP addresses (LAN)"),
                ("geoip:cn", "Mainland China IP addresses"),
                ("geosite:cn", "Mainland China sites"),
            ],
            RoutePolicy.DIRECT,
        ),
        enabled=True,
    )


def china_direct(profile_id: str) -> RuleSet:
    return RuleSet(
        profile_id=profile_id,
        default_policy=RoutePolicy.TUNNEL,
        rules=_rules(COMMON_WHITELIST_DOMAINS, RoutePolicy.DIRECT),
        enabled=True,
    )


def block_ads(profile_id: str) -> RuleSet:
    return RuleSet(
        profile_id=profile_id,
        default_policy=RoutePolicy.TUNNEL,
        rules=_rules(COMMON_BLACKLIST_DOMAINS, RoutePolicy.BLOCK),
        enabled=True,
    )


def china_direct_and_block_ads(profile_id: str) -> RuleSet:
    return RuleSet(
        profile_id=profile_id,
        default_policy=RoutePolicy.TUNNEL,
        rules=(
            _rules(COMMON_WHITELIST_DOMAINS, RoutePolicy.DIRECT)
            + _rules(COMMON_BLACKLIST_DOMAINS, RoutePolicy.BLOCK)
        ),
        enabled=True,
    )


PRESETS: dict[str, Callable[[str], RuleSet]] = {
    "default": create_default,
    "most-direct": most_direct,
    "china-direct": china_direct,
    "block-ads": block_ads,
    "china-direct-block-ads": china_direct_and_block_ads,
}


def get_preset(name: str, profile_id: str) -> RuleSet | None:
    """Build a preset rule set by name."""
    factory = PRESETS.get(name)
    if factory is None:
        return None
    return factory(profile_id)
