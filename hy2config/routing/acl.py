from __future__ import annotations

import logging

from hy2config.routing.matcher import WILDCARD_PREFIX
from hy2config.routing.rules import RoutePolicy, RuleSet

logger = logging.getLogger("hy2config.acl")

ALL = "all"


def acl_pattern(pattern: str) -> str:
    """ACL form of a pattern: ``*.example.com`` becomes ``suffix:example.com``."""
    if pattern.startswith(WILDCARD_PREFIX):
        return f"suffix:{pattern[len(WILDCARD_PREFIX):]}"
    return pattern


def reject(pattern: str) -> str:
    return f"reject({pattern})"


def direct(pattern: str) -> str:
    return f"direct({pattern})"


def render_acl(rule_set: RuleSet, log: logging.Logger | None = None) -> str:
    """
    Generate the ACL fragment for the tunnel client.

    The client proxies everything that matches no ACL line, and the ACL has
    only ``reject`` and ``direct`` outbounds. TUNNEL rules are therefore
    expressed by emitting nothing for them, and must not be shadowed by a
    ``direct`` line for the same pattern or by ``direct(all)``.

    Order: reject lines, direct lines, catch-all for the default policy.
    Returns an empty string when the rule set is disabled.
    """
    log = log or logger
    if not rule_set.enabled:
        return ""

    proxy_patterns = {
        acl_pattern(rule.pattern) for rule in rule_set.rules_with_policy(RoutePolicy.TUNNEL)
    }
    log.debug("ACL proxy patterns: %s", sorted(proxy_patterns))

    lines: list[str] = []

    for rule in rule_set.rules_with_policy(RoutePolicy.BLOCK):
        lines.append(reject(acl_pattern(rule.pattern)))

    for rule in rule_set.rules_with_policy(RoutePolicy.DIRECT):
        pattern = acl_pattern(rule.pattern)
        if pattern in proxy_patterns:
            log.debug("Skipping direct(%s): pattern is proxied", pattern)
            continue
        lines.append(direct(pattern))

    default = rule_set.default_policy
    if default == RoutePolicy.DIRECT:
        if proxy_patterns:
            log.debug("Not adding direct(all): proxy patterns present")
        else:
            lines.append(direct(ALL))
    elif default == RoutePolicy.BLOCK:
        lines.append(reject(ALL))

    log.debug("Generated %d ACL lines", len(lines))
    return "".join(f"{line}\n" for line in lines)
