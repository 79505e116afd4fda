from __future__ import annotations

import ipaddress
import re
import uuid
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from hy2config.db.config import ConfigBase
from hy2config.routing.matcher import SUFFIX_PREFIX, WILDCARD_PREFIX, matches

DOMAIN_PATTERN_RE = re.compile(
    r"[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?(\.[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?)*"
)
TAG_PATTERN_RE = re.compile(r"(geoip|geosite):[A-Za-z0-9_!@.-]+", re.IGNORECASE)


class RoutePolicy(str, Enum):
    """Where traffic for a domain goes."""

    DIRECT = "direct"
    TUNNEL = "tunnel"
    BLOCK = "block"

    @classmethod
    def parse(cls, value: str) -> RoutePolicy:
        """Parse a policy by value or name ("proxy" is accepted for TUNNEL)."""
        value = value.strip().lower()
        if value == "proxy":
            return cls.TUNNEL
        for policy in cls:
            if value in (policy.value, policy.name.lower()):
                return policy
        raise ValueError(f"Unknown route policy: {value!r}")


def _new_id() -> str:
    return str(uuid.uuid4())


def normalize_pattern(pattern: str) -> str:
    """Comparison key for patterns (duplicate and conflict detection)."""
    return pattern.strip().lower()


def is_tag_pattern(pattern: str) -> bool:
    """Check for opaque non-domain tokens: geoip:/geosite: tags and IP/CIDR."""
    if TAG_PATTERN_RE.fullmatch(pattern):
        return True
    try:
        ipaddress.ip_network(pattern, strict=False)
        return True
    except ValueError:
        return False


def is_valid_pattern(pattern: str) -> bool:
    """Validate rule pattern format."""
    if not pattern.strip():
        return False
    if is_tag_pattern(pattern):
        return True

    clean = pattern.removeprefix(WILDCARD_PREFIX).removeprefix(SUFFIX_PREFIX)
    return DOMAIN_PATTERN_RE.fullmatch(clean) is not None


@dataclass(frozen=True)
class RouteRule(ConfigBase):
    """Domain-based routing rule."""

    id: str = field(default_factory=_new_id)
    # example.com, *.example.com, .example.com or geoip:/geosite: tag
    pattern: str = ""
    policy: RoutePolicy = RoutePolicy.TUNNEL
    description: str = ""
    enabled: bool = True

    def matches(self, domain: str) -> bool:
        """Check if domain matches this rule. Disabled rules match nothing."""
        if not self.enabled:
            return False
        return matches(self.pattern, domain)


@dataclass(frozen=True)
class RuleSetValidationResult:
    """Result of rule set validation."""

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def error_message(self) -> str:
        return "\n".join(self.errors)

    @property
    def warning_message(self) -> str:
        return "\n".join(self.warnings)


@dataclass(frozen=True)
class RuleSet(ConfigBase):
    """Routing rules of a connection profile."""

    profile_id: str = ""
    default_policy: RoutePolicy = RoutePolicy.TUNNEL
    rules: tuple[RouteRule, ...] = ()
    enabled: bool = False

    @property
    def enabled_rules(self) -> list[RouteRule]:
        return [rule for rule in self.rules if rule.enabled]

    def rules_with_policy(self, policy: RoutePolicy) -> list[RouteRule]:
        """Enabled rules with the given policy, in list order."""
        return [rule for rule in self.rules if rule.enabled and rule.policy == policy]

    def find_matching_rule(self, domain: str) -> RouteRule | None:
        """First enabled rule matching the domain, in list order."""
        if not self.enabled:
            return None
        for rule in self.rules:
            if rule.matches(domain):
                return rule
        return None

    def effective_policy(self, domain: str) -> RoutePolicy:
        """
        Resolve the policy for a domain.

        A disabled rule set sends everything through the tunnel.
        """
        if not self.enabled:
            return RoutePolicy.TUNNEL
        rule = self.find_matching_rule(domain)
        return rule.policy if rule else self.default_policy

    def validate(self) -> RuleSetValidationResult:
        """
        Validate rules.

        Checks blank and malformed patterns, duplicate patterns (warning) and
        same pattern with different policies (error).
        """
        errors: list[str] = []
        warnings: list[str] = []

        for index, rule in enumerate(self.rules, 1):
            if not rule.enabled:
                continue
            if not rule.pattern.strip():
                errors.append(f"Rule {index}: domain must not be empty")
            elif not is_valid_pattern(rule.pattern):
                errors.append(f"Rule {index}: invalid domain pattern: {rule.pattern}")

        enabled = self.enabled_rules

        counts = Counter(normalize_pattern(rule.pattern) for rule in enabled)
        duplicates = [pattern for pattern, count in counts.items() if count > 1]
        if duplicates:
            warnings.append(f"Duplicate domain rules: {', '.join(duplicates)}")

        for i, first in enumerate(enabled):
            for second in enabled[i + 1:]:
                if (
                    normalize_pattern(first.pattern) == normalize_pattern(second.pattern)
                    and first.policy != second.policy
                ):
                    errors.append(
                        f"Conflicting rules: {first.pattern} is set to both "
                        f"{RoutePolicy(first.policy).name} and {RoutePolicy(second.policy).name}"
                    )

        return RuleSetValidationResult(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    def get_rule(self, rule_id: str) -> RouteRule | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def add_rule(self, rule: RouteRule) -> RuleSet:
        return self.with_changes(rules=(*self.rules, rule))

    def update_rule(self, rule: RouteRule) -> RuleSet:
        """Replace the rule with the same id, keeping its position."""
        return self.with_changes(
            rules=tuple(rule if r.id == rule.id else r for r in self.rules)
        )

    def remove_rule(self, rule_id: str) -> RuleSet:
        return self.with_changes(rules=tuple(r for r in self.rules if r.id != rule_id))

    def merge_rules(self, rules: Iterable[RouteRule]) -> RuleSet:
        """Append rules whose pattern is not present yet."""
        seen = {normalize_pattern(r.pattern) for r in self.rules}
        merged = list(self.rules)
        for rule in rules:
            key = normalize_pattern(rule.pattern)
            if key in seen:
                continue
            seen.add(key)
            merged.append(rule)
        return self.with_changes(rules=tuple(merged))
