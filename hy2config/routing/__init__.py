from hy2config.routing.acl import acl_pattern, render_acl
from hy2config.routing.lists import RuleListFetcher, import_rules, load_rule_list, parse_rule_list
from hy2config.routing.matcher import matches
from hy2config.routing.presets import PRESETS, get_preset
from hy2config.routing.rules import (
    RoutePolicy,
    RouteRule,
    RuleSet,
    RuleSetValidationResult,
    is_valid_pattern,
    normalize_pattern,
)

__all__ = [
    "PRESETS",
    "RoutePolicy",
    "RouteRule",
    "RuleListFetcher",
    "RuleSet",
    "RuleSetValidationResult",
    "acl_pattern",
    "get_preset",
    "import_rules",
    "is_valid_pattern",
    "load_rule_list",
    "matches",
    "normalize_pattern",
    "parse_rule_list",
    "render_acl",
]
