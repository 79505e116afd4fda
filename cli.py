#!/usr/bin/env python3
import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import requests

from hy2config import __app_name__, __version__
from hy2config.core import AppContext, init_context
from hy2config.core.config import CLI_LOG_FILE
from hy2config.core.logging_utils import setup_logging
from hy2config.fmt import ConnectionProfile, render_acl_fragment, render_config, validate_profile
from hy2config.routing import (
    PRESETS,
    RoutePolicy,
    RouteRule,
    RuleListFetcher,
    RuleSet,
    get_preset,
    import_rules,
)
from hy2config.routing.presets import create_default

logger = logging.getLogger("hy2config.cli")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _resolve_profile(context: AppContext, key: str | None) -> ConnectionProfile | None:
    """Profile by id, index, id prefix or name; the active profile when key is empty."""
    if not key:
        return context.active_profile

    profile = context.profiles.find_profile(key)
    if profile is None:
        print(f"[ERROR] Profile not found: {key}")
    return profile


def _rule_set(profile: ConnectionProfile) -> RuleSet:
    return profile.route_rules or create_default(profile.id)


def _store(context: AppContext, profile: ConnectionProfile) -> None:
    context.profiles.update_profile(profile)
    context.profiles.save()


def _parse_policy(value: str) -> RoutePolicy | None:
    try:
        return RoutePolicy.parse(value)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return None


def _coerce_field(profile: ConnectionProfile, name: str, raw: str) -> object:
    """Convert a command line value to the type of the profile field."""
    current = getattr(profile, name)
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected a boolean, got {raw!r}")
    if isinstance(current, int):
        return int(raw)
    return raw


def cmd_list(args: argparse.Namespace) -> int:
    """Show the list of profiles."""
    context = init_context()
    context.profiles.ensure_default()
    context.profiles.save()

    print("Profiles:")
    print()
    for i, profile in enumerate(context.profiles.list_profiles(), 1):
        marker = "*" if profile.id == context.profiles.active_id else " "
        rules = profile.route_rules
        rules_state = f"{len(rules.rules)} rules, {'on' if rules.enabled else 'off'}" if rules else "no rules"
        print(f" {marker}{i}. [ID: {profile.id[:8]}] {profile.display_name}")
        print(f"      {profile.server or '(no server)'} | {rules_state}")

    return 0


def cmd_new(args: argparse.Namespace) -> int:
    """Create a profile with default settings."""
    context = init_context()

    fields = {"server": args.server or "", "auth": args.auth or ""}
    if args.name:
        fields["name"] = args.name
    profile = context.profiles.create_profile(**fields)
    if args.use:
        context.profiles.select(profile.id)
    context.profiles.save()

    print(f"[OK] Profile created: {profile.display_name} (ID: {profile.id})")
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    """Change profile fields: key=value pairs."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    field_names = {f.name for f in dataclasses.fields(ConnectionProfile)} - {"id", "route_rules"}
    changes = {}
    for assignment in args.assignments:
        name, sep, raw = assignment.partition("=")
        if not sep or name not in field_names:
            print(f"[ERROR] Unknown field or bad assignment: {assignment}")
            print(f"Fields: {', '.join(sorted(field_names))}")
            return 1
        try:
            changes[name] = _coerce_field(profile, name, raw)
        except ValueError as e:
            print(f"[ERROR] {name}: {e}")
            return 1

    profile = profile.with_changes(**changes)
    _store(context, profile)

    print(f"[OK] Profile updated: {profile.display_name}")
    for warning in validate_profile(profile).errors:
        print(f"[WARN] {warning}")
    return 0


def cmd_duplicate(args: argparse.Namespace) -> int:
    """Duplicate a profile."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    copy = context.profiles.duplicate_profile(profile.id)
    context.profiles.save()

    print(f"[OK] Profile duplicated: {copy.display_name} (ID: {copy.id})")
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    """Remove profile."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    if not context.profiles.remove_profile(profile.id):
        print("[ERROR] Cannot remove the active or the only profile")
        return 1

    context.profiles.save()
    print(f"[OK] Profile removed: {profile.display_name} (ID: {profile.id})")
    return 0


def cmd_use(args: argparse.Namespace) -> int:
    """Make a profile active."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    context.profiles.select(profile.id)
    context.profiles.save()
    print(f"[OK] Active profile: {profile.display_name}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a profile and its route rules."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    result = validate_profile(profile)
    for error in result.errors:
        print(f"[ERROR] {error}")

    rules_ok = True
    if profile.route_rules is not None:
        rules_result = profile.route_rules.validate()
        rules_ok = rules_result.is_valid
        for error in rules_result.errors:
            print(f"[ERROR] {error}")
        for warning in rules_result.warnings:
            print(f"[WARN] {warning}")

    if result.is_valid and rules_ok:
        print(f"[OK] Profile is valid: {profile.display_name}")
        return 0
    return 1


def cmd_generate(args: argparse.Namespace) -> int:
    """Render the tunnel client configuration."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    if args.write:
        ok, errors = context.write_tunnel_config(profile)
        for error in errors:
            print(f"[ERROR] {error}")
        if ok:
            print(f"[OK] Configuration saved to: {context.tunnel_config_file}")
            print(f"[OK] ACL saved to: {context.acl_file}")
        return 0 if ok else 1

    config_text = render_config(profile)
    if args.output:
        try:
            Path(args.output).write_text(config_text, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", args.output, e)
            print(f"[ERROR] Failed to save configuration: {e}")
            return 1
        print(f"[OK] Configuration saved to: {args.output}")
    else:
        print(config_text, end="")
    return 0


def cmd_acl(args: argparse.Namespace) -> int:
    """Print the ACL fragment of a profile."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    print(render_acl_fragment(profile), end="")
    return 0


def cmd_route(args: argparse.Namespace) -> int:
    """Show where traffic for a domain goes."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    rule_set = _rule_set(profile)
    policy = rule_set.effective_policy(args.domain)
    rule = rule_set.find_matching_rule(args.domain)
    reason = f"rule {rule.pattern}" if rule else ("default" if rule_set.enabled else "rules disabled")
    print(f"{args.domain}: {policy.name} ({reason})")
    return 0


def cmd_rules(args: argparse.Namespace) -> int:
    """List route rules of a profile."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    rule_set = _rule_set(profile)
    state = "enabled" if rule_set.enabled else "disabled"
    print(f"Route rules for {profile.display_name} ({state}, default: {rule_set.default_policy.name})")
    print()
    for i, rule in enumerate(rule_set.rules, 1):
        mark = "x" if rule.enabled else " "
        print(f"  {i}. [{mark}] [ID: {rule.id[:8]}] {rule.policy.name:<6} {rule.pattern}")
        if rule.description:
            print(f"         {rule.description}")

    result = rule_set.validate()
    print()
    for error in result.errors:
        print(f"[ERROR] {error}")
    for warning in result.warnings:
        print(f"[WARN] {warning}")
    return 0 if result.is_valid else 1


def _find_rule(rule_set: RuleSet, key: str) -> RouteRule | None:
    matches = [r for r in rule_set.rules if r.id.startswith(key)]
    if len(matches) == 1:
        return matches[0]
    print(f"[ERROR] Rule not found: {key}")
    return None


def cmd_rule_add(args: argparse.Namespace) -> int:
    """Add a route rule."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1
    policy = _parse_policy(args.policy)
    if policy is None:
        return 1

    rule = RouteRule(
        pattern=args.pattern,
        policy=policy,
        description=args.description or "",
        enabled=not args.disabled,
    )
    profile = profile.with_route_rules(_rule_set(profile).add_rule(rule))
    _store(context, profile)

    print(f"[OK] Rule added: {rule.policy.name} {rule.pattern} (ID: {rule.id})")
    return 0


def cmd_rule_remove(args: argparse.Namespace) -> int:
    """Remove a route rule."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    rule_set = _rule_set(profile)
    rule = _find_rule(rule_set, args.rule_id)
    if not rule:
        return 1

    _store(context, profile.with_route_rules(rule_set.remove_rule(rule.id)))
    print(f"[OK] Rule removed: {rule.pattern}")
    return 0


def cmd_rule_toggle(args: argparse.Namespace) -> int:
    """Enable or disable a route rule."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    rule_set = _rule_set(profile)
    rule = _find_rule(rule_set, args.rule_id)
    if not rule:
        return 1

    rule = rule.with_changes(enabled=not rule.enabled)
    _store(context, profile.with_route_rules(rule_set.update_rule(rule)))
    print(f"[OK] Rule {rule.pattern} {'enabled' if rule.enabled else 'disabled'}")
    return 0


def _set_rules_enabled(args: argparse.Namespace, enabled: bool) -> int:
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    _store(context, profile.with_route_rules(_rule_set(profile).with_changes(enabled=enabled)))
    print(f"[OK] Route rules {'enabled' if enabled else 'disabled'} for {profile.display_name}")
    return 0


def cmd_rules_on(args: argparse.Namespace) -> int:
    return _set_rules_enabled(args, True)


def cmd_rules_off(args: argparse.Namespace) -> int:
    return _set_rules_enabled(args, False)


def cmd_rules_default(args: argparse.Namespace) -> int:
    """Set the policy for domains matching no rule."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1
    policy = _parse_policy(args.policy)
    if policy is None:
        return 1

    _store(context, profile.with_route_rules(_rule_set(profile).with_changes(default_policy=policy)))
    print(f"[OK] Default policy: {policy.name}")
    return 0


def cmd_rules_preset(args: argparse.Namespace) -> int:
    """Replace route rules with a preset."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1

    rule_set = get_preset(args.name, profile.id)
    if rule_set is None:
        print(f"[ERROR] Unknown preset: {args.name}")
        print(f"Presets: {', '.join(PRESETS)}")
        return 1

    _store(context, profile.with_route_rules(rule_set))
    print(f"[OK] Preset {args.name} applied ({len(rule_set.rules)} rules)")
    return 0


def cmd_rules_import(args: argparse.Namespace) -> int:
    """Import rules from a domain list file or URL."""
    context = init_context()
    profile = _resolve_profile(context, args.profile)
    if not profile:
        return 1
    policy = _parse_policy(args.policy)
    if policy is None:
        return 1

    try:
        rules = import_rules(args.source, policy, RuleListFetcher(insecure=args.insecure))
    except (requests.RequestException, OSError, ValueError) as e:
        logger.error("Rule import from %s failed: %s", args.source, e)
        print(f"[ERROR] Import failed: {e}")
        return 1

    rule_set = _rule_set(profile)
    merged = rule_set.merge_rules(rules)
    added = len(merged.rules) - len(rule_set.rules)
    _store(context, profile.with_route_rules(merged))

    print(f"[OK] Imported {added} of {len(rules)} rules as {policy.name}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"{__app_name__} {__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='hy2config - Hysteria 2 client profiles and route rules',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Examples:\n'
               '  %(prog)s new --name home --server example.com:443 --auth secret\n'
               '  %(prog)s set -p home bandwidth_up=50 obfs_enabled=true obfs_password=x\n'
               '  %(prog)s rule-add "*.example.cn" --policy direct\n'
               '  %(prog)s route www.example.cn\n'
               '  %(prog)s gen --write',
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    def with_profile(sub: argparse.ArgumentParser) -> argparse.ArgumentParser:
        sub.add_argument('-p', '--profile', help='Profile id, number, id prefix or name (default: active)')
        return sub

    subparsers.add_parser('ls', help='Show profiles')

    new_parser = subparsers.add_parser('new', help='Create profile')
    new_parser.add_argument('--name', help='Profile name')
    new_parser.add_argument('--server', help='host:port or host:port1-port2')
    new_parser.add_argument('--auth', help='Password or username:password')
    new_parser.add_argument('--use', action='store_true', help='Make the new profile active')

    set_parser = with_profile(subparsers.add_parser('set', help='Change profile fields'))
    set_parser.add_argument('assignments', nargs='+', help='field=value')

    dup_parser = subparsers.add_parser('dup', help='Duplicate profile')
    dup_parser.add_argument('profile', help='Profile to duplicate')

    rm_parser = subparsers.add_parser('rm', help='Remove profile')
    rm_parser.add_argument('profile', help='Profile to remove')

    use_parser = subparsers.add_parser('use', help='Make profile active')
    use_parser.add_argument('profile', help='Profile to activate')

    with_profile(subparsers.add_parser('validate', help='Validate profile and rules'))

    gen_parser = with_profile(subparsers.add_parser('gen', help='Render tunnel configuration'))
    gen_parser.add_argument('-o', '--output', help='File to save the configuration to')
    gen_parser.add_argument('--write', action='store_true', help='Validate and write config and ACL files')

    with_profile(subparsers.add_parser('acl', help='Print ACL fragment'))

    route_parser = with_profile(subparsers.add_parser('route', help='Resolve policy for a domain'))
    route_parser.add_argument('domain', help='Domain to check')

    with_profile(subparsers.add_parser('rules', help='List route rules'))

    rule_add_parser = with_profile(subparsers.add_parser('rule-add', help='Add route rule'))
    rule_add_parser.add_argument('pattern', help='example.com, *.example.com, .example.com or geoip:xx')
    rule_add_parser.add_argument('--policy', default='tunnel', help='direct, tunnel or block')
    rule_add_parser.add_argument('--description', help='Rule description')
    rule_add_parser.add_argument('--disabled', action='store_true', help='Add the rule disabled')

    rule_rm_parser = with_profile(subparsers.add_parser('rule-rm', help='Remove route rule'))
    rule_rm_parser.add_argument('rule_id', help='Rule id or id prefix')

    rule_toggle_parser = with_profile(subparsers.add_parser('rule-toggle', help='Enable/disable route rule'))
    rule_toggle_parser.add_argument('rule_id', help='Rule id or id prefix')

    with_profile(subparsers.add_parser('rules-on', help='Enable route rules'))
    with_profile(subparsers.add_parser('rules-off', help='Disable route rules'))

    default_parser = with_profile(subparsers.add_parser('rules-default', help='Set default policy'))
    default_parser.add_argument('policy', help='direct, tunnel or block')

    preset_parser = with_profile(subparsers.add_parser('rules-preset', help='Apply rule preset'))
    preset_parser.add_argument('name', choices=sorted(PRESETS), help='Preset name')

    import_parser = with_profile(subparsers.add_parser('rules-import', help='Import domain list'))
    import_parser.add_argument('source', help='File path or http(s) URL')
    import_parser.add_argument('--policy', default='direct', help='direct, tunnel or block')
    import_parser.add_argument('--insecure', action='store_true', help='Skip TLS verification for URLs')

    subparsers.add_parser('ver', help='Show version')

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    setup_logging(CLI_LOG_FILE, level=logging.INFO, console=False)
    logger.info("Starting %s CLI, log file: %s", __app_name__, CLI_LOG_FILE)

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        'ls': cmd_list,
        'new': cmd_new,
        'set': cmd_set,
        'dup': cmd_duplicate,
        'rm': cmd_remove,
        'use': cmd_use,
        'validate': cmd_validate,
        'gen': cmd_generate,
        'acl': cmd_acl,
        'route': cmd_route,
        'rules': cmd_rules,
        'rule-add': cmd_rule_add,
        'rule-rm': cmd_rule_remove,
        'rule-toggle': cmd_rule_toggle,
        'rules-on': cmd_rules_on,
        'rules-off': cmd_rules_off,
        'rules-default': cmd_rules_default,
        'rules-preset': cmd_rules_preset,
        'rules-import': cmd_rules_import,
        'ver': cmd_version,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
