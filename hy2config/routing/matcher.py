from __future__ import annotations

WILDCARD_PREFIX = "*."
SUFFIX_PREFIX = "."


def matches(pattern: str, domain: str) -> bool:
    """
    Check if a domain matches a rule pattern.

    Supported forms (case-insensitive):
    - ``example.com``: exact match
    - ``*.example.com``: ``example.com`` itself and any subdomain of it
    - ``.example.com``: any domain ending with ``.example.com``

    Anything else never matches.
    """
    pattern = pattern.lower()
    domain = domain.lower()

    if pattern == domain:
        return True

    if pattern.startswith(WILDCARD_PREFIX):
        base = pattern[len(WILDCARD_PREFIX):]
        return domain == base or domain.endswith("." + base)

    # Plain string suffix, no label boundary check.
    if pattern.startswith(SUFFIX_PREFIX):
        return domain.endswith(pattern)

    return False
