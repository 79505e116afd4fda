from __future__ import annotations

import logging
from pathlib import Path

import requests

from hy2config import __app_name__, __version__
from hy2config.routing.rules import RoutePolicy, RouteRule

logger = logging.getLogger("hy2config.lists")

DEFAULT_USER_AGENT = f"{__app_name__}/{__version__}"


def parse_rule_list(content: str, policy: RoutePolicy, description: str = "") -> list[RouteRule]:
    """
    Parse a domain list into rules.

    One entry per line, comma separated entries are split. Empty lines and
    lines starting with ``#`` are skipped.
    """
    rules = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        for entry in line.split(","):
            entry = entry.strip()
            if entry:
                rules.append(RouteRule(pattern=entry, policy=policy, description=description))
    return rules


def load_rule_list(filepath: Path | str, policy: RoutePolicy, description: str = "") -> list[RouteRule]:
    """Load rules from a local list file. A missing file gives no rules."""
    path = Path(filepath)
    if not path.exists():
        logger.warning("Rule list %s does not exist", path)
        return []

    content = path.read_text(encoding="utf-8")
    return parse_rule_list(content, policy, description or path.name)


class RuleListFetcher:
    """Downloads remote domain lists."""

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, insecure: bool = False, timeout: int = 30):
        self._user_agent = user_agent
        self._insecure = insecure
        self._timeout = timeout

    def fetch(self, url: str) -> str:
        """Fetch list content. Raises requests.RequestException on failure."""
        headers = {}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        response = requests.get(url, headers=headers, timeout=self._timeout, verify=not self._insecure)
        response.raise_for_status()

        logger.info("Fetched rule list from %s (%d bytes)", url, len(response.text))
        return response.text

    def fetch_rules(self, url: str, policy: RoutePolicy, description: str = "") -> list[RouteRule]:
        content = self.fetch(url)
        return parse_rule_list(content, policy, description or url)


def import_rules(source: str, policy: RoutePolicy, fetcher: RuleListFetcher | None = None) -> list[RouteRule]:
    """
    Load rules from a URL or a local file path.

    Args:
        source: http(s) URL or file path
        policy: Policy for every imported rule
        fetcher: Fetcher used for URLs
    """
    if source.startswith(("http://", "https://")):
        fetcher = fetcher or RuleListFetcher()
        return fetcher.fetch_rules(source, policy)
    return load_rule_list(source, policy)
