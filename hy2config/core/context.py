from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from hy2config.core.config import (
    ACL_FILE_NAME,
    CONFIG_DIR,
    PROFILES_DIR_NAME,
    TUNNEL_CONFIG_FILE_NAME,
)

if TYPE_CHECKING:
    from hy2config.db.profiles import ProfileManager
    from hy2config.fmt.profile import ConnectionProfile

logger = logging.getLogger("hy2config.context")


class AppContext:
    """
    Central application context.
    Holds the profile manager and knows where tunnel files are written.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = config_dir or CONFIG_DIR
        self._profiles: Optional['ProfileManager'] = None

        self._config_dir.mkdir(parents=True, exist_ok=True)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def tunnel_config_file(self) -> Path:
        """Config file read by the tunnel client."""
        return self._config_dir / TUNNEL_CONFIG_FILE_NAME

    @property
    def acl_file(self) -> Path:
        return self._config_dir / ACL_FILE_NAME

    @property
    def profiles(self) -> 'ProfileManager':
        """Profile manager (lazy loading)."""
        if self._profiles is None:
            from hy2config.db.profiles import ProfileManager
            self._profiles = ProfileManager(self._config_dir / PROFILES_DIR_NAME)
            self._profiles.load()
        return self._profiles

    @property
    def active_profile(self) -> 'ConnectionProfile':
        """Active profile, created with defaults on first use."""
        return self.profiles.ensure_default()

    def write_tunnel_config(self, profile: 'ConnectionProfile') -> tuple[bool, list[str]]:
        """
        Validate and render a profile, then write the tunnel files.

        Returns:
            (success, errors)
        """
        from hy2config.fmt.renderer import render_acl_fragment, render_config
        from hy2config.fmt.validator import validate_profile

        result = validate_profile(profile)
        if not result.is_valid:
            logger.warning("Profile %s is invalid: %s", profile.id, "; ".join(result.errors))
            return False, list(result.errors)

        config_text = render_config(profile)
        acl_text = render_acl_fragment(profile)
        try:
            self.tunnel_config_file.write_text(config_text, encoding="utf-8")
            self.acl_file.write_text(acl_text, encoding="utf-8")
        except OSError as e:
            logger.error("Error writing tunnel config: %s", e)
            return False, [str(e)]

        logger.info("Tunnel config written to %s", self.tunnel_config_file)
        return True, []

    def save_profiles(self) -> bool:
        if self._profiles is None:
            return False
        return self._profiles.save()

    def save_all(self) -> bool:
        """Save everything."""
        return self.save_profiles()


_context: Optional[AppContext] = None


def get_context() -> AppContext:
    """
    Get global application context.
    Creates context with default settings if not initialized.
    """
    global _context
    if _context is None:
        _context = AppContext()
    return _context


def init_context(config_dir: Optional[Path] = None) -> AppContext:
    """
    Initialize global context.
    Should be called once at application startup.
    """
    global _context
    _context = AppContext(config_dir=config_dir)
    return _context


def reset_context() -> None:
    """Reset context (for tests)."""
    global _context
    _context = None
