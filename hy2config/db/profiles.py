from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hy2config.fmt.profile import ConnectionProfile

logger = logging.getLogger("hy2config.profiles")


def _get_profile_class() -> type[ConnectionProfile]:
    """Lazy loading of the profile class to avoid circular imports."""
    from hy2config.fmt.profile import ConnectionProfile

    return ConnectionProfile


class ProfileManager:
    """
    Connection profiles and the active profile.

    Profiles are immutable; edits replace the stored value (last writer wins).
    """

    def __init__(self, profiles_dir: Path | None = None):
        self._profiles_dir = profiles_dir or Path.home() / ".config" / "hy2config" / "profiles"
        self._profiles: dict[str, ConnectionProfile] = {}
        self._active_id: str = ""

    @property
    def profiles(self) -> dict[str, ConnectionProfile]:
        """All profiles."""
        return self._profiles

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def active_profile(self) -> ConnectionProfile | None:
        return self._profiles.get(self._active_id)

    def get_profile(self, profile_id: str) -> ConnectionProfile | None:
        return self._profiles.get(profile_id)

    def find_profile(self, key: str) -> ConnectionProfile | None:
        """Find profile by id, id prefix, 1-based list index or name."""
        if key in self._profiles:
            return self._profiles[key]

        listed = self.list_profiles()
        if key.isdigit() and 1 <= int(key) <= len(listed):
            return listed[int(key) - 1]

        by_prefix = [p for p in listed if p.id.startswith(key)]
        if len(by_prefix) == 1:
            return by_prefix[0]

        for profile in listed:
            if profile.name == key:
                return profile
        return None

    def list_profiles(self) -> list[ConnectionProfile]:
        """Profiles sorted by name."""
        return sorted(self._profiles.values(), key=lambda p: (p.name.lower(), p.id))

    def add_profile(self, profile: ConnectionProfile) -> ConnectionProfile:
        """Store a profile. The first profile becomes active."""
        self._profiles[profile.id] = profile
        if not self._active_id:
            self._active_id = profile.id
        return profile

    def create_profile(self, **fields: Any) -> ConnectionProfile:
        """Create a profile with default settings and the given overrides."""
        return self.add_profile(_get_profile_class().create_default(**fields))

    def ensure_default(self) -> ConnectionProfile:
        """Return the active profile, creating a default one on first use."""
        if not self._profiles:
            logger.info("No profiles found, creating default profile")
            return self.create_profile()
        if self._active_id not in self._profiles:
            self._active_id = self.list_profiles()[0].id
        return self._profiles[self._active_id]

    def update_profile(self, profile: ConnectionProfile) -> bool:
        """Replace a stored profile by id."""
        if profile.id not in self._profiles:
            return False
        self._profiles[profile.id] = profile
        return True

    def duplicate_profile(self, profile_id: str) -> ConnectionProfile | None:
        """Duplicate a profile and make the copy active."""
        source = self._profiles.get(profile_id)
        if source is None:
            return None
        copy = source.duplicate()
        self._profiles[copy.id] = copy
        self._active_id = copy.id
        return copy

    def select(self, profile_id: str) -> bool:
        """Make a profile active."""
        if profile_id not in self._profiles:
            return False
        self._active_id = profile_id
        return True

    def can_remove(self, profile_id: str) -> bool:
        """The only profile and the active profile cannot be removed."""
        return (
            profile_id in self._profiles
            and len(self._profiles) > 1
            and profile_id != self._active_id
        )

    def remove_profile(self, profile_id: str) -> bool:
        if not self.can_remove(profile_id):
            return False
        del self._profiles[profile_id]
        return True

    def load(self) -> bool:
        """Load profiles and the active id."""
        try:
            meta_file = self._profiles_dir / "meta.json"
            if meta_file.exists():
                meta = json.loads(meta_file.read_text(encoding="utf-8"))
                self._active_id = meta.get("active_id", "")

            profiles_file = self._profiles_dir / "profiles.json"
            if profiles_file.exists():
                profiles_data = json.loads(profiles_file.read_text(encoding="utf-8"))
                for pdata in profiles_data:
                    profile = _get_profile_class().from_dict(pdata)
                    self._profiles[profile.id] = profile

            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error("Error loading profiles: %s", e)
            return False

    def save(self) -> bool:
        """Save profiles and the active id."""
        try:
            self._profiles_dir.mkdir(parents=True, exist_ok=True)

            meta = {"active_id": self._active_id}
            meta_file = self._profiles_dir / "meta.json"
            meta_file.write_text(json.dumps(meta, indent=2), encoding="utf-8")

            profiles_data = [p.to_dict() for p in self._profiles.values()]
            profiles_file = self._profiles_dir / "profiles.json"
            profiles_file.write_text(
                json.dumps(profiles_data, indent=2, ensure_ascii=False), encoding="utf-8"
            )

            return True
        except OSError as e:
            logger.error("Error saving profiles: %s", e)
            return False
