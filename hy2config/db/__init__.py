from hy2config.db.config import ConfigBase
from hy2config.db.profiles import ProfileManager

__all__ = [
    "ConfigBase",
    "ProfileManager",
]
