from __future__ import annotations

import os
from pathlib import Path


def _get_config_dir() -> Path:
    """Get configuration directory.

    Environment variable HY2CONFIG_CONFIG_DIR takes priority, otherwise
    $XDG_CONFIG_HOME/hy2config (~/.config/hy2config).
    """
    env_dir = os.environ.get("HY2CONFIG_CONFIG_DIR")
    if env_dir:
        return Path(env_dir)

    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "hy2config"


CONFIG_DIR: Path = _get_config_dir()
PROFILES_DIR_NAME: str = "profiles"

# Files read by the tunnel client
TUNNEL_CONFIG_FILE_NAME: str = "config.yaml"
ACL_FILE_NAME: str = "acl.txt"

LOG_DIR: Path = CONFIG_DIR / "logs"
CLI_LOG_FILE: Path = LOG_DIR / "hy2config_cli.log"

LOG_DIR.mkdir(parents=True, exist_ok=True)
CONFIG_DIR.mkdir(parents=True, exist_ok=True)
