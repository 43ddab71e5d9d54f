"""Configuration of default mirror locations and git timeouts"""

import configparser
import logging
import os
import platform
from typing import Optional, Any

from pathlib import Path

APP_NAME = "branchmirror"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

default_cfg = {
    "mirror": {"root": "./git-clone", "timeout": "600"},
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path(f"~/Library/Application Support/{APP_NAME}").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file() -> Path:
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A read-only, dict-like accessor for configuration files.

    Missing sections or keys are handled gracefully by returning a default.

    Usage:
        config = ConfigAccessor()
        value = config.get('mirror', 'root', default='./git-clone')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default


# Create a global config accessor instance
config = ConfigAccessor()


def get_mirror_root() -> Path:
    """
    Get the configured directory under which repositories are mirrored.

    Returns:
        Path to the mirror root (defaults to ./git-clone)
    """
    root = config.get("mirror", "root", default_cfg["mirror"]["root"])
    return Path(root).expanduser()


def get_git_timeout() -> Optional[float]:
    """
    Get the configured timeout in seconds for a single git command.

    Returns:
        Timeout in seconds, or None when disabled (configured as 0)
    """
    raw = config.get("mirror", "timeout", default_cfg["mirror"]["timeout"])
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(
            f"Invalid timeout '{raw}' in {config.config_path}, "
            f"using {default_cfg['mirror']['timeout']}s"
        )
        timeout = float(default_cfg["mirror"]["timeout"])
    return timeout if timeout > 0 else None
