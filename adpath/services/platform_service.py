"""Platform Service - Per-user file locations."""

import os
import sys
from pathlib import Path
from typing import Optional

from ..constants import PATHS


class PlatformService:
    """Service for platform-specific paths."""

    @staticmethod
    def is_windows() -> bool:
        """Check if running on Windows."""
        return sys.platform == "win32"

    @classmethod
    def get_config_dir(cls) -> Path:
        """Get the configuration directory path.

        Returns:
            - Windows: %APPDATA%\\adpath
            - macOS/Linux: ~/.config/adpath
        """
        if cls.is_windows():
            base = os.environ.get("APPDATA")
            if base:
                return Path(base) / "adpath"
            return Path.home() / "AppData" / "Roaming" / "adpath"
        else:
            xdg_config = os.environ.get("XDG_CONFIG_HOME")
            if xdg_config:
                return Path(xdg_config) / "adpath"
            return Path.home() / ".config" / "adpath"

    @classmethod
    def get_last_user_file(cls) -> Path:
        return cls.get_config_dir() / PATHS['LAST_USER_FILE']

    @classmethod
    def read_last_user(cls) -> Optional[str]:
        """Return the last username saved, if any."""
        path = cls.get_last_user_file()
        if not path.exists():
            return None
        user = path.read_text(encoding="utf-8").strip()
        return user or None

    @classmethod
    def save_last_user(cls, username: str) -> None:
        path = cls.get_last_user_file()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(username, encoding="utf-8")
