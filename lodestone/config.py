"""User configuration for lodestone"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .errors import LodestoneError

DEFAULT_USER_AGENT = f"lodestone/{__version__} (github.com/lodestone-mc/lodestone)"


@dataclass
class Settings:
    """Network and file settings, loaded from ~/.lodestone/config.json"""

    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30
    chunk_size: int = 1024
    lockfile_name: str = "lodestone.lock"
    modrinth_url: str = "https://api.modrinth.com/v2"
    hangar_url: str = "https://hangar.papermc.io/api/v1"

    @staticmethod
    def config_path() -> Path:
        """Location of the user config file, overridable by LODESTONE_CONFIG"""
        env_path = os.environ.get("LODESTONE_CONFIG")
        if env_path:
            return Path(env_path)
        return Path.home() / ".lodestone" / "config.json"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """
        Loads settings, falling back to defaults when no file exists

        Args:
            path: Explicit config file (defaults to config_path())

        Returns:
            Settings with any known keys from the file applied
        """
        config_file = path or cls.config_path()
        if not config_file.exists():
            return cls()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LodestoneError(f"could not read config file {config_file}: {e}")

        if not isinstance(data, dict):
            raise LodestoneError(f"config file {config_file} must contain a JSON object")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def default_server_dir() -> Path:
    """Server directory used when none is given explicitly"""
    env_dir = os.environ.get("LODESTONE_HOME")
    if env_dir:
        return Path(env_dir)
    return Path.cwd()
