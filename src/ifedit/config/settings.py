"""Engine settings loaded from YAML."""
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from ..interfaces.schema import DEFAULT_FAMILY

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "IFEDIT_CONFIG"


class SettingsError(Exception):
    """Settings file is unreadable or holds bad values."""
    pass


@dataclass
class EngineSettings:
    """Tunables for parsing and rendering interfaces files.

    Example ifedit.yaml:

    ```yaml
    indent: "  "
    default_family: inet
    extra_hook_keys:
      - wpa-conf
    ```
    """
    indent: str = "    "
    default_family: str = DEFAULT_FAMILY
    extra_hook_keys: list[str] = field(default_factory=list)
    encoding: str = "utf-8"

    def __post_init__(self):
        if not isinstance(self.indent, str) or not self.indent or self.indent.strip():
            raise SettingsError(f"indent must be non-empty whitespace, got {self.indent!r}")
        if not isinstance(self.default_family, str) or not self.default_family.strip():
            raise SettingsError("default_family must be a non-empty string")
        if isinstance(self.extra_hook_keys, str):
            self.extra_hook_keys = [self.extra_hook_keys]
        self.extra_hook_keys = [str(k) for k in self.extra_hook_keys or []]

    @classmethod
    def from_dict(cls, data: dict) -> "EngineSettings":
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                logger.warning(f"Ignoring unknown setting: {key}")
        return cls(**{k: v for k, v in data.items() if k in known})


def find_settings_file() -> Optional[Path]:
    """Find ifedit.yaml, or None if there isn't one."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    search_paths = [
        Path.cwd() / "ifedit.yaml",
        Path.home() / ".config" / "ifedit" / "ifedit.yaml",
        Path("/etc/ifedit/ifedit.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_settings(path: Optional[str] = None) -> EngineSettings:
    """
    Load engine settings.

    Args:
        path: Explicit settings file. When omitted, $IFEDIT_CONFIG and the
            standard locations are searched; no file means defaults.

    Raises:
        SettingsError: If the file can't be read or parsed
    """
    settings_path = Path(path) if path else find_settings_file()
    if settings_path is None:
        return EngineSettings()

    try:
        with open(settings_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise SettingsError(f"Cannot read settings {settings_path}: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Settings in {settings_path} must be a mapping")

    logger.debug(f"Loaded settings from {settings_path}")
    return EngineSettings.from_dict(data)
