"""Engine configuration."""
from .settings import EngineSettings, SettingsError, load_settings

__all__ = ["EngineSettings", "SettingsError", "load_settings"]
