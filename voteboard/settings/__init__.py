"""Engine settings loading."""

from .app import EngineSettings, get_settings


__all__ = ["EngineSettings", "get_settings"]
