"""Settings: YAML value sets, pydantic schema and JSON persistence."""

from .schema import DrawLoops, PhysicsConfig, Settings
from .store import SettingsStore

__all__ = ["DrawLoops", "PhysicsConfig", "Settings", "SettingsStore"]
