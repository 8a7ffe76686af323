"""
Navigation settings — project-level configuration for the navigation graph.

Settings are saved to project_settings/navigation.json.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from trinav import log
from trinav.navmesh.types import NavGraphConfig

SETTINGS_FORMAT_VERSION = "1.0"


@dataclass
class NavigationSettings:
    """Project-level navigation settings."""

    graph: NavGraphConfig = field(default_factory=NavGraphConfig)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "version": SETTINGS_FORMAT_VERSION,
            "graph": self.graph.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict) -> "NavigationSettings":
        """Deserialize from dictionary."""
        version = str(data.get("version", SETTINGS_FORMAT_VERSION))
        if not version.startswith("1."):
            raise ValueError(f"Unsupported navigation settings version: {version}")
        return NavigationSettings(graph=NavGraphConfig.from_dict(data.get("graph", {})))


class NavigationSettingsManager:
    """
    Singleton manager for navigation settings.

    Handles loading/saving settings from project directory.
    """

    _instance: Optional["NavigationSettingsManager"] = None
    _settings: NavigationSettings
    _project_path: Optional[Path] = None

    def __init__(self) -> None:
        self._settings = NavigationSettings()
        self._project_path = None

    @classmethod
    def instance(cls) -> "NavigationSettingsManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = NavigationSettingsManager()
        return cls._instance

    @property
    def settings(self) -> NavigationSettings:
        """Get current navigation settings."""
        return self._settings

    @property
    def config(self) -> NavGraphConfig:
        return self._settings.graph

    def set_project_path(self, path: Path) -> None:
        """Set project path and load settings."""
        self._project_path = Path(path)
        self._load()

    def _get_settings_path(self) -> Optional[Path]:
        """Get path to settings file."""
        if self._project_path is None:
            return None
        return self._project_path / "project_settings" / "navigation.json"

    def _load(self) -> None:
        """Load settings from file. Broken files fall back to defaults."""
        path = self._get_settings_path()
        if path is None or not path.exists():
            self._settings = NavigationSettings()
            return

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = NavigationSettings.from_dict(data)
            log.info(f"[NavigationSettings] Loaded from {path}")
        except (OSError, ValueError, TypeError) as e:
            log.error(e, f"[NavigationSettings] Failed to load settings from {path}")
            self._settings = NavigationSettings()

    def save(self) -> bool:
        """Save settings to file."""
        path = self._get_settings_path()
        if path is None:
            log.error("[NavigationSettings] No project path set, cannot save")
            return False

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            log.info(f"[NavigationSettings] Saved to {path}")
            return True
        except OSError as e:
            log.error(e, f"[NavigationSettings] Failed to save settings to {path}")
            return False

    def update_config(self, config: NavGraphConfig) -> None:
        self._settings.graph = config
