"""Viewer settings - grid spacing, hit tolerance and default placement, persisted as JSON."""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from layout.placement import PlacementStrategy

logger = logging.getLogger(__name__)

MIN_GRID_SPACING = 10
MAX_GRID_SPACING = 150

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ViewerSettings:
    """User-tunable viewer settings.

    hit_tolerance of None means one fifth of the grid spacing.
    """

    grid_spacing: int = 40
    hit_tolerance: Optional[int] = None
    placement: str = PlacementStrategy.LINEAR.value
    log_level: str = "WARNING"

    def __post_init__(self):
        self.grid_spacing = max(MIN_GRID_SPACING, min(MAX_GRID_SPACING, int(self.grid_spacing)))
        if self.hit_tolerance is not None:
            self.hit_tolerance = int(self.hit_tolerance)
            if self.hit_tolerance < 0:
                raise ValueError(f"hit_tolerance must not be negative, got {self.hit_tolerance}")
        # validates the name
        self.placement = PlacementStrategy.from_name(self.placement).value
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level {self.log_level!r}")

    @property
    def effective_hit_tolerance(self) -> int:
        if self.hit_tolerance is None:
            return self.grid_spacing // 5
        return self.hit_tolerance

    @property
    def placement_strategy(self) -> PlacementStrategy:
        return PlacementStrategy(self.placement)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ViewerSettings":
        """Build settings from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class SettingsManager:
    """Loads and saves ViewerSettings from a user-writable JSON file."""

    def __init__(self, settings_file: Optional[Path] = None):
        if settings_file is None:
            settings_file = self._default_settings_path()
        self._settings_file = Path(settings_file)
        self.settings = self.load()

    @staticmethod
    def _default_settings_path() -> Path:
        """Return the default path for the settings file."""
        return Path.home() / ".netlist-viewer" / "settings.json"

    @property
    def path(self) -> Path:
        return self._settings_file

    def load(self) -> ViewerSettings:
        """Read settings from disk; missing or unreadable files give the defaults."""
        if not self._settings_file.exists():
            return ViewerSettings()
        try:
            data = json.loads(self._settings_file.read_text())
            if not isinstance(data, dict):
                raise ValueError("settings file does not hold a JSON object")
            return ViewerSettings.from_dict(data)
        except (json.JSONDecodeError, OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to load settings from %s: %s", self._settings_file, e)
            return ViewerSettings()

    def save(self) -> None:
        """Write the current settings to disk."""
        try:
            self._settings_file.parent.mkdir(parents=True, exist_ok=True)
            self._settings_file.write_text(json.dumps(self.settings.to_dict(), indent=2))
        except OSError as e:
            logger.error("Failed to save settings to %s: %s", self._settings_file, e)

    def update(self, **changes) -> ViewerSettings:
        """Apply *changes*, validate them and save.

        Raises:
            ValueError: On an unknown setting name or an invalid value.
        """
        data = self.settings.to_dict()
        for key in changes:
            if key not in data:
                raise ValueError(f"Unknown setting {key!r}")
        data.update(changes)
        self.settings = ViewerSettings.from_dict(data)
        self.save()
        return self.settings
