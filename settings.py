"""
settings.py

Persistent settings management for ErdCanvas.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/erdcanvas/settings.toml
    - macOS: ~/Library/Application Support/erdcanvas/settings.toml
    - Linux: ~/.config/erdcanvas/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "erdcanvas"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        min_scale: 0.2
        max_scale: 3.0
        wheel_sensitivity: 0.001
        button_step: 0.2
        fit_max_scale: 1.2
        fit_padding: 100.0
    """
    min_scale: float = 0.2            # Default: 0.2
    max_scale: float = 3.0            # Default: 3.0
    wheel_sensitivity: float = 0.001  # Default: 0.001 scale per wheel delta unit
    button_step: float = 0.2          # Default: 0.2 per zoom button click
    fit_max_scale: float = 1.2        # Default: 1.2 (fit never magnifies beyond this)
    fit_padding: float = 100.0        # Default: 100.0 world units around content


@dataclass
class CanvasSettings:
    """All canvas-related settings.

    Defaults:
        grid_spacing: 24.0
        edge_style: "curve"
        show_minimap: True
    """
    grid_spacing: float = 24.0   # Default: 24.0 pixels at scale 1
    edge_style: str = "curve"    # Default: "curve" (curve | straight)
    show_minimap: bool = True    # Default: True
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Layout Settings
# =============================================================================

@dataclass
class LayoutSettings:
    """Force-directed auto-layout parameters.

    Defaults:
        iterations: 100
        repulsion: 500000.0
        repulsion_step: 0.1
        spring_length: 250.0
        spring_strength: 0.05
        gravity: 0.005
        center_x: 500.0
        center_y: 400.0
        animate: False
        steps_per_tick: 10
    """
    iterations: int = 100             # Default: 100 (always run in full)
    repulsion: float = 500000.0       # Default: 500000.0 (Coulomb constant)
    repulsion_step: float = 0.1       # Default: 0.1
    spring_length: float = 250.0      # Default: 250.0 world units
    spring_strength: float = 0.05     # Default: 0.05
    gravity: float = 0.005            # Default: 0.005 of the way to center per iteration
    center_x: float = 500.0           # Default: 500.0
    center_y: float = 400.0           # Default: 400.0
    animate: bool = False             # Default: False (run synchronously)
    steps_per_tick: int = 10          # Default: 10 iterations per timer tick


# =============================================================================
# History Settings
# =============================================================================

@dataclass
class HistorySettings:
    """Undo/redo history settings.

    Defaults:
        limit: 20
    """
    limit: int = 20  # Default: 20 snapshots


# =============================================================================
# Export Settings
# =============================================================================

@dataclass
class ExportSettings:
    """Image export settings.

    Defaults:
        margin: 50.0
        scale: 2.0
        file_prefix: "erd_diagram"
        format: "png"
    """
    margin: float = 50.0             # Default: 50.0 world units around content
    scale: float = 2.0               # Default: 2.0 (supersampling factor)
    file_prefix: str = "erd_diagram" # Default: "erd_diagram"
    format: str = "png"              # Default: "png"


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        theme: The UI theme name (must match a key in styles.STYLES).
        export_dir: Directory exported images are written to (empty = ~/Downloads).
        canvas: Canvas-related settings.
        layout: Auto-layout parameters.
        history: Undo/redo settings.
        export: Image export settings.
    """
    # UI Settings
    theme: str = "Light"  # Default: "Light"

    # Export target directory (empty = ~/Downloads)
    export_dir: str = ""

    # Nested settings categories
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    export: ExportSettings = field(default_factory=ExportSettings)


def _merge_section(target: Any, data: Dict[str, Any]) -> None:
    """Copy known keys from a TOML table onto a settings dataclass in place.

    Nested dataclasses recurse into sub-tables; unknown keys and values of
    the wrong type are ignored so a hand-edited file cannot break startup.
    """
    for f in fields(target):
        if f.name not in data:
            continue
        current = getattr(target, f.name)
        value = data[f.name]
        if is_dataclass(current):
            if isinstance(value, dict):
                _merge_section(current, value)
            continue
        if isinstance(current, bool):
            if isinstance(value, bool):
                setattr(target, f.name, value)
        elif isinstance(current, float):
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(target, f.name, float(value))
        elif isinstance(current, int):
            if isinstance(value, int) and not isinstance(value, bool):
                setattr(target, f.name, value)
        elif isinstance(value, type(current)):
            setattr(target, f.name, value)


def _section_to_dict(section: Any) -> Dict[str, Any]:
    """Convert a settings dataclass into a TOML-compatible nested dict."""
    out: Dict[str, Any] = {}
    for f in fields(section):
        value = getattr(section, f.name)
        out[f.name] = _section_to_dict(value) if is_dataclass(value) else value
    return out


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Explicit directory override (used by tests).
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        if settings_dir is None:
            settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            # If file is corrupted or unreadable, return defaults
            return AppSettings()

        return self._parse_toml(data)

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        if isinstance(general, dict):
            if isinstance(general.get("theme"), str):
                settings.theme = general["theme"]
            if isinstance(general.get("export_dir"), str):
                settings.export_dir = general["export_dir"]

        for name in ("canvas", "layout", "history", "export"):
            section = data.get(name)
            if isinstance(section, dict):
                _merge_section(getattr(settings, name), section)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "theme": s.theme,
                "export_dir": s.export_dir,
            },
            "canvas": _section_to_dict(s.canvas),
            "layout": _section_to_dict(s.layout),
            "history": _section_to_dict(s.history),
            "export": _section_to_dict(s.export),
        }

    def get_export_dir(self) -> Path:
        """Get the resolved export directory path.

        Returns:
            Path to the export directory. Falls back to ~/Downloads
            if export_dir setting is empty.
        """
        if self.settings.export_dir:
            return Path(self.settings.export_dir)
        return Path.home() / "Downloads"

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
