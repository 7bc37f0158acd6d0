"""
Configuration management for convbrowse.

This module provides configuration file support with YAML format,
user preferences, and default settings.

Features:
- YAML configuration file at ~/.config/convbrowse/config.yaml
- Default values with user overrides
- Keybinding customization
- Input poll interval, scroll step and scroll reset policy
- Log location override

Architecture:
- ConfigManager: Main configuration interface
- Merges user config with defaults
- Provides typed access to settings
- Handles missing/invalid config gracefully
"""

import curses
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .model import Action

logger = logging.getLogger(__name__)

# Names accepted in keybindings besides single printable characters
SPECIAL_KEYS = {
    "up": curses.KEY_UP,
    "down": curses.KEY_DOWN,
    "left": curses.KEY_LEFT,
    "right": curses.KEY_RIGHT,
    "pgup": curses.KEY_PPAGE,
    "pgdn": curses.KEY_NPAGE,
    "home": curses.KEY_HOME,
    "end": curses.KEY_END,
    "enter": 10,
    "tab": 9,
    "space": 32,
    "esc": 27,
}


@dataclass
class KeyBindings:
    """Customizable key bindings."""
    quit: str = "q"
    up: str = "up"
    down: str = "down"
    page_up: str = "pgup"
    page_down: str = "pgdn"
    scroll_up: str = "k"
    scroll_down: str = "j"
    scroll_left: str = "h"
    scroll_right: str = "l"


@dataclass
class UIConfig:
    """UI-related configuration."""
    poll_interval_ms: int = 100
    scroll_step: int = 10
    reset_scroll_on_navigate: bool = False
    highlight_selection: bool = True


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None  # None for default


@dataclass
class AppConfig:
    """Main application configuration."""
    keybindings: KeyBindings = field(default_factory=KeyBindings)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def key_code(name: str) -> int:
    """Translate a key name from the config file into a curses key code."""
    name = str(name)
    lowered = name.lower()
    if lowered in SPECIAL_KEYS:
        return SPECIAL_KEYS[lowered]
    if len(name) == 1:
        return ord(name)
    raise ValueError(f"Unknown key name: {name!r}")


def build_keymap(bindings: KeyBindings) -> Dict[int, Action]:
    """Map curses key codes to actions. Bad entries are logged and skipped."""
    keymap: Dict[int, Action] = {}
    for action in Action:
        name = getattr(bindings, action.value)
        try:
            code = key_code(name)
        except ValueError as e:
            logger.error(f"Ignoring binding for {action.value}: {e}")
            continue
        if code in keymap:
            logger.warning(f"Key {name!r} bound to both {keymap[code].value} and {action.value}, "
                           f"keeping {keymap[code].value}")
            continue
        keymap[code] = action
    return keymap


def _coerce(current: Any, value: Any) -> Any:
    """Convert a YAML value to the type of the field's current value."""
    if current is None:
        return None if value is None else str(value)
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        raise ValueError(f"expected true or false, got {value!r}")
    if value is None or isinstance(value, (dict, list, bool)):
        raise ValueError(f"expected {type(current).__name__}, got {value!r}")
    return type(current)(value)


class ConfigManager:
    """Configuration manager with YAML file support."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or Path.home() / ".config" / "convbrowse" / "config.yaml"
        self._config: AppConfig = AppConfig()
        self.load_config()

    def load_config(self) -> None:
        """Load configuration from YAML file, keeping defaults if absent."""
        if not self.config_file.exists():
            logger.debug(f"No configuration at {self.config_file}, using defaults")
            self._config = AppConfig()
            return
        try:
            with open(self.config_file, 'r') as f:
                user_config = yaml.safe_load(f) or {}
            if not isinstance(user_config, dict):
                raise ValueError("top level must be a mapping")
            self._config = self._merge_configs(AppConfig(), user_config)
            logger.debug(f"Loaded configuration from {self.config_file}")
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.error(f"Failed to load config: {e}, using defaults")
            self._config = AppConfig()

    def save_config(self) -> None:
        """Save current configuration to YAML file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.dump(asdict(self._config), f, default_flow_style=False, indent=2)
            logger.debug(f"Saved configuration to {self.config_file}")
        except OSError as e:
            logger.error(f"Failed to save config: {e}")

    def get_config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def _merge_configs(self, default: AppConfig, user: Dict[str, Any]) -> AppConfig:
        """Merge user config with defaults."""
        for section in fields(default):
            updates = user.get(section.name)
            if isinstance(updates, dict):
                self._merge_dataclass(getattr(default, section.name), updates)
        return default

    def _merge_dataclass(self, obj: Any, updates: Dict[str, Any]) -> None:
        """Merge updates into dataclass object."""
        for key, value in updates.items():
            if not hasattr(obj, key):
                logger.warning(f"Unknown config key ignored: {key}")
                continue
            try:
                setattr(obj, key, _coerce(getattr(obj, key), value))
            except (TypeError, ValueError) as e:
                logger.error(f"Invalid value for {key}: {e}, keeping {getattr(obj, key)!r}")

    def get_keymap(self) -> Dict[int, Action]:
        return build_keymap(self._config.keybindings)

    def get_log_level(self) -> str:
        """Get configured log level."""
        return str(self._config.logging.level).upper()

    def get_custom_log_path(self) -> Optional[str]:
        """Get custom log file path if configured."""
        return self._config.logging.file_path

    def get_poll_interval(self) -> int:
        """Get input poll interval in milliseconds."""
        return int(self._config.ui.poll_interval_ms)
