# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Configuration loading for the buffer core.

Settings live in a TOML file (``config.toml`` by default). The file is merged
onto hard-coded defaults so a missing or broken file never prevents the
editor from starting. Editing code never reads the dictionary directly: it
receives an :class:`EditorSettings` snapshot built by a *settings provider*,
a zero-argument callable that the buffer calls before every edit and render.
"""

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import toml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.toml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "tab_size": 4,
        "tab_char": "»",
        "use_spaces": True,
        "indent_width": 4,
        "auto_indent": True,
    },
    # Highlight kind -> color name understood by the presentation layer.
    "colors": {
        "normal": "default",
        "number": "cyan",
        "search_match": "yellow",
        "stringlike": "green",
        "comment": "dark_grey",
    },
    "viewport": {
        "cols": 80,
        "rows": 24,
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
}

SettingsProvider = Callable[[], "EditorSettings"]


def deep_merge(base: Dict[Any, Any], override: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Returns a new dictionary with `override` merged recursively onto `base`.

    Nested dictionaries are merged key by key; any other value from
    `override` replaces the one in `base`. Neither input is modified.

    Example:
        >>> deep_merge({'editor': {'tab_size': 4, 'use_spaces': True}},
        ...            {'editor': {'tab_size': 8}})
        {'editor': {'tab_size': 8, 'use_spaces': True}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads the TOML configuration and merges it onto :data:`DEFAULT_CONFIG`.

    Args:
        config_path (Optional[str]): Path of the TOML file. Defaults to
            ``config.toml`` in the current working directory.

    Returns:
        dict: The merged configuration. Every default section and key is
        guaranteed to be present.

    Notes:
        The function never raises. A missing file, a TOML syntax error or an
        I/O error is logged and the defaults are used instead.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    user_config: Dict[str, Any] = {}

    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as fh:
                user_config = toml.loads(fh.read())
            logger.debug("Loaded user config from %s", path)
        except toml.TomlDecodeError as exc:
            logger.error("TOML parse error in %s: %s - using defaults.", path, exc)
        except OSError as exc:
            logger.error("Could not read %s: %s - using defaults.", path, exc)
    else:
        logger.debug("Config file %s not found - using defaults.", path)

    final_config = deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)

    # A user file may replace a whole section with a scalar; restore it.
    for section, defaults in DEFAULT_CONFIG.items():
        if not isinstance(final_config.get(section), dict):
            logger.warning("Config section [%s] is not a table - using defaults.", section)
            final_config[section] = copy.deepcopy(defaults)

    return final_config


@dataclass(frozen=True)
class EditorSettings:
    """
    Immutable snapshot of the settings consulted by render, edit and scroll
    operations.

    Attributes:
        tab_width (int): Render width of a tab stop, at least 1.
        tab_char (str): Single character drawn at the start of a rendered tab.
        soft_tabs (bool): Insert spaces instead of a tab character.
        indent_width (int): Spaces per indent unit when soft tabs are on.
        auto_indent (bool): Copy indentation when splitting a line.
    """

    tab_width: int = 4
    tab_char: str = "»"
    soft_tabs: bool = True
    indent_width: int = 4
    auto_indent: bool = True

    @property
    def indent_unit(self) -> str:
        return " " * self.indent_width if self.soft_tabs else "\t"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EditorSettings":
        """
        Builds a snapshot from the ``[editor]`` section of a loaded config.
        Out-of-range values are logged and replaced by the defaults.
        """
        editor = config.get("editor", {})
        defaults = cls()

        tab_width = _positive_int(editor.get("tab_size"), defaults.tab_width, "tab_size")
        indent_width = _positive_int(editor.get("indent_width"), defaults.indent_width, "indent_width")

        tab_char = editor.get("tab_char", defaults.tab_char)
        if not isinstance(tab_char, str) or len(tab_char) != 1:
            logger.warning("Invalid tab_char %r in config - using %r.", tab_char, defaults.tab_char)
            tab_char = defaults.tab_char

        return cls(
            tab_width=tab_width,
            tab_char=tab_char,
            soft_tabs=_strict_bool(editor.get("use_spaces"), defaults.soft_tabs, "use_spaces"),
            indent_width=indent_width,
            auto_indent=_strict_bool(editor.get("auto_indent"), defaults.auto_indent, "auto_indent"),
        )


def _positive_int(value: Any, default: int, name: str) -> int:
    if value is None:
        return default
    # bool is an int subclass; "true" is not a width.
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        logger.warning("Invalid %s %r in config - using %d.", name, value, default)
        return default
    return value


def _strict_bool(value: Any, default: bool, name: str) -> bool:
    if value is None:
        return default
    # A quoted "false" would otherwise be truthy.
    if not isinstance(value, bool):
        logger.warning("Invalid %s %r in config - using %s.", name, value, default)
        return default
    return value


def viewport_size(config: Dict[str, Any]) -> Tuple[int, int]:
    """
    Returns the ``(cols, rows)`` viewport from the ``[viewport]`` section,
    used when no terminal size is known (headless use, tests).
    """
    viewport = config.get("viewport", {})
    defaults = DEFAULT_CONFIG["viewport"]
    return (
        _positive_int(viewport.get("cols"), defaults["cols"], "viewport cols"),
        _positive_int(viewport.get("rows"), defaults["rows"], "viewport rows"),
    )


def static_settings_provider(settings: Optional[EditorSettings] = None) -> SettingsProvider:
    """Returns a provider that always hands out the same snapshot."""
    snapshot = settings or EditorSettings()
    return lambda: snapshot


def file_settings_provider(config_path: Optional[str] = None) -> SettingsProvider:
    """
    Returns a provider that re-reads `config_path` on every call, so edits
    to the file apply to the next keystroke without restarting.
    """
    def provider() -> EditorSettings:
        return EditorSettings.from_config(load_config(config_path))

    return provider
