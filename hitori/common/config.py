"""Shared configuration and data locations.

Config file: ~/.config/hitori/config.yaml (override with HITORI_CONFIG)

Example config:
```yaml
data_dir: null
cloud_provider: google
sync_folders:
  google: ~/Google Drive/hitori
  apple: ~/Library/Mobile Documents/com~apple~CloudDocs/hitori
debug: false
```
"""

import copy
import json
import os
import stat
import sys
from pathlib import Path
from typing import Any

import yaml


# Project identifiers, used to derive the per-OS data directory
APP_QUALIFIER = "com"
APP_ORGANIZATION = "hitori"
APP_NAME = "app"

DB_FILENAME = "hitori.db"
LOG_FILENAME = "hitori.log"

CONFIG_DIR = Path.home() / ".config" / "hitori"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

PROVIDERS = ("none", "google", "apple")

DEFAULTS = {
    "data_dir": None,
    "cloud_provider": "none",
    "sync_folders": {
        "google": "~/Google Drive/hitori",
        "apple": "~/Library/Mobile Documents/com~apple~CloudDocs/hitori",
    },
    "debug": False,
}


def get_config_file() -> Path:
    """Path of the YAML config file."""
    override = os.environ.get("HITORI_CONFIG")
    if override:
        return Path(override).expanduser()
    return CONFIG_FILE


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load config from file merged over defaults. Falls back to defaults."""
    path = get_config_file()
    if not path.exists():
        return copy.deepcopy(DEFAULTS)

    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return copy.deepcopy(DEFAULTS)

    if not isinstance(config, dict):
        return copy.deepcopy(DEFAULTS)
    return _merge(DEFAULTS, config)


def save_config(config: dict[str, Any]) -> Path:
    """Save config to file."""
    path = get_config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, allow_unicode=True)
    return path


def init_default_config() -> Path:
    """Write the default config file if none exists."""
    path = get_config_file()
    if not path.exists():
        save_config(copy.deepcopy(DEFAULTS))
    return path


def set_config_value(key: str, value: Any) -> dict[str, Any]:
    """Set a top-level or dotted (``sync_folders.google``) key and save."""
    config = load_config()
    target = config
    *parents, leaf = key.split(".")
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value
    save_config(config)
    return config


def default_data_dir(platform: str | None = None) -> Path:
    """Per-OS application data directory for hitori."""
    platform = platform or sys.platform
    if platform == "darwin":
        return (
            Path.home() / "Library" / "Application Support"
            / f"{APP_QUALIFIER}.{APP_ORGANIZATION}.{APP_NAME}"
        )
    if platform.startswith("win"):
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(appdata) / APP_ORGANIZATION / APP_NAME / "data"

    xdg_data = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return base / APP_NAME


def get_data_dir(config: dict[str, Any] | None = None) -> Path:
    """Data directory: HITORI_DATA_DIR, then config ``data_dir``, then the OS default."""
    override = os.environ.get("HITORI_DATA_DIR")
    if override:
        return Path(override).expanduser()

    config = config if config is not None else load_config()
    if config.get("data_dir"):
        return Path(config["data_dir"]).expanduser()
    return default_data_dir()


def get_db_path(config: dict[str, Any] | None = None) -> Path:
    """Path of the posts database file."""
    return get_data_dir(config) / DB_FILENAME


def get_log_path(config: dict[str, Any] | None = None) -> Path:
    """Path of the application log file."""
    return get_data_dir(config) / LOG_FILENAME


def ensure_dir(path: Path) -> None:
    """Create directory with owner-only permissions if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    os.chmod(path, stat.S_IRWXU)


def save_json(path: Path, data: dict[str, Any]) -> None:
    """Write JSON to file, owner read/write only."""
    ensure_dir(path.parent)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
