"""Configuration management for marksync.

Stores configuration in ~/.marksync/config.toml
"""

from pathlib import Path
from typing import Optional, Dict, Any

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for older Python

DEFAULT_SOURCE = {
    "marker_url": (
        "https://api.github.com/repos/Illegal-Services/IS.Bookmarks/commits"
        "?path=IS.bookmarks.json&sha=extra&per_page=1"
    ),
    "document_url": (
        "https://raw.githubusercontent.com/Illegal-Services/IS.Bookmarks/extra/IS.bookmarks.json"
    ),
    "timeout": 30,
}

DEFAULT_TARGET = {
    "kind": "store",
    "root": "bookmark_bar",
    "folder_title": "Illegal Services",
    "places_path": "",
}

DEFAULT_SCHEDULE = {
    "interval_hours": 0,
}

DEFAULT_LOGGING = {
    "level": "INFO",
}


def get_config_dir() -> Path:
    """Get the marksync configuration directory."""
    config_dir = Path.home() / ".marksync"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.toml"


def get_state_file() -> Path:
    """Get the path to the persisted state (last imported version marker)."""
    return get_config_dir() / "state.json"


def get_bookmarks_file() -> Path:
    """Get the path to the local bookmarks store."""
    return get_config_dir() / "bookmarks.json"


def get_backups_dir() -> Path:
    """Get the path to the backups directory."""
    backups_dir = get_config_dir() / "backups"
    backups_dir.mkdir(parents=True, exist_ok=True)
    return backups_dir


def get_logs_dir() -> Path:
    logs_dir = get_config_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def load_config() -> Dict[str, Any]:
    """Load configuration from the config file."""
    config_file = get_config_file()
    if not config_file.exists():
        return {}

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


def save_config(config: Dict[str, Any]) -> Optional[str]:
    """Save configuration to the config file.

    Returns:
        Error message or None if successful.
    """
    config_file = get_config_file()

    try:
        lines = []
        # Bare keys must come before any table header
        for key, value in config.items():
            if not isinstance(value, dict):
                lines.append(f"{key} = {_format_value(value)}")
        for section, values in config.items():
            if isinstance(values, dict):
                if lines:
                    lines.append("")
                lines.append(f"[{section}]")
                for key, value in values.items():
                    lines.append(f"{key} = {_format_value(value)}")

        with open(config_file, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

        return None
    except OSError as e:
        return f"Error saving config: {e}"


def _section(name: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(defaults)
    merged.update(load_config().get(name, {}))
    return merged


def get_source_config() -> Dict[str, Any]:
    """Get remote source settings (marker and document URLs)."""
    return _section("source", DEFAULT_SOURCE)


def get_target_config() -> Dict[str, Any]:
    """Get bookmark target settings."""
    return _section("target", DEFAULT_TARGET)


def set_target_config(settings: Dict[str, Any]) -> Optional[str]:
    """Set bookmark target settings."""
    config = load_config()
    config["target"] = settings
    return save_config(config)


def get_schedule_config() -> Dict[str, Any]:
    return _section("schedule", DEFAULT_SCHEDULE)


def get_logging_config() -> Dict[str, Any]:
    return _section("logging", DEFAULT_LOGGING)


def create_default_config() -> None:
    """Create a default configuration file if it doesn't exist."""
    config_file = get_config_file()
    if config_file.exists():
        return

    default_config = {
        "source": dict(DEFAULT_SOURCE),
        "target": dict(DEFAULT_TARGET),
        "schedule": dict(DEFAULT_SCHEDULE),
        "logging": dict(DEFAULT_LOGGING),
    }
    save_config(default_config)
