"""Browser detection - Firefox profile lookup and running processes."""

import configparser
import os
import platform
from pathlib import Path
from typing import List, Optional

import psutil

FIREFOX_PROCESS_NAMES = ["firefox", "firefox.exe", "firefox-esr"]


def _get_firefox_profiles_ini() -> Optional[Path]:
    system = platform.system()
    if system == "Linux":
        return Path.home() / ".mozilla" / "firefox" / "profiles.ini"
    elif system == "Windows":
        appdata = os.environ.get("APPDATA", "")
        return Path(appdata) / "Mozilla" / "Firefox" / "profiles.ini"
    elif system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Firefox" / "profiles.ini"
    return None


def _get_firefox_default_profile() -> Optional[Path]:
    """Find the default Firefox profile directory."""
    profiles_ini = _get_firefox_profiles_ini()
    if profiles_ini is None or not profiles_ini.exists():
        return None

    config = configparser.ConfigParser()
    config.read(profiles_ini)

    # Look for default profile
    for section in config.sections():
        if not section.startswith("Profile") and not section.startswith("Install"):
            continue
        is_default = section.startswith("Install") or (
            config.has_option(section, "Default") and config.get(section, "Default") == "1"
        )
        if not is_default:
            continue
        option = "Default" if section.startswith("Install") else "Path"
        if not config.has_option(section, option):
            continue
        profile_path = config.get(section, option)
        is_relative = section.startswith("Install") or (
            config.has_option(section, "IsRelative") and config.get(section, "IsRelative") == "1"
        )
        if is_relative:
            return profiles_ini.parent / profile_path
        return Path(profile_path)

    # Fallback: look for any profile with places.sqlite
    base = profiles_ini.parent
    for candidate in (base, base / "Profiles"):
        if not candidate.exists():
            continue
        for entry in candidate.iterdir():
            if entry.is_dir() and (entry / "places.sqlite").exists():
                return entry
    return None


def get_firefox_places_path() -> Optional[Path]:
    """Get the places.sqlite path of the default Firefox profile."""
    profile = _get_firefox_default_profile()
    if profile and (profile / "places.sqlite").exists():
        return profile / "places.sqlite"
    return None


def is_browser_running(process_names: List[str]) -> bool:
    """Check if any process matching the given names is running."""
    wanted = [p.lower() for p in process_names]
    for proc in psutil.process_iter(["name"]):
        try:
            name = proc.info["name"]
            if name and name.lower() in wanted:
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return False
