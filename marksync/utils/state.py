"""Persistent key/value state kept between runs."""

import json
import logging
from pathlib import Path
from typing import Optional, Dict

from .config import get_state_file

logger = logging.getLogger(__name__)

MARKER_KEY = "database_sha"


class MarkerStore:
    """Tiny JSON-file backed key/value store.

    Only string values are kept; a missing or unreadable file behaves
    like an empty store.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_state_file()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self.path)
