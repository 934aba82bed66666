"""Firefox bookmark target writing straight into places.sqlite."""

import logging
import shutil
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from ..models.bookmark import Bookmark, BookmarkType
from ..utils.config import get_backups_dir
from .browser_detect import get_firefox_places_path, is_browser_running, FIREFOX_PROCESS_NAMES
from .errors import StoreFailure

logger = logging.getLogger(__name__)

# Firefox bookmark type constants
_MOZ_TYPE_BOOKMARK = 1
_MOZ_TYPE_FOLDER = 2
_MOZ_TYPE_SEPARATOR = 3

# Firefox root folder IDs
_MOZ_ROOT_ID = 1
_MOZ_MENU_ID = 2         # Bookmarks Menu
_MOZ_TOOLBAR_ID = 3      # Bookmarks Toolbar
_MOZ_TAGS_ID = 4
_MOZ_UNFILED_ID = 5      # Other Bookmarks
_MOZ_MOBILE_ID = 6       # Mobile Bookmarks

_CONTAINER_IDS = {_MOZ_ROOT_ID, _MOZ_MENU_ID, _MOZ_TOOLBAR_ID, _MOZ_TAGS_ID,
                  _MOZ_UNFILED_ID, _MOZ_MOBILE_ID}

ROOT_NAMES = {
    "menu": _MOZ_MENU_ID,
    "toolbar": _MOZ_TOOLBAR_ID,
    "unfiled": _MOZ_UNFILED_ID,
    "other": _MOZ_UNFILED_ID,
    "mobile": _MOZ_MOBILE_ID,
}

_TYPE_MAP = {
    _MOZ_TYPE_BOOKMARK: BookmarkType.URL,
    _MOZ_TYPE_FOLDER: BookmarkType.FOLDER,
    _MOZ_TYPE_SEPARATOR: BookmarkType.SEPARATOR,
}

_NODE_QUERY = """
    SELECT b.id, b.type, b.title, b.parent, b.position,
           b.dateAdded, b.lastModified, p.url
    FROM moz_bookmarks b
    LEFT JOIN moz_places p ON b.fk = p.id
"""


def _firefox_time_to_iso(moz_time: int) -> str:
    """Convert Firefox's microsecond timestamp to ISO 8601."""
    try:
        if not moz_time:
            return datetime.now().isoformat()
        dt = datetime.fromtimestamp(moz_time / 1000000, tz=timezone.utc)
        return dt.isoformat()
    except (ValueError, OSError):
        return datetime.now().isoformat()


def _now_firefox_time() -> int:
    return int(datetime.now(tz=timezone.utc).timestamp() * 1000000)


def _reverse_host(url: str) -> str:
    """Create Firefox-style reversed host string."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    if host:
        return "." + ".".join(reversed(host.split("."))) + "."
    return ""


def _backup_places(places_path: Path) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = get_backups_dir() / f"firefox_places_{timestamp}.sqlite"
    shutil.copy2(places_path, backup_path)
    return backup_path


class FirefoxPlacesTarget:
    """Bookmark target backed by a Firefox places.sqlite database.

    Every primitive commits on its own, so a failed import leaves the
    nodes created so far in place and ``commit`` has nothing left to do
    but flush. Firefox must be closed while writing.
    """

    def __init__(self, places_path: Path):
        self.places_path = places_path
        try:
            self._conn = sqlite3.connect(str(places_path))
        except sqlite3.Error as e:
            raise StoreFailure(f"Could not open {places_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row

    @classmethod
    def open(cls, places_path: Optional[Path] = None, backup: bool = True) -> "FirefoxPlacesTarget":
        """Open the default (or given) profile's places.sqlite for writing."""
        if is_browser_running(FIREFOX_PROCESS_NAMES):
            raise StoreFailure("Firefox is running; close it before importing bookmarks")

        if places_path is None:
            places_path = get_firefox_places_path()
        if places_path is None or not places_path.exists():
            raise StoreFailure("Could not find a Firefox places.sqlite")

        if backup:
            logger.info("Backed up %s to %s", places_path, _backup_places(places_path))
        return cls(places_path)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _to_bookmark(self, row: sqlite3.Row) -> Bookmark:
        parent = row["parent"]
        is_container = row["id"] in _CONTAINER_IDS or not parent
        return Bookmark(
            id=str(row["id"]),
            type=_TYPE_MAP.get(row["type"], BookmarkType.URL),
            title=row["title"] or "",
            url=row["url"] or "",
            parent_id=None if is_container else str(parent),
            position=row["position"] or 0,
            date_added=_firefox_time_to_iso(row["dateAdded"] or 0),
            date_modified=_firefox_time_to_iso(row["lastModified"] or 0),
        )

    def root_id(self, name: str) -> str:
        if name not in ROOT_NAMES:
            raise StoreFailure(f"Unknown Firefox root folder: {name}")
        return str(ROOT_NAMES[name])

    def search(self, title: Optional[str] = None, url: Optional[str] = None) -> List[Bookmark]:
        # Tag folders live under the tags root and are not bookmarks
        clauses = [
            "b.id != ?",
            "b.parent != ?",
            "b.parent NOT IN (SELECT id FROM moz_bookmarks WHERE parent = ?)",
        ]
        params = [_MOZ_TAGS_ID, _MOZ_TAGS_ID, _MOZ_TAGS_ID]
        if title is not None:
            clauses.append("b.title = ?")
            params.append(title)
        if url is not None:
            clauses.append("p.url = ?")
            params.append(url)
        where = f" WHERE {' AND '.join(clauses)}"
        try:
            rows = self._conn.execute(_NODE_QUERY + where + " ORDER BY b.parent, b.position",
                                      params).fetchall()
        except sqlite3.Error as e:
            raise StoreFailure(f"Bookmark search failed: {e}") from e
        return [self._to_bookmark(row) for row in rows]

    def get_node(self, node_id: str) -> Bookmark:
        try:
            row = self._conn.execute(_NODE_QUERY + " WHERE b.id = ?", (int(node_id),)).fetchone()
        except (sqlite3.Error, ValueError) as e:
            raise StoreFailure(f"Could not read bookmark {node_id}: {e}") from e
        if row is None:
            raise StoreFailure(f"No bookmark with id {node_id}")
        return self._to_bookmark(row)

    def _ensure_place(self, url: str) -> int:
        """Insert URL into moz_places if not exists, return place ID."""
        row = self._conn.execute("SELECT id FROM moz_places WHERE url = ?", (url,)).fetchone()
        if row:
            return row[0]
        cursor = self._conn.execute(
            "INSERT INTO moz_places (url, title, rev_host, visit_count, hidden, typed, frecency, last_visit_date) "
            "VALUES (?, '', ?, 0, 0, 0, -1, NULL)",
            (url, _reverse_host(url)),
        )
        return cursor.lastrowid

    def _insert(self, node_type: int, parent_id: str, title: Optional[str],
                url: Optional[str] = None) -> Bookmark:
        now = _now_firefox_time()
        try:
            with self._conn:
                parent = self._conn.execute(
                    "SELECT type FROM moz_bookmarks WHERE id = ?", (int(parent_id),)
                ).fetchone()
                if parent is None or parent["type"] != _MOZ_TYPE_FOLDER:
                    raise StoreFailure(f"Parent {parent_id} is not a folder")
                position = self._conn.execute(
                    "SELECT COUNT(*) FROM moz_bookmarks WHERE parent = ?", (int(parent_id),)
                ).fetchone()[0]
                place_id = self._ensure_place(url) if url is not None else None
                cursor = self._conn.execute(
                    "INSERT INTO moz_bookmarks (type, fk, parent, position, title, dateAdded, lastModified) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (node_type, place_id, int(parent_id), position, title, now, now),
                )
                self._conn.execute(
                    "UPDATE moz_bookmarks SET lastModified = ? WHERE id = ?", (now, int(parent_id)),
                )
        except (sqlite3.Error, ValueError) as e:
            raise StoreFailure(f"Could not create bookmark under {parent_id}: {e}") from e

        return Bookmark(
            id=str(cursor.lastrowid),
            type=_TYPE_MAP[node_type],
            title=title or "",
            url=url or "",
            parent_id=str(parent_id),
            position=position,
            date_added=_firefox_time_to_iso(now),
            date_modified=_firefox_time_to_iso(now),
        )

    def create_folder(self, parent_id: str, title: str) -> Bookmark:
        return self._insert(_MOZ_TYPE_FOLDER, parent_id, title)

    def create_bookmark(self, parent_id: str, title: str, url: str) -> Bookmark:
        return self._insert(_MOZ_TYPE_BOOKMARK, parent_id, title, url)

    def create_separator(self, parent_id: str) -> Bookmark:
        return self._insert(_MOZ_TYPE_SEPARATOR, parent_id, None)

    def remove_subtree(self, node_id: str) -> None:
        node = self.get_node(node_id)
        if node.parent_id is None:
            raise StoreFailure(f"Refusing to remove root folder {node_id}")
        try:
            with self._conn:
                self._conn.execute("""
                    WITH RECURSIVE subtree(id) AS (
                        SELECT ?
                        UNION ALL
                        SELECT b.id FROM moz_bookmarks b JOIN subtree s ON b.parent = s.id
                    )
                    DELETE FROM moz_bookmarks WHERE id IN (SELECT id FROM subtree)
                """, (int(node_id),))
                # Close the gap left in the parent's positions
                self._conn.execute(
                    "UPDATE moz_bookmarks SET position = position - 1 WHERE parent = ? AND position > ?",
                    (int(node.parent_id), node.position),
                )
        except sqlite3.Error as e:
            raise StoreFailure(f"Could not remove bookmark {node_id}: {e}") from e

    def commit(self) -> None:
        try:
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreFailure(f"Could not commit {self.places_path}: {e}") from e
