"""Bookmark data model and the local JSON bookmark store."""

import json
import shutil
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict
from urllib.parse import urlparse

from ..operations.errors import StoreFailure
from ..utils.config import get_bookmarks_file, get_backups_dir


class BookmarkType(str, Enum):
    URL = "url"
    FOLDER = "folder"
    SEPARATOR = "separator"


@dataclass
class Bookmark:
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    type: BookmarkType = BookmarkType.URL
    title: str = ""
    url: str = ""
    parent_id: Optional[str] = None
    position: int = 0
    date_added: str = field(default_factory=lambda: datetime.now().isoformat())
    date_modified: str = field(default_factory=lambda: datetime.now().isoformat())
    children: List["Bookmark"] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "type": self.type.value if isinstance(self.type, BookmarkType) else self.type,
            "title": self.title,
            "url": self.url,
            "parent_id": self.parent_id,
            "position": self.position,
            "date_added": self.date_added,
            "date_modified": self.date_modified,
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Bookmark":
        """Create a Bookmark from a dictionary."""
        children = [cls.from_dict(c) for c in data.get("children", [])]
        btype = data.get("type", "url")
        if isinstance(btype, str):
            btype = BookmarkType(btype)
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            type=btype,
            title=data.get("title", ""),
            url=data.get("url", ""),
            parent_id=data.get("parent_id"),
            position=data.get("position", 0),
            date_added=data.get("date_added", datetime.now().isoformat()),
            date_modified=data.get("date_modified", datetime.now().isoformat()),
            children=children,
        )


def normalize_url(url: str) -> str:
    """Normalize a URL for search comparison."""
    if not url:
        return ""
    parsed = urlparse(url)
    # Lowercase scheme and host
    scheme = parsed.scheme.lower()
    host = parsed.netloc.lower()
    path = parsed.path.rstrip("/")
    # Reconstruct without fragment
    return f"{scheme}://{host}{path}" if host else url


@dataclass
class BookmarkStore:
    """In-memory bookmark tree, persisted as JSON.

    Root folders are the store's containers: they have no parent and are
    addressed by name through ``root_id``.
    """

    version: int = 1
    last_modified: str = field(default_factory=lambda: datetime.now().isoformat())
    roots: Dict[str, Bookmark] = field(default_factory=dict)
    _index: Dict[str, Bookmark] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.roots:
            now = datetime.now().isoformat()
            self.roots = {
                "bookmark_bar": Bookmark(
                    type=BookmarkType.FOLDER,
                    title="Bookmarks Bar",
                    date_added=now,
                    date_modified=now,
                ),
                "other": Bookmark(
                    type=BookmarkType.FOLDER,
                    title="Other Bookmarks",
                    date_added=now,
                    date_modified=now,
                ),
            }
        self._reindex()

    def to_dict(self) -> dict:
        """Convert the store to a JSON-serializable dictionary."""
        return {
            "version": self.version,
            "last_modified": self.last_modified,
            "roots": {k: v.to_dict() for k, v in self.roots.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BookmarkStore":
        """Create a BookmarkStore from a dictionary."""
        roots = {}
        for k, v in data.get("roots", {}).items():
            roots[k] = Bookmark.from_dict(v)
        return cls(
            version=data.get("version", 1),
            last_modified=data.get("last_modified", datetime.now().isoformat()),
            roots=roots,
        )

    def save(self, path: Optional[Path] = None) -> None:
        """Save the store to disk."""
        if path is None:
            path = get_bookmarks_file()
        self.last_modified = datetime.now().isoformat()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "BookmarkStore":
        """Load the store from disk. Returns a new empty store if file doesn't exist."""
        if path is None:
            path = get_bookmarks_file()
        if not path.exists():
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls.from_dict(data)
        except (OSError, ValueError) as e:
            raise StoreFailure(f"Could not load bookmarks from {path}: {e}") from e

    def backup(self, path: Optional[Path] = None) -> Optional[Path]:
        """Create a timestamped copy of the store file, if there is one."""
        src = path or get_bookmarks_file()
        if not src.exists():
            return None
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        dest = get_backups_dir() / f"bookmarks_{timestamp}.json"
        shutil.copy2(src, dest)
        return dest

    def commit(self) -> None:
        """Back up the previous file, then write the store to disk."""
        try:
            self.backup()
            self.save()
        except OSError as e:
            raise StoreFailure(f"Could not save bookmarks: {e}") from e

    # Target primitives

    def root_id(self, name: str) -> str:
        root = self.roots.get(name)
        if root is None:
            raise StoreFailure(f"Unknown root folder: {name}")
        return root.id

    def get_node(self, node_id: str) -> Bookmark:
        node = self.find_by_id(node_id)
        if node is None:
            raise StoreFailure(f"No bookmark with id {node_id}")
        return node

    def search(self, title: Optional[str] = None, url: Optional[str] = None) -> List[Bookmark]:
        """Find bookmarks whose title and/or URL match exactly."""
        target_url = normalize_url(url) if url else None
        results = []
        for bm in self.all_bookmarks():
            if title is not None and bm.title != title:
                continue
            if target_url is not None and normalize_url(bm.url) != target_url:
                continue
            results.append(bm)
        return results

    def create_folder(self, parent_id: str, title: str) -> Bookmark:
        return self._append(Bookmark(type=BookmarkType.FOLDER, title=title), parent_id)

    def create_bookmark(self, parent_id: str, title: str, url: str) -> Bookmark:
        return self._append(Bookmark(type=BookmarkType.URL, title=title, url=url), parent_id)

    def create_separator(self, parent_id: str) -> Bookmark:
        return self._append(Bookmark(type=BookmarkType.SEPARATOR), parent_id)

    def remove_subtree(self, node_id: str) -> None:
        if self.remove(node_id) is None:
            raise StoreFailure(f"No bookmark with id {node_id}")

    def _append(self, bookmark: Bookmark, parent_id: str) -> Bookmark:
        parent = self.find_by_id(parent_id)
        if parent is None or parent.type != BookmarkType.FOLDER:
            raise StoreFailure(f"Parent {parent_id} is not a folder in the store")
        bookmark.parent_id = parent.id
        bookmark.position = len(parent.children)
        parent.children.append(bookmark)
        self._index[bookmark.id] = bookmark
        parent.date_modified = datetime.now().isoformat()
        return bookmark

    def remove(self, bookmark_id: str) -> Optional[Bookmark]:
        """Remove a bookmark by ID. Returns the removed bookmark or None."""
        for root in self.roots.values():
            result = self._remove_from(root, bookmark_id)
            if result:
                return result
        return None

    def _remove_from(self, parent: Bookmark, bookmark_id: str) -> Optional[Bookmark]:
        """Recursively search and remove a bookmark from a parent."""
        for i, child in enumerate(parent.children):
            if child.id == bookmark_id:
                removed = parent.children.pop(i)
                self._unindex(removed)
                # Reindex positions
                for j, c in enumerate(parent.children):
                    c.position = j
                parent.date_modified = datetime.now().isoformat()
                return removed
            result = self._remove_from(child, bookmark_id)
            if result:
                return result
        return None

    def find_by_id(self, bookmark_id: str) -> Optional[Bookmark]:
        """Find a bookmark by its ID."""
        node = self._index.get(bookmark_id)
        if node is None:
            # Children appended outside the primitives are picked up here
            self._reindex()
            node = self._index.get(bookmark_id)
        return node

    def _reindex(self) -> None:
        self._index = {root.id: root for root in self.roots.values()}
        for bm in self.all_bookmarks():
            self._index[bm.id] = bm

    def _unindex(self, bookmark: Bookmark) -> None:
        self._index.pop(bookmark.id, None)
        for child in bookmark.children:
            self._unindex(child)

    def all_bookmarks(self) -> List[Bookmark]:
        """Return a flat list of all bookmarks (excluding root folders)."""
        results = []
        for root in self.roots.values():
            self._collect_all(root, results)
        return results

    def _collect_all(self, parent: Bookmark, results: List[Bookmark]) -> None:
        for child in parent.children:
            results.append(child)
            self._collect_all(child, results)
