"""Shared fixtures for marksync tests."""

import json

import pytest

from marksync.models.bookmark import BookmarkStore
from marksync.operations.errors import FetchUnavailable


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Redirect config dir to a temp directory for all tests."""
    config_dir = tmp_path / ".marksync"
    config_dir.mkdir()
    monkeypatch.setattr(
        "marksync.utils.config.get_config_dir",
        lambda: config_dir,
    )
    return config_dir


@pytest.fixture
def qapp():
    from PyQt6.QtCore import QCoreApplication
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


class FakeSource:
    """Stands in for RemoteSource with canned responses."""

    def __init__(self, marker="abc", document=None, marker_error=False, document_error=False):
        self.marker = marker
        self.document = document
        self.marker_error = marker_error
        self.document_error = document_error
        self.document_fetches = 0

    def fetch_marker(self):
        if self.marker_error:
            raise FetchUnavailable("version check returned HTTP 503")
        return self.marker

    def fetch_document(self):
        self.document_fetches += 1
        if self.document_error:
            raise FetchUnavailable("document returned HTTP 404")
        return self.document


class MemoryMarkers:
    def __init__(self, initial=None):
        self.data = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class RecordingStore(BookmarkStore):
    """BookmarkStore that records every primitive call."""

    def __post_init__(self):
        super().__post_init__()
        self.calls = []

    def create_folder(self, parent_id, title):
        self.calls.append(("create_folder", parent_id, title))
        return super().create_folder(parent_id, title)

    def create_bookmark(self, parent_id, title, url):
        self.calls.append(("create_bookmark", parent_id, title, url))
        return super().create_bookmark(parent_id, title, url)

    def create_separator(self, parent_id):
        self.calls.append(("create_separator", parent_id))
        return super().create_separator(parent_id)

    def remove_subtree(self, node_id):
        self.calls.append(("remove_subtree", node_id))
        return super().remove_subtree(node_id)

    def search(self, title=None, url=None):
        self.calls.append(("search", title, url))
        return super().search(title=title, url=url)


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def sample_rows():
    """The example export: A holds a link and a separator, B is A's sibling."""
    return [
        ["FOLDER", 0, "Bookmarks Toolbar"],
        ["FOLDER", 1, "Illegal Services"],
        ["FOLDER", 2, "A"],
        ["LINK", 3, "http://x", "X"],
        ["HR", 3],
        ["FOLDER", 2, "B"],
    ]


@pytest.fixture
def sample_document(sample_rows):
    return json.dumps(sample_rows)
