"""Tests for the import pipeline."""

import json
import logging
from unittest.mock import patch

from conftest import FakeSource, MemoryMarkers

from marksync.models.bookmark import BookmarkType
from marksync.operations.errors import StoreFailure
from marksync.operations.gate import TriggerKind
from marksync.operations.importer import ImportResult, TreeImporter
from marksync.utils.state import MARKER_KEY

FOLDER_TITLE = "Illegal Services"


def _importer(store, source, markers=None, notifier=None):
    return TreeImporter(
        source=source,
        target=store,
        markers=markers if markers is not None else MemoryMarkers(),
        root_id=store.root_id("bookmark_bar"),
        folder_title=FOLDER_TITLE,
        notifier=notifier,
    )


def _snapshot(node):
    return (node.type.value, node.title, node.url, [_snapshot(c) for c in node.children])


class TestTreeImporter:
    def test_first_run_builds_tree(self, recording_store, sample_document):
        markers = MemoryMarkers()
        result = _importer(recording_store, FakeSource("abc", sample_document), markers).run(
            TriggerKind.INSTALL)

        assert result == ImportResult.REBUILT
        assert markers.get(MARKER_KEY) == "abc"
        bar = recording_store.roots["bookmark_bar"]
        assert [c.title for c in bar.children] == [FOLDER_TITLE]
        imported = bar.children[0]
        assert [c.title for c in imported.children] == ["A", "B"]
        assert [c.type for c in imported.children[0].children] == [
            BookmarkType.URL, BookmarkType.SEPARATOR,
        ]

    def test_rebuild_is_idempotent(self, recording_store, sample_document):
        markers = MemoryMarkers()
        source = FakeSource("abc", sample_document)
        _importer(recording_store, source, markers).run(TriggerKind.INSTALL)
        first = [_snapshot(c) for c in recording_store.roots["bookmark_bar"].children]

        result = _importer(recording_store, source, markers).run(TriggerKind.MANUAL)
        second = [_snapshot(c) for c in recording_store.roots["bookmark_bar"].children]

        assert result == ImportResult.REBUILT
        assert len(recording_store.search(title=FOLDER_TITLE)) == 1
        assert first == second

    def test_startup_with_same_marker_skips(self, recording_store, sample_document):
        source = FakeSource("abc", sample_document)
        markers = MemoryMarkers({MARKER_KEY: "abc"})
        result = _importer(recording_store, source, markers).run(TriggerKind.STARTUP)

        assert result == ImportResult.UNCHANGED
        assert source.document_fetches == 0
        assert recording_store.calls == []

    def test_startup_with_new_marker_rebuilds(self, recording_store, sample_document):
        markers = MemoryMarkers({MARKER_KEY: "old"})
        result = _importer(recording_store, FakeSource("new", sample_document), markers).run(
            TriggerKind.STARTUP)

        assert result == ImportResult.REBUILT
        assert markers.get(MARKER_KEY) == "new"

    def test_marker_fetch_failure_aborts(self, recording_store):
        markers = MemoryMarkers({MARKER_KEY: "abc"})
        result = _importer(recording_store, FakeSource(marker_error=True), markers).run(
            TriggerKind.MANUAL)

        assert result == ImportResult.ABORTED
        assert recording_store.calls == []
        assert markers.get(MARKER_KEY) == "abc"

    def test_document_fetch_failure_aborts(self, recording_store):
        result = _importer(recording_store, FakeSource(document_error=True)).run(TriggerKind.MANUAL)
        assert result == ImportResult.ABORTED
        assert recording_store.calls == []

    def test_wrong_sentinel_touches_nothing(self, recording_store):
        document = json.dumps([["FOLDER", 0, "Wrong Title"], ["FOLDER", 1, FOLDER_TITLE]])
        markers = MemoryMarkers()
        result = _importer(recording_store, FakeSource("abc", document), markers).run(
            TriggerKind.INSTALL)

        assert result == ImportResult.ABORTED
        assert recording_store.calls == []
        assert markers.get(MARKER_KEY) is None

    def test_invalid_json_touches_nothing(self, recording_store):
        result = _importer(recording_store, FakeSource("abc", "not json")).run(TriggerKind.INSTALL)
        assert result == ImportResult.ABORTED
        assert recording_store.calls == []

    def test_malformed_depth_fails_after_replacement(self, recording_store, caplog):
        bar = recording_store.root_id("bookmark_bar")
        recording_store.create_folder(bar, FOLDER_TITLE)
        recording_store.calls.clear()
        document = json.dumps([
            ["FOLDER", 0, "Bookmarks Toolbar"],
            ["FOLDER", 1, FOLDER_TITLE],
            ["LINK", 3, "https://x.example", "Too deep"],
        ])
        markers = MemoryMarkers({MARKER_KEY: "old"})

        with caplog.at_level(logging.ERROR, logger="marksync.operations.importer"):
            result = _importer(recording_store, FakeSource("new", document), markers).run(
                TriggerKind.MANUAL)

        assert result == ImportResult.FAILED
        assert markers.get(MARKER_KEY) == "old"
        assert recording_store.calls[1][0] == "remove_subtree"
        # Partial tree stays behind
        assert len(recording_store.search(title=FOLDER_TITLE)) == 1
        assert "failed mid-build" in caplog.text

    def test_progress_reported(self, recording_store, sample_document):
        notifier = type("Collector", (), {})()
        notifier.messages = []
        notifier.notify = notifier.messages.append

        _importer(recording_store, FakeSource("abc", sample_document), notifier=notifier).run(
            TriggerKind.MANUAL)

        progress = [m["progress"] for m in notifier.messages]
        assert progress[0] == 0
        assert progress[-1] == 100
        assert len(progress) == 5

    def test_commit_failure_keeps_old_marker(self, recording_store, sample_document, caplog):
        markers = MemoryMarkers({MARKER_KEY: "old"})
        with patch.object(recording_store, "commit", side_effect=StoreFailure("disk full")), \
             caplog.at_level(logging.ERROR, logger="marksync.operations.importer"):
            result = _importer(recording_store, FakeSource("new", sample_document), markers).run(
                TriggerKind.STARTUP)

        assert result == ImportResult.FAILED
        assert markers.get(MARKER_KEY) == "old"
        assert "disk full" in caplog.text

    def test_commit_happens_before_marker(self, recording_store, sample_document):
        order = []
        markers = MemoryMarkers()
        markers.set = lambda key, value: order.append("marker")
        with patch.object(recording_store, "commit", side_effect=lambda: order.append("commit")):
            _importer(recording_store, FakeSource("abc", sample_document), markers).run(
                TriggerKind.INSTALL)
        assert order == ["commit", "marker"]

    def test_unknown_rows_are_skipped(self, recording_store):
        document = json.dumps([
            ["FOLDER", 0, "Bookmarks Toolbar"],
            ["FOLDER", 1, FOLDER_TITLE],
            ["WIDGET", 2, "clock"],
            ["HR", 2],
        ])
        result = _importer(recording_store, FakeSource("abc", document)).run(TriggerKind.INSTALL)

        assert result == ImportResult.REBUILT
        imported = recording_store.search(title=FOLDER_TITLE)[0]
        assert [c.type for c in imported.children] == [BookmarkType.SEPARATOR]
