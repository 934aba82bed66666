"""Import orchestrator - mirrors the remote bookmark database into a target."""

import logging
from enum import Enum
from typing import Optional

from ..models.record import parse_document, validate_document
from ..utils.fetcher import RemoteSource
from ..utils.notifier import ProgressNotifier
from ..utils.state import MARKER_KEY, MarkerStore
from .builder import build_tree
from .errors import (
    FetchUnavailable, MalformedDepth, ParseError, StoreFailure, ValidationError,
)
from .gate import TriggerKind, should_rebuild
from .replacement import remove_previous_trees
from .target import BookmarkTarget

logger = logging.getLogger(__name__)


class ImportResult(str, Enum):
    REBUILT = "rebuilt"
    UNCHANGED = "unchanged"
    ABORTED = "aborted"  # nothing was touched
    FAILED = "failed"  # target left partially built


class TreeImporter:
    """Runs fetch, gate, validate, replace, build, commit and marker update in order."""

    def __init__(self, source: RemoteSource, target: BookmarkTarget, markers: MarkerStore,
                 root_id: str, folder_title: str,
                 notifier: Optional[ProgressNotifier] = None):
        self.source = source
        self.target = target
        self.markers = markers
        self.root_id = root_id
        self.folder_title = folder_title
        self.notifier = notifier

    def run(self, trigger: TriggerKind) -> ImportResult:
        try:
            fetched_marker = self.source.fetch_marker()
        except FetchUnavailable as e:
            logger.warning("Version check failed: %s", e)
            return ImportResult.ABORTED

        stored_marker = self.markers.get(MARKER_KEY)
        if not should_rebuild(trigger, stored_marker, fetched_marker):
            logger.info("Database unchanged at %s, skipping %s rebuild",
                        fetched_marker, trigger.value)
            return ImportResult.UNCHANGED

        try:
            records = validate_document(parse_document(self.source.fetch_document()))
        except (FetchUnavailable, ParseError, ValidationError) as e:
            logger.warning("Not importing database %s: %s", fetched_marker, e)
            return ImportResult.ABORTED

        try:
            removed = remove_previous_trees(self.target, self.folder_title)
            created = build_tree(records, self.root_id, self.target, self.notifier)
            self.target.commit()
        except (MalformedDepth, StoreFailure) as e:
            logger.error("Import of database %s failed mid-build: %s", fetched_marker, e)
            return ImportResult.FAILED

        try:
            self.markers.set(MARKER_KEY, fetched_marker)
        except OSError as e:
            # Tree is already committed
            logger.error("Could not record database %s as imported: %s", fetched_marker, e)
        logger.info("Imported database %s (%d nodes, replaced %d previous folder(s))",
                    fetched_marker, created, removed)
        return ImportResult.REBUILT
