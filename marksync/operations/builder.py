"""Rebuild a nested bookmark tree from flat, depth-annotated records."""

import logging
from typing import Optional, Sequence

from ..models.record import RecordType, SourceRecord
from ..utils.entities import decode_html_entities
from ..utils.notifier import ProgressNotifier, report_progress
from .errors import MalformedDepth
from .target import BookmarkTarget

logger = logging.getLogger(__name__)


def build_tree(records: Sequence[SourceRecord], root_id: str, target: BookmarkTarget,
               notifier: Optional[ProgressNotifier] = None) -> int:
    """Create every record under ``root_id`` in record order.

    The stack holds the ids of the folders currently open; a record at
    depth d is created in the folder at stack[d - 1], so depth 1 is a
    direct child of the root. Store failures propagate unchanged and
    leave whatever was already created in place.

    Returns:
        Number of nodes created.
    """
    stack = [root_id]
    total = len(records)
    divisor = total - 1 if total > 1 else 1
    created = 0

    for index, record in enumerate(records):
        report_progress(notifier, index * 100 / divisor)

        depth = record.depth
        if depth < 1 or depth > len(stack):
            raise MalformedDepth(index, depth, len(stack))

        excess = len(stack) - depth
        if excess > 0:
            del stack[-excess:]
        parent_id = stack[-1]

        if record.type == RecordType.FOLDER:
            folder = target.create_folder(parent_id, decode_html_entities(record.title))
            stack.append(folder.id)
        elif record.type == RecordType.LINK:
            # Link titles are kept as exported
            target.create_bookmark(parent_id, record.title, record.url)
        else:
            target.create_separator(parent_id)
        created += 1

    logger.debug("Created %d bookmark nodes under %s", created, root_id)
    return created

