"""Locate and remove trees left by previous imports."""

import logging
from typing import List, Optional

from ..models.bookmark import Bookmark, BookmarkType
from .target import BookmarkTarget

logger = logging.getLogger(__name__)


def node_depth(target: BookmarkTarget, node: Bookmark, max_depth: int) -> Optional[int]:
    """Count the folders between ``node`` and its root container.

    A direct child of a root container has depth 0. Returns None for root
    containers themselves and as soon as the count passes ``max_depth``.
    """
    if node.parent_id is None:
        return None

    depth = 0
    parent = target.get_node(node.parent_id)
    while parent.parent_id is not None:
        depth += 1
        if depth > max_depth:
            return None
        parent = target.get_node(parent.parent_id)
    return depth


def find_nodes_at_depth(target: BookmarkTarget, title: str, node_type: BookmarkType,
                        depth: int) -> List[Bookmark]:
    """Search by title and keep nodes of ``node_type`` sitting at ``depth``."""
    matches = []
    for node in target.search(title=title):
        if node.type != node_type:
            continue
        if node_depth(target, node, depth) == depth:
            matches.append(node)
    return matches


def remove_previous_trees(target: BookmarkTarget, title: str) -> int:
    """Remove every top-level folder named ``title`` along with its contents.

    Returns:
        Number of folders removed; zero when there was nothing to replace.
    """
    previous = find_nodes_at_depth(target, title, BookmarkType.FOLDER, 0)
    for node in previous:
        logger.info("Removing previous '%s' folder (id %s)", title, node.id)
        target.remove_subtree(node.id)
    return len(previous)
