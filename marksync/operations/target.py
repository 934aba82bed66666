"""Protocol for bookmark stores the importer writes into."""

from typing import List, Optional, Protocol, runtime_checkable

from ..models.bookmark import Bookmark


@runtime_checkable
class BookmarkTarget(Protocol):
    """
    Primitives the importer needs from a bookmark store.

    Implementations raise StoreFailure when a primitive cannot be
    carried out. Root containers report ``parent_id`` of None.
    """

    def root_id(self, name: str) -> str:
        """Resolve a named root container (e.g. "toolbar") to its id."""
        ...

    def search(self, title: Optional[str] = None, url: Optional[str] = None) -> List[Bookmark]:
        ...

    def get_node(self, node_id: str) -> Bookmark:
        ...

    def create_folder(self, parent_id: str, title: str) -> Bookmark:
        ...

    def create_bookmark(self, parent_id: str, title: str, url: str) -> Bookmark:
        ...

    def create_separator(self, parent_id: str) -> Bookmark:
        ...

    def remove_subtree(self, node_id: str) -> None:
        ...

    def commit(self) -> None:
        """Persist everything written so far."""
        ...
