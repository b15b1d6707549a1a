"""
Tracks the collection of permissions that are about to be deleted.

Once a permission row is gone its id no longer resolves to a collection,
so the collection is captured while the row still exists and consumed
right after the delete to know which documents to export again.
"""
from typing import Dict, Iterable, Set

from rbac_sync.events import PrimaryKey


class PendingDeletions:
    """
    Short-lived map of permission id to collection.

    Entries are removed when consumed. Handlers run on one event loop and
    never await between reading and writing the map, so no lock is needed.
    """

    def __init__(self):
        self._collections: Dict[PrimaryKey, str] = {}

    def capture(self, key: PrimaryKey, collection: str) -> None:
        self._collections[key] = collection

    def consume(self, keys: Iterable[PrimaryKey]) -> Set[str]:
        """
        Remove ``keys`` and return the distinct collections they belonged to.

        Keys that were never captured are ignored.
        """
        collections: Set[str] = set()
        for key in keys:
            collection = self._collections.pop(key, None)
            if collection is not None:
                collections.add(collection)
        return collections

    def __contains__(self, key: PrimaryKey) -> bool:
        return key in self._collections

    def __len__(self) -> int:
        return len(self._collections)
