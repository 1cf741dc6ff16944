"""In-memory cache for the three read tiers."""

from threading import Lock
from typing import Any

from sf_reference.domain.models import CategoryListing, EntityRecord


class ReaderCache:
    """Thread-safe holder for the master index, listings and objects.

    There is no expiry. A reader invalidates by replacing its whole cache
    object, so a load that finishes after invalidation lands in the
    discarded instance.
    """

    def __init__(self):
        self.lock = Lock()
        self._index: dict[str, Any] | None = None
        self._listings: dict[str, CategoryListing] = {}
        self._objects: dict[str, EntityRecord | None] = {}

    def get_index(self) -> dict[str, Any] | None:
        with self.lock:
            return self._index

    def set_index(self, index: dict[str, Any]) -> None:
        with self.lock:
            self._index = index

    def get_listing(self, cloud: str) -> CategoryListing | None:
        with self.lock:
            return self._listings.get(cloud)

    def set_listing(self, cloud: str, listing: CategoryListing) -> None:
        with self.lock:
            self._listings[cloud] = listing

    def has_object(self, name: str) -> bool:
        with self.lock:
            return name in self._objects

    def get_object(self, name: str) -> EntityRecord | None:
        with self.lock:
            return self._objects.get(name)

    def set_object(self, name: str, record: EntityRecord | None) -> None:
        with self.lock:
            self._objects[name] = record

    def sizes(self) -> dict[str, int]:
        with self.lock:
            return {
                'index': 0 if self._index is None else 1,
                'listings': len(self._listings),
                'objects': len(self._objects),
            }
