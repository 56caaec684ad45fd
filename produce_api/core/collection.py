# produce_api/core/collection.py
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from produce_api.services.exceptions import TypeMismatchError

from .models import Item, ItemRow, ItemType, ListFilters

logger = logging.getLogger(__name__)


class ItemCollection:
    """
    Ordered id -> Item mapping scoped to a single ItemType.

    Re-adding an id replaces the item but keeps its first-insertion position,
    so listing order is stable across replacements.
    """

    def __init__(self, item_type: ItemType):
        self.item_type = item_type
        self._items: Dict[int, Item] = {}
        self._lock = threading.RLock()

    def add(self, item: Item) -> None:
        if item.type is not self.item_type:
            logger.debug("Rejected %s id=%s for %s collection", item.type.value, item.id, self.item_type.value)
            raise TypeMismatchError(f"Only {self.item_type.value}s allowed.")
        with self._lock:
            self._items[item.id] = item

    def remove(self, item_id: int) -> None:
        with self._lock:
            self._items.pop(item_id, None)

    def get(self, item_id: int) -> Optional[Item]:
        with self._lock:
            return self._items.get(item_id)

    def list(self, filters: Optional[ListFilters] = None) -> List[ItemRow]:
        """Rows for every item passing all supplied filters, in list order."""
        filters = filters or ListFilters()
        with self._lock:
            snapshot = list(self._items.values())
        return [it.render(filters.unit) for it in snapshot if filters.matches(it)]

    def __len__(self) -> int:
        return len(self._items)
