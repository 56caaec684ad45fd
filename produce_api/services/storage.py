from __future__ import annotations

from produce_api.core.collection import ItemCollection
from produce_api.core.models import ItemType


class InMemoryStorage:
    """Holds the fruit and vegetable collections for the life of the app."""

    def __init__(self) -> None:
        self._collections = {t: ItemCollection(t) for t in ItemType}

    def fruits(self) -> ItemCollection:
        return self._collections[ItemType.FRUIT]

    def vegetables(self) -> ItemCollection:
        return self._collections[ItemType.VEGETABLE]

    def collection(self, item_type: ItemType) -> ItemCollection:
        return self._collections[item_type]
