from __future__ import annotations

import json
import logging
import math
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Union

from produce_api.core.models import Item, ItemType, Unit
from produce_api.services.exceptions import (
    DatasetIOError,
    DatasetParseError,
    InvalidFieldError,
    MissingFieldError,
    ServiceError,
)
from produce_api.services.storage import InMemoryStorage

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("id", "name", "type", "quantity", "unit")


class LoadState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


# ---- Coercion helpers --------------------------------------------------------

def _to_int(value: Any, field: str) -> int:
    """Lenient integer coercion; floats and float-looking strings truncate."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s)
        except ValueError:
            try:
                f = float(s)
            except ValueError:
                f = math.nan
            if math.isfinite(f):
                return int(f)
    raise InvalidFieldError(f"Invalid {field} '{value}'", field=field)


def _to_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise InvalidFieldError(f"Invalid {field}", field=field)
    return str(value)


class DatasetImporter:
    """
    Turns untyped rows into Items and routes them to the matching collection.

    Also guards the one-time bootstrap import. ``retry_on_failure`` decides
    whether a failed bootstrap is attempted again on the next call.
    """

    def __init__(self, storage: InMemoryStorage, retry_on_failure: bool = True):
        self.storage = storage
        self.retry_on_failure = retry_on_failure
        self._state = LoadState.NOT_LOADED
        self._lock = threading.Lock()

    @property
    def state(self) -> LoadState:
        return self._state

    # ---- Rows ----------------------------------------------------------------

    def validate_row(self, row: Any) -> Item:
        if not isinstance(row, Mapping):
            raise InvalidFieldError("Row must be a JSON object")
        for key in REQUIRED_KEYS:
            if key not in row:
                raise MissingFieldError(key)

        item_id = _to_int(row["id"], "id")
        name = _to_str(row["name"], "name")
        raw_type = _to_str(row["type"], "type").lower()
        quantity = _to_int(row["quantity"], "quantity")
        unit = _to_str(row["unit"], "unit")

        if item_id <= 0:
            raise InvalidFieldError(f"Invalid id '{item_id}'", field="id")
        if name == "":
            raise InvalidFieldError("Empty name", field="name")
        item_type = ItemType.parse(raw_type)
        if item_type is None:
            raise InvalidFieldError(f"Invalid type '{raw_type}'", field="type")
        if quantity < 0:
            raise InvalidFieldError("Negative quantity not allowed", field="quantity")
        if Unit.parse(unit) is None:
            raise InvalidFieldError(f"Invalid unit '{unit}'", field="unit")

        return Item.create(item_id, name, item_type, quantity, unit)

    def load_row(self, row: Any) -> Item:
        item = self.validate_row(row)
        self.storage.collection(item.type).add(item)
        return item

    def load_from_rows(self, rows: Iterable[Any]) -> int:
        """
        Load rows in order. A bad row stops the load; rows before it stay
        inserted (no rollback).
        """
        count = 0
        for row in rows:
            self.load_row(row)
            count += 1
        return count

    # ---- Bootstrap -----------------------------------------------------------

    def load_once_from_file(self, path: Union[str, Path]) -> None:
        with self._lock:
            if self._state is LoadState.LOADED:
                return
            if self._state is LoadState.FAILED and not self.retry_on_failure:
                return
            self._state = LoadState.LOADING
            logger.info("Importing bootstrap dataset from %s", path)
            try:
                count = self.load_from_rows(self._read_file(path))
            except ServiceError as e:
                self._state = LoadState.FAILED
                logger.error("Bootstrap import from %s failed: %s", path, e)
                raise
            self._state = LoadState.LOADED
            logger.info("Imported %d items from %s", count, path)

    def _read_file(self, path: Union[str, Path]) -> List[Mapping[str, Any]]:
        fpath = Path(path)
        if not fpath.is_file():
            raise DatasetIOError(f"Bootstrap file not found: {fpath}")
        try:
            with fpath.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DatasetParseError(f"Invalid JSON in {fpath}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetIOError(f"Cannot read file: {fpath}: {e}") from e
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            raise DatasetParseError(f"Invalid JSON structure in {fpath}")
        return data
