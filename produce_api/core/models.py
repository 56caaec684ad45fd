# produce_api/core/models.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from produce_api.services.exceptions import InvalidInputError


GRAMS_PER_KG = 1000


# ---------- Closed vocabularies ----------

class ItemType(str, Enum):
    FRUIT = "fruit"
    VEGETABLE = "vegetable"

    @classmethod
    def parse(cls, value: Any) -> Optional["ItemType"]:
        """Case-insensitive lookup; None when the value names no collection."""
        if isinstance(value, ItemType):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


class Unit(str, Enum):
    G = "g"
    KG = "kg"

    @classmethod
    def parse(cls, value: Any) -> Optional["Unit"]:
        if isinstance(value, Unit):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


def _round_half_up(value: Union[int, float, Decimal]) -> int:
    # str() first so 1.0005 stays 1.0005 rather than its binary neighbour
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_grams(quantity: Union[int, float], unit: Unit) -> int:
    if unit is Unit.KG:
        return _round_half_up(Decimal(str(quantity)) * GRAMS_PER_KG)
    # grams are taken as-is; fractions truncate
    return int(Decimal(str(quantity)))


# ---------- Core value objects ----------

class ItemRow(BaseModel):
    """Rendered representation of an Item, as returned by the API."""
    id: int
    name: str
    type: ItemType
    quantity: Union[int, float]
    unit: Unit


class Item(BaseModel):
    """A fruit or vegetable held in a collection. Quantity is always grams."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1)
    type: ItemType
    quantity: int = Field(0, ge=0, description="Quantity in grams")

    @classmethod
    def create(
        cls,
        id: int,
        name: str,
        type: Union[ItemType, str],
        quantity: Union[int, float],
        unit: Union[Unit, str],
    ) -> "Item":
        """Build an Item from a quantity expressed in ``unit``."""
        item_type = type if isinstance(type, ItemType) else ItemType.parse(type)
        if item_type is None:
            raise InvalidInputError(f"Invalid type '{str(type).lower()}'.")
        parsed_unit = Unit.parse(unit)
        if parsed_unit is None:
            raise InvalidInputError(f"Unsupported unit '{unit}'.")
        try:
            grams = to_grams(quantity, parsed_unit)
        except (ArithmeticError, ValueError) as e:
            raise InvalidInputError(f"Invalid quantity '{quantity}'.") from e
        try:
            return cls(id=id, name=name, type=item_type, quantity=grams)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid item: {e.errors()[0]['msg']}") from e

    def render(self, unit: Union[Unit, str, None] = Unit.G) -> ItemRow:
        """Row for output; anything other than kg renders as grams."""
        target = Unit.parse(unit) if unit is not None else Unit.G
        if target is Unit.KG:
            if self.quantity % GRAMS_PER_KG == 0:
                quantity: Union[int, float] = self.quantity // GRAMS_PER_KG
            else:
                quantity = self.quantity / GRAMS_PER_KG
            return ItemRow(id=self.id, name=self.name, type=self.type, quantity=quantity, unit=Unit.KG)
        return ItemRow(id=self.id, name=self.name, type=self.type, quantity=self.quantity, unit=Unit.G)


class ListFilters(BaseModel):
    """Optional listing constraints. min/max are grams, unit is the output unit."""
    q: Optional[str] = None
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=0)
    unit: Unit = Unit.G

    def matches(self, item: Item) -> bool:
        if self.q is not None and self.q.lower() not in item.name.lower():
            return False
        if self.min is not None and item.quantity < self.min:
            return False
        if self.max is not None and item.quantity > self.max:
            return False
        return True
