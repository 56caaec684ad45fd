from __future__ import annotations

import json
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from produce_api.config import Settings
from produce_api.core.models import ItemType, ListFilters, Unit
from produce_api.services.exceptions import InvalidFieldError, InvalidInputError, TypeMismatchError
from produce_api.services.importer import DatasetImporter
from produce_api.services.storage import InMemoryStorage

# ---- DI helpers --------------------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_storage(request: Request) -> InMemoryStorage:
    return request.app.state.storage

def get_importer(request: Request) -> DatasetImporter:
    return request.app.state.importer

def bootstrap_dataset(
    settings: Settings = Depends(get_settings),
    importer: DatasetImporter = Depends(get_importer),
) -> None:
    # No-op once loaded; failures become a 400 through the app error handler
    importer.load_once_from_file(settings.bootstrap_file)


router = APIRouter(tags=["collections"], dependencies=[Depends(bootstrap_dataset)])

# ---- Helpers -----------------------------------------------------------------

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

def _unknown_collection() -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "Unknown collection")

def _grams_param(name: str, value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if not (value.isascii() and value.isdigit()):
        raise InvalidFieldError(f"Parameter '{name}' must be a positive integer (grams)", field=name)
    return int(value)

def parse_filters(
    q: Optional[str] = None,
    min: Optional[str] = None,
    max: Optional[str] = None,
    unit: Optional[str] = None,
) -> ListFilters:
    """Validate raw query strings into ListFilters."""
    lo = _grams_param("min", min)
    hi = _grams_param("max", max)
    out_unit = Unit.G
    if unit is not None:
        out_unit = Unit.parse(unit)
        if out_unit is None:
            raise InvalidFieldError("Parameter 'unit' must be 'g' or 'kg'", field="unit")
    if lo is not None and hi is not None and lo > hi:
        raise InvalidFieldError("Parameter 'min' cannot be greater than 'max'", field="min")
    return ListFilters(q=q.strip() if q is not None else None, min=lo, max=hi, unit=out_unit)

# ---- Routes ------------------------------------------------------------------

@router.get("/api/{type}")
def list_items(
    type: str,
    q: Optional[str] = Query(None, description="Case-insensitive name substring"),
    min: Optional[str] = Query(None, description="Minimum quantity in grams"),
    max: Optional[str] = Query(None, description="Maximum quantity in grams"),
    unit: Optional[str] = Query(None, description="Output unit, 'g' or 'kg'"),
    storage: InMemoryStorage = Depends(get_storage),
):
    item_type = ItemType.parse(type)
    if item_type is None:
        return _unknown_collection()
    try:
        filters = parse_filters(q, min, max, unit)
    except InvalidFieldError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    rows = storage.collection(item_type).list(filters)
    return [r.model_dump(mode="json") for r in rows]


@router.post("/api/{type}", status_code=status.HTTP_201_CREATED)
async def add_item(
    type: str,
    request: Request,
    importer: DatasetImporter = Depends(get_importer),
):
    if ItemType.parse(type) is None:
        return _unknown_collection()
    try:
        data = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON")
    if not isinstance(data, dict):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON")

    # Same validation path as the bootstrap import; the row's own type picks the collection
    try:
        importer.load_row(data)
    except (InvalidInputError, TypeMismatchError) as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    return {"status": "ok"}
