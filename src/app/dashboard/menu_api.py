from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, ValidationError

from src.app.dashboard.base import get_store, require_admin
from src.core.catalog.errors import CatalogValidationError
from src.core.catalog.ingest import MENU_TEMPLATE_CSV, import_menu_file
from src.core.catalog.models import CatalogGroup, MenuRow
from src.core.catalog.projector import (
    groups_to_rows, load_stored_menu, rows_to_groups, serialize_groups,
)
from src.core.catalog.rows import coerce_row, ensure_row_ids, validate_rows_for_save
from src.infra.settings import settings
from src.ports.catalog_store import CatalogStore

log = logging.getLogger("catalog.menu")

router = APIRouter(prefix="/dashboard/api", tags=["menu"], dependencies=[Depends(require_admin)])


class StoredItemIn(BaseModel):
    id: Optional[str] = Field(None, min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: Optional[str] = None


class StoredCategoryIn(BaseModel):
    name: str = Field(..., min_length=1)
    items: List[StoredItemIn]


class MenuSaveIn(BaseModel):
    rows: Optional[List[Dict[str, Any]]] = None
    menu_items_json: Optional[List[Any]] = None


def _menu_payload(groups: List[CatalogGroup], rows: List[MenuRow]) -> Dict[str, Any]:
    return {
        "categories": serialize_groups(groups),
        "rows": [r.to_dict() for r in rows],
    }


def _validate_stored_shape(data: List[Any]) -> List[Dict[str, Any]]:
    # zelfde probe als bij laden: eerste element met 'items' = categorieën
    if data and isinstance(data[0], dict) and "items" in data[0]:
        return [_dump(StoredCategoryIn(**c)) for c in data]
    return [_dump(StoredItemIn(**it)) for it in data]


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump() if hasattr(model, "model_dump") else model.dict()


@router.get("/menu-template.csv")
def menu_template():
    return Response(
        MENU_TEMPLATE_CSV,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="menu-template.csv"'},
    )


@router.get("/restaurants/{restaurant_id}/menu")
def read_menu(restaurant_id: str, store: CatalogStore = Depends(get_store)):
    stored = store.load_menu(restaurant_id) or {}
    groups = load_stored_menu(stored.get("menu_items_json"), settings.DEFAULT_CATEGORY)
    rows = groups_to_rows(groups, settings.DEFAULT_CATEGORY)
    data = _menu_payload(groups, rows)
    data["updated_at"] = stored.get("updated_at")
    return {"ok": True, "data": data}


@router.post("/restaurants/{restaurant_id}/menu")
def save_menu(restaurant_id: str, payload: MenuSaveIn, store: CatalogStore = Depends(get_store)):
    if payload.rows is not None:
        candidates = [coerce_row(r) for r in payload.rows]
        problems = validate_rows_for_save(candidates)
        if problems:
            raise CatalogValidationError("Please fix menu items (name and price required).", problems)
    elif payload.menu_items_json is not None:
        try:
            stored = _validate_stored_shape(payload.menu_items_json)
        except (ValidationError, TypeError) as e:
            return JSONResponse({"ok": False, "error": "Invalid menu payload", "issues": str(e)}, status_code=422)
        candidates = groups_to_rows(load_stored_menu(stored, settings.DEFAULT_CATEGORY), settings.DEFAULT_CATEGORY)
    else:
        raise CatalogValidationError("rows or menu_items_json is required")

    rows = ensure_row_ids(candidates, settings.DEFAULT_CATEGORY)
    groups = rows_to_groups(rows, settings.DEFAULT_CATEGORY)
    if not groups:
        raise CatalogValidationError("No items to save yet.")

    saved = store.save_menu(restaurant_id, serialize_groups(groups))
    log.info(f"menu saved restaurant={restaurant_id} categories={len(groups)} items={len(rows)}")
    data = _menu_payload(groups, rows)
    data["updated_at"] = saved.get("updated_at")
    return {"ok": True, "data": data}


@router.post("/restaurants/{restaurant_id}/menu/import")
async def import_menu(
    restaurant_id: str,
    file: UploadFile = File(...),
    save: bool = False,
    store: CatalogStore = Depends(get_store),
):
    raw = await file.read()
    if len(raw) > settings.MAX_UPLOAD_BYTES:
        return JSONResponse({"ok": False, "error": "File is too large."}, status_code=413)
    rows = import_menu_file(file.filename or "", raw, settings.DEFAULT_CATEGORY)
    groups = rows_to_groups(rows, settings.DEFAULT_CATEGORY)
    if save:
        store.save_menu(restaurant_id, serialize_groups(groups))
        log.info(f"menu imported and saved restaurant={restaurant_id} items={len(rows)}")
    result = _menu_payload(groups, rows)
    result.update({"ok": True, "count": len(rows), "saved": save})
    return result
