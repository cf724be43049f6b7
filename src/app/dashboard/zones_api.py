from __future__ import annotations
import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response

from src.app.dashboard.base import get_store, require_admin
from src.core.catalog.ingest import ZONE_TEMPLATE_CSV, import_zone_file
from src.core.catalog.models import ZoneBatch
from src.core.catalog.normalize import normalize_text
from src.core.catalog.zones import (
    CITY_AREAS, add_custom_area, build_zone_batch, merge_area_selection,
    partition_by_city, replace_zones, unique_areas,
)
from src.infra.settings import settings
from src.ports.catalog_store import CatalogStore

log = logging.getLogger("catalog.zones")

router = APIRouter(prefix="/dashboard/api", tags=["delivery-zones"], dependencies=[Depends(require_admin)])


@router.get("/zone-template.csv")
def zone_template():
    return Response(
        ZONE_TEMPLATE_CSV,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="zone-template.csv"'},
    )


@router.get("/delivery-zones/cities")
def list_cities():
    return {"ok": True, "data": {city: list(areas) for city, areas in CITY_AREAS.items()}}


@router.get("/restaurants/{restaurant_id}/delivery-zones")
def read_zones(restaurant_id: str, store: CatalogStore = Depends(get_store)):
    return {"ok": True, "data": store.list_zones(restaurant_id)}


@router.post("/restaurants/{restaurant_id}/delivery-zones")
def save_zones(
    restaurant_id: str,
    payload: Dict[str, Any] = Body(...),
    store: CatalogStore = Depends(get_store),
):
    fallback_city = normalize_text(payload.get("city"))
    # lijst van zones, of de velden van één zone direct in de body
    raw_zones = payload["zones"] if isinstance(payload.get("zones"), list) else [payload]
    batch = build_zone_batch(raw_zones, fallback_city)
    count = replace_zones(store, restaurant_id, batch)
    return {"ok": True, "count": count, "cities": list(batch.names_by_city)}


@router.post("/restaurants/{restaurant_id}/delivery-zones/import")
async def import_zones(
    restaurant_id: str,
    file: UploadFile = File(...),
    city: str = Form(""),
    save: bool = False,
    store: CatalogStore = Depends(get_store),
):
    raw = await file.read()
    if len(raw) > settings.MAX_UPLOAD_BYTES:
        return JSONResponse({"ok": False, "error": "File is too large."}, status_code=413)
    zones = import_zone_file(file.filename or "", raw, normalize_text(city))
    if save:
        batch = ZoneBatch(zones=zones, names_by_city=partition_by_city(zones))
        replace_zones(store, restaurant_id, batch)
        log.info(f"zones imported and saved restaurant={restaurant_id} n={len(zones)}")
    return {"ok": True, "count": len(zones), "saved": save, "zones": [z.to_dict() for z in zones]}


@router.post("/delivery-zones/areas")
def pick_areas(payload: Dict[str, Any] = Body(...)):
    """Multi-select of eigen gebied verwerken in de open (nog niet opgeslagen) zones."""
    city = normalize_text(payload.get("city"))
    pending = payload.get("pending") or []
    if not isinstance(pending, list):
        pending = []
    if "custom" in payload:
        pending = add_custom_area(pending, payload.get("custom"), city, settings.MAX_AREA_NAME_LEN)
    else:
        selected = payload.get("selected") or []
        if not isinstance(selected, (list, str)):
            selected = []
        pending = merge_area_selection(pending, selected, city)
    selected = unique_areas(p.get("zone_name") for p in pending)
    return {"ok": True, "pending": pending, "selected": selected}
