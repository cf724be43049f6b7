from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import bindparam, text
from src.core.catalog.models import ZoneRow
from src.infra.db import engine as default_engine
from src.ports.catalog_store import CatalogStore

log = logging.getLogger("catalog.store")


def _loads(value: Any) -> Any:
    if value is None or isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        # kapotte JSON in de DB = leeg menu, niet crashen bij laden
        log.warning("menu_items_json is not valid JSON, treating as empty")
        return None


def _number(value: Any) -> Any:
    if value is None:
        return None
    f = float(value)
    return int(f) if f.is_integer() else f


class SqlCatalogStore(CatalogStore):
    def __init__(self, eng=None):
        self.engine = eng or default_engine

    # ---- menu ----

    def load_menu(self, restaurant_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT menu_items_json, updated_at FROM menus WHERE restaurant_id = :rid"),
                {"rid": restaurant_id},
            ).mappings().first()
        if not row:
            return None
        return {"menu_items_json": _loads(row["menu_items_json"]), "updated_at": str(row["updated_at"])}

    def save_menu(self, restaurant_id: str, menu_items_json: List[Dict[str, Any]]) -> Dict[str, Any]:
        payload = json.dumps(menu_items_json, ensure_ascii=False)
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                INSERT INTO menus (restaurant_id, menu_items_json, updated_at)
                VALUES (:rid, :data, CURRENT_TIMESTAMP)
                ON CONFLICT (restaurant_id) DO UPDATE
                   SET menu_items_json = excluded.menu_items_json,
                       updated_at = CURRENT_TIMESTAMP
                """),
                {"rid": restaurant_id, "data": payload},
            )
            row = conn.execute(
                text("SELECT updated_at FROM menus WHERE restaurant_id = :rid"),
                {"rid": restaurant_id},
            ).mappings().first()
        return {"menu_items_json": menu_items_json, "updated_at": str(row["updated_at"]) if row else None}

    # ---- bezorgzones ----

    def list_zones(self, restaurant_id: str) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                text("""
                SELECT id, city, zone_name, delivery_fee, min_order_amount, is_active, created_at
                  FROM delivery_zones
                 WHERE restaurant_id = :rid
                 ORDER BY city ASC, zone_name ASC
                """),
                {"rid": restaurant_id},
            ).mappings().all()
        return [
            {
                "id": str(r["id"]),
                "city": r["city"],
                "zone_name": r["zone_name"],
                "delivery_fee": _number(r["delivery_fee"]),
                "min_order_amount": _number(r["min_order_amount"]),
                "is_active": bool(r["is_active"]),
                "created_at": str(r["created_at"]),
            }
            for r in rows
        ]

    def replace_city_zones(
        self,
        restaurant_id: str,
        city: str,
        zone_names: Sequence[str],
        zones: Sequence[ZoneRow],
    ) -> None:
        # SQLite's LOWER() vouwt alleen ASCII: vergelijken gebeurt in Python
        select_sql = text("""
            SELECT id, city, zone_name FROM delivery_zones
             WHERE restaurant_id = :rid
        """)
        delete_sql = text("""
            DELETE FROM delivery_zones WHERE id IN :ids
        """).bindparams(bindparam("ids", expanding=True))
        insert_sql = text("""
            INSERT INTO delivery_zones
                (restaurant_id, city, zone_name, delivery_fee, min_order_amount, is_active)
            VALUES
                (:rid, :city, :zone_name, :fee, :min_order, :active)
        """)
        # één transactie per stad
        with self.engine.begin() as conn:
            if zone_names:
                city_key = city.strip().lower()
                names = {n.strip().lower() for n in zone_names}
                ids = [
                    r["id"]
                    for r in conn.execute(select_sql, {"rid": restaurant_id}).mappings()
                    if r["city"].strip().lower() == city_key and r["zone_name"].strip().lower() in names
                ]
                if ids:
                    conn.execute(delete_sql, {"ids": ids})
            if zones:
                conn.execute(insert_sql, [
                    {
                        "rid": restaurant_id,
                        "city": z.city,
                        "zone_name": z.zone_name,
                        "fee": z.delivery_fee,
                        "min_order": z.min_order_amount,
                        "active": z.is_active,
                    }
                    for z in zones
                ])
