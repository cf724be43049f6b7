from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List
from .models import CatalogGroup, CatalogItem, MenuRow
from .normalize import DEFAULT_GROUP, group_key, normalize_group_name, normalize_text
from .rows import is_valid_row


def rows_to_groups(rows: Iterable[MenuRow], default_group: str = DEFAULT_GROUP) -> List[CatalogGroup]:
    """Platte rijen -> categorieën. Volgorde = eerste keer gezien."""
    grouped: Dict[str, CatalogGroup] = {}
    for row in rows:
        if not is_valid_row(row):
            continue
        category = normalize_group_name(row.category, default_group)
        key = group_key(category)
        group = grouped.get(key)
        if group is None:
            group = grouped[key] = CatalogGroup(name=category)
        group.items.append(CatalogItem(
            id=row.id,
            name=normalize_text(row.name),
            price=float(row.price),
            description=normalize_text(row.description) or None,
        ))
    # lege groepen bestaan niet: een groep ontstaat pas bij het eerste item
    return list(grouped.values())


def groups_to_rows(groups: Iterable[CatalogGroup], default_group: str = DEFAULT_GROUP) -> List[MenuRow]:
    rows: List[MenuRow] = []
    for group in groups:
        category = normalize_group_name(group.name, default_group)
        for it in group.items or []:
            rows.append(MenuRow(
                id=normalize_text(it.id),
                category=category,
                name=normalize_text(it.name),
                price=it.price if it.price is not None else 0.0,
                description=normalize_text(it.description) or None,
            ))
    return rows


def serialize_groups(groups: Iterable[CatalogGroup]) -> List[Dict[str, Any]]:
    return [g.to_dict() for g in groups]


# ---------- Opgeslagen JSON inlezen ----------

def _stored_price(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0 if value is None else math.nan
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def _stored_items(raw_items: Any) -> List[CatalogItem]:
    if not isinstance(raw_items, list):
        return []
    items: List[CatalogItem] = []
    for idx, it in enumerate(raw_items, start=1):
        if not isinstance(it, dict):
            continue
        name = normalize_text(it.get("name"))
        price = _stored_price(it.get("price"))
        if not name or not math.isfinite(price):
            continue
        desc = it.get("description")
        items.append(CatalogItem(
            id=normalize_text(it.get("id")) or str(idx),
            name=name,
            price=price,
            description=(desc.strip() or None) if isinstance(desc, str) else None,
        ))
    return items


def load_stored_menu(data: Any, default_group: str = DEFAULT_GROUP) -> List[CatalogGroup]:
    """
    Leest menu_items_json in één van de twee historische vormen:

    * [{"name": ..., "items": [...]}, ...]  (categorieën)
    * [{"id": ..., "name": ..., "price": ...}, ...]  (oud: platte lijst)

    Het eerste element bepaalt de vorm. Alles wat geen lijst is (None, dict,
    string) levert een leeg menu op.
    """
    if not isinstance(data, list) or not data:
        return []
    first = data[0]
    if isinstance(first, dict) and "items" in first:
        groups: List[CatalogGroup] = []
        for c in data:
            if not isinstance(c, dict):
                continue
            items = _stored_items(c.get("items"))
            if items:
                groups.append(CatalogGroup(name=normalize_group_name(c.get("name"), default_group), items=items))
        return groups
    items = _stored_items(data)
    return [CatalogGroup(name=default_group, items=items)] if items else []
