from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union
from .models import MenuRow
from .normalize import (
    DEFAULT_GROUP, group_key, normalize_group_name, normalize_price, normalize_text, slugify,
)

RowLike = Union[MenuRow, Mapping[str, Any]]


def _finite(value: Optional[float]) -> bool:
    return value is not None and isinstance(value, (int, float)) and math.isfinite(value)


def coerce_row(raw: RowLike) -> MenuRow:
    """Form- of JSON-rij -> MenuRow. Onbekende velden worden genegeerd."""
    if isinstance(raw, MenuRow):
        return raw
    if not isinstance(raw, Mapping):
        return MenuRow()
    name = raw.get("name")
    if name is None:
        name = raw.get("item_name")
    desc = normalize_text(raw.get("description"))
    return MenuRow(
        id=normalize_text(raw.get("id") if raw.get("id") is not None else raw.get("item_id")),
        category=normalize_text(raw.get("category")),
        name=normalize_text(name),
        price=normalize_price(raw.get("price")),
        description=desc or None,
    )


def is_valid_row(row: MenuRow) -> bool:
    return bool(normalize_text(row.name)) and _finite(row.price) and row.price >= 0


def filter_valid_rows(rows: Iterable[MenuRow]) -> List[MenuRow]:
    # ongeldige rijen vallen stil weg; alleen "0 over" is een fout
    return [r for r in rows if is_valid_row(r)]


def ensure_row_ids(rows: Iterable[MenuRow], default_group: str = DEFAULT_GROUP) -> List[MenuRow]:
    """
    Normaliseert rijen en kent ontbrekende ids toe.

    Een expliciete id blijft staan. Anders: slug(categorie)-slug(naam)-n, met n
    een teller per categorie in rijvolgorde. De teller leeft alleen binnen deze
    aanroep, dus dezelfde rijen geven altijd dezelfde ids.
    """
    counters: Dict[str, int] = {}
    labels: Dict[str, str] = {}
    seen: Set[str] = set()
    out: List[MenuRow] = []
    for row in rows:
        category = normalize_group_name(row.category, default_group)
        key = group_key(category)
        category = labels.setdefault(key, category)
        name = normalize_text(row.name)
        n = counters.get(key, 0) + 1
        counters[key] = n
        explicit = normalize_text(row.id)
        row_id = explicit or f"{slugify(category)}-{slugify(name)}-{n}"
        if row_id in seen:
            # dubbele id (bv. twee keer dezelfde item_id in een upload)
            suffix = 2
            while f"{row_id}-{suffix}" in seen:
                suffix += 1
            row_id = f"{row_id}-{suffix}"
        seen.add(row_id)
        out.append(MenuRow(
            id=row_id,
            category=category,
            name=name,
            price=row.price,
            description=normalize_text(row.description) or None,
        ))
    return out


def validate_rows_for_save(rows: Iterable[MenuRow]) -> List[str]:
    problems: List[str] = []
    for idx, row in enumerate(rows, start=1):
        if not normalize_text(row.name):
            problems.append(f"row {idx}: name is required")
        if not _finite(row.price):
            problems.append(f"row {idx}: price must be a number")
        elif row.price < 0:
            problems.append(f"row {idx}: price must be >= 0")
    return problems


def drop_duplicate_rows(rows: Iterable[MenuRow]) -> List[MenuRow]:
    """Exact dezelfde regel twee keer geplakt -> één keer houden."""
    seen: Set[Tuple[str, str, float, str]] = set()
    out: List[MenuRow] = []
    for row in rows:
        key = (group_key(row.category), group_key(row.name), row.price, normalize_text(row.description))
        if key in seen:
            continue
        seen.add(key)
        out.append(row)
    return out
