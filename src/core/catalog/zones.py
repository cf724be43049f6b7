from __future__ import annotations
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple
from .errors import CatalogValidationError, ZoneReplaceError
from .models import ZoneBatch, ZoneRow
from .normalize import group_key, normalize_flag, normalize_price, normalize_text

log = logging.getLogger("catalog.zones")

# Vaste gebieden per stad voor de multi-select in het dashboard
CITY_AREAS: Dict[str, Tuple[str, ...]] = {
    "Karachi": ("Gulshan", "Johar", "DHA", "Clifton", "North Nazimabad"),
    "Hyderabad": ("Latifabad", "Qasimabad", "Autobahn"),
    "Islamabad": ("F-6", "F-7", "G-10", "I-8"),
}

MAX_AREA_NAME_LEN = 40


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        v = raw.get(k)
        if v is not None:
            return v
    return None


def normalize_zone(raw: Any, fallback_city: Any = "") -> ZoneRow:
    """Eén zone uit formulier, JSON of spreadsheet. Oude veldnamen blijven werken."""
    if isinstance(raw, ZoneRow):
        return raw
    if not isinstance(raw, Mapping):
        raw = {}
    city = normalize_text(raw.get("city")) or normalize_text(fallback_city)
    zone_name = normalize_text(raw.get("zone_name")) or normalize_text(raw.get("area"))
    fee = _first_present(raw, "delivery_fee", "deliveryFee")
    min_order = _first_present(raw, "min_order_amount", "minOrder", "min_order")
    min_order_num = normalize_price(min_order)
    return ZoneRow(
        city=city,
        zone_name=zone_name,
        delivery_fee=normalize_price(fee),
        # leeg of onleesbaar minimum = geen minimum
        min_order_amount=min_order_num if min_order_num is not None else 0.0,
        is_active=normalize_flag(_first_present(raw, "is_active", "active"), True),
        id=normalize_text(raw.get("id")) or None,
    )


def zone_problems(zone: ZoneRow) -> List[str]:
    problems: List[str] = []
    label = zone.zone_name or "?"
    if not zone.city:
        problems.append(f"{label}: city is required")
    if not zone.zone_name:
        problems.append("zone name is required")
    fee = zone.delivery_fee
    if fee is None or not math.isfinite(fee):
        problems.append(f"{label}: delivery fee must be a number")
    elif fee < 0:
        problems.append(f"{label}: delivery fee must be >= 0")
    mo = zone.min_order_amount
    if mo is None or not math.isfinite(mo):
        problems.append(f"{label}: minimum order must be a number")
    elif mo < 0:
        problems.append(f"{label}: minimum order must be >= 0")
    return problems


def is_valid_zone(zone: ZoneRow) -> bool:
    return not zone_problems(zone)


def reconcile_zones(zones: Iterable[ZoneRow]) -> List[ZoneRow]:
    """
    Filtert ongeldige zones en ontdubbelt op (stad, zone) zonder hoofdletters.

    De eerste schrijfwijze van een stad wordt het label voor alle zones in die
    stad; bij dubbele zones wint de eerste.
    """
    city_labels: Dict[str, str] = {}
    seen: Set[Tuple[str, str]] = set()
    out: List[ZoneRow] = []
    for z in zones:
        if not is_valid_zone(z):
            continue
        ck = group_key(z.city)
        key = (ck, group_key(z.zone_name))
        if key in seen:
            continue
        seen.add(key)
        city = city_labels.setdefault(ck, normalize_text(z.city))
        out.append(ZoneRow(
            city=city,
            zone_name=normalize_text(z.zone_name),
            delivery_fee=z.delivery_fee,
            min_order_amount=z.min_order_amount,
            is_active=z.is_active,
            id=z.id,
        ))
    return out


def partition_by_city(zones: Iterable[ZoneRow]) -> Dict[str, List[str]]:
    names: Dict[str, List[str]] = {}
    for z in zones:
        names.setdefault(z.city, []).append(z.zone_name)
    return names


def build_zone_batch(raw_zones: Iterable[Any], fallback_city: Any = "") -> ZoneBatch:
    """Handmatig opslaan: één foute zone blokkeert de hele batch."""
    normalized = [normalize_zone(z, fallback_city) for z in raw_zones]
    problems = [p for z in normalized for p in zone_problems(z)]
    if problems:
        raise CatalogValidationError(problems[0], problems)
    zones = reconcile_zones(normalized)
    if not zones:
        raise CatalogValidationError("Add at least one area before saving.")
    return ZoneBatch(zones=zones, names_by_city=partition_by_city(zones))


def replace_zones(store, restaurant_id: str, batch: ZoneBatch) -> int:
    """
    Safe-replace per stad: verwijder opgeslagen zones van (restaurant, stad)
    met een naam uit de batch, voeg daarna de zones van die stad toe.

    Elke stad is een eigen eenheid; over steden heen is dit niet atomair.
    Zones van andere steden en niet-genoemde zones blijven staan.
    """
    replaced: List[str] = []
    for city, names in batch.names_by_city.items():
        try:
            store.replace_city_zones(restaurant_id, city, names, batch.zones_for(city))
        except Exception as e:
            log.error(f"zone replace failed restaurant={restaurant_id} city={city}: {e}")
            raise ZoneReplaceError(city, replaced, e) from e
        replaced.append(city)
        log.info(f"zones replaced restaurant={restaurant_id} city={city} n={len(names)}")
    return len(batch.zones)


# ---------- Gebiedskeuze (multi-select + eigen gebieden) ----------

def unique_areas(names: Iterable[Any]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for name in names:
        key = group_key(name)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(normalize_text(name))
    return out


def split_pasted_areas(text: Any) -> List[str]:
    # geplakte lijst: komma, puntkomma, tab of nieuwe regel als scheiding
    return unique_areas(re.split(r"[,;\n\t]+", "" if text is None else str(text)))


def is_predefined_area(name: Any, city: str) -> bool:
    key = group_key(name)
    return any(a.lower() == key for a in CITY_AREAS.get(city, ()))


def _pending(city: str, zone_name: str) -> Dict[str, Any]:
    return {"city": city, "zone_name": zone_name, "delivery_fee": "", "min_order_amount": "", "is_active": True}


def merge_area_selection(
    pending: Iterable[Mapping[str, Any]],
    selected: Iterable[Any],
    city: str,
) -> List[Dict[str, Any]]:
    """
    Verwerkt een (geplakte) multi-select keuze in de lijst met open zones.

    Eigen gebieden blijven altijd staan, vaste gebieden alleen als ze nog
    geselecteerd zijn (ingevulde tarieven blijven behouden). Nieuwe keuzes
    komen achteraan met lege tarieven.
    """
    pending = [dict(p) for p in pending if isinstance(p, Mapping)]
    if isinstance(selected, str):
        selected = split_pasted_areas(selected)
    selected_names = unique_areas(selected)
    custom_names = [p.get("zone_name") for p in pending if not is_predefined_area(p.get("zone_name"), city)]
    keep_keys = {group_key(n) for n in list(selected_names) + custom_names}
    kept: List[Dict[str, Any]] = []
    existing: Set[str] = set()
    for p in pending:
        key = group_key(p.get("zone_name"))
        if key in keep_keys and key not in existing:
            existing.add(key)
            kept.append(p)
    added = [_pending(city, n) for n in selected_names if group_key(n) not in existing]
    return kept + added


def add_custom_area(
    pending: Iterable[Mapping[str, Any]],
    text: Any,
    city: str,
    max_len: int = MAX_AREA_NAME_LEN,
) -> List[Dict[str, Any]]:
    pending = [dict(p) for p in pending if isinstance(p, Mapping)]
    name = normalize_text(text)
    if not name:
        raise CatalogValidationError("Enter a valid area name.")
    if len(name) > max_len:
        raise CatalogValidationError(f"Area name must be {max_len} characters or less.")
    key = group_key(name)
    if is_predefined_area(name, city) or any(group_key(p.get("zone_name")) == key for p in pending):
        raise CatalogValidationError("Area already exists.")
    return pending + [_pending(city, name)]
