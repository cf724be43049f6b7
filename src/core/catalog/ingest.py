"""
Import van menu's en bezorgzones uit .csv en .xlsx.

Beide formaten leveren dezelfde SheetTable op (genormaliseerde kolomnamen +
records). Structurele fouten (onbekend formaat, ontbrekende kolommen, lege
sheet, CSV-syntax) breken de import af met CatalogImportError. Losse foute
rijen vallen stil weg; blijft er niets over, dan is dat ook een fout.
"""
from __future__ import annotations
import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from charset_normalizer import from_bytes
from openpyxl import load_workbook

from .errors import CatalogImportError
from .models import MenuRow, ZoneRow
from .normalize import (
    DEFAULT_GROUP, normalize_group_name, normalize_header, normalize_price, normalize_text,
)
from .rows import drop_duplicate_rows, ensure_row_ids, filter_valid_rows
from .zones import normalize_zone, reconcile_zones

log = logging.getLogger("catalog.import")

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")

MENU_REQUIRED_HEADERS = ("item_name", "price")
ZONE_REQUIRED_HEADERS = ("zone_name", "delivery_fee")

# alternatieve kolomnamen die we in de praktijk tegenkomen
HEADER_ALIASES: Dict[str, str] = {
    "name": "item_name",
    "item": "item_name",
    "id": "item_id",
    "area": "zone_name",
    "zone": "zone_name",
    "fee": "delivery_fee",
    "min_order": "min_order_amount",
    "active": "is_active",
}

MENU_TEMPLATE_CSV = (
    "category,item_name,price,description\n"
    "Burgers,Classic Burger,450,Optional description\n"
)

ZONE_TEMPLATE_CSV = (
    "city,zone_name,delivery_fee,min_order_amount,is_active\n"
    "Karachi,Gulshan,150,1000,yes\n"
)


@dataclass
class SheetTable:
    headers: List[str]
    records: List[Dict[str, Any]] = field(default_factory=list)


def canonical_header(text: Any) -> str:
    h = normalize_header(text)
    return HEADER_ALIASES.get(h, h)


def detect_format(filename: str) -> str:
    name = (filename or "").strip().lower()
    for ext in SUPPORTED_EXTENSIONS:
        if name.endswith(ext):
            return ext[1:]
    raise CatalogImportError("Only .csv and .xlsx files are supported.")


def _blank(row: Sequence[Any]) -> bool:
    return not any(normalize_text(c) for c in row)


def _build_table(header_row: Sequence[Any], data_rows: Sequence[Sequence[Any]]) -> SheetTable:
    headers = [canonical_header(h) for h in header_row]
    index: Dict[str, int] = {}
    for idx, h in enumerate(headers):
        if h and h not in index:
            index[h] = idx
    records = []
    for row in data_rows:
        if _blank(row):
            continue
        records.append({h: (row[i] if i < len(row) else "") for h, i in index.items()})
    return SheetTable(headers=[h for h in headers if h], records=records)


def require_headers(table: SheetTable, required: Sequence[str]) -> None:
    missing = [h for h in required if h not in table.headers]
    if missing:
        raise CatalogImportError(f"Missing required columns: {', '.join(missing)}.")


# ---------- CSV ----------

def decode_text(raw: bytes) -> str:
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    # Excel-export in Windows-1252 e.d.
    match = from_bytes(raw).best()
    if match is None:
        raise CatalogImportError("Could not detect the text encoding of the CSV file.")
    return str(match)


def read_csv_table(raw: bytes) -> SheetTable:
    text = decode_text(raw)
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        rows = [r for r in reader if not _blank(r)]
    except csv.Error as e:
        raise CatalogImportError(str(e)) from e
    if not rows:
        return SheetTable(headers=[])
    header, data = rows[0], rows[1:]
    width = len(header)
    for n, row in enumerate(data, start=2):
        if len(row) > width:
            extra = row[width:]
            if not _blank(extra):
                raise CatalogImportError(
                    f"Too many fields in row {n}: expected {width} fields but parsed {len(row)}"
                )
    return _build_table(header, data)


# ---------- XLSX ----------

def read_xlsx_table(raw: bytes) -> SheetTable:
    try:
        wb = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise CatalogImportError(f"Failed to read workbook: {e}") from e
    try:
        if not wb.sheetnames:
            raise CatalogImportError("Excel file is missing a worksheet.")
        ws = wb[wb.sheetnames[0]]
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
    # lege regels boven de kop tellen niet mee
    while rows and _blank(rows[0]):
        rows.pop(0)
    if not rows:
        raise CatalogImportError("Excel file is empty.")
    header = ["" if h is None else str(h) for h in rows[0]]
    return _build_table(header, rows[1:])


def read_table(filename: str, raw: bytes) -> SheetTable:
    fmt = detect_format(filename)
    if fmt == "csv":
        return read_csv_table(raw)
    return read_xlsx_table(raw)


# ---------- Menu ----------

def menu_rows_from_table(table: SheetTable, default_group: str = DEFAULT_GROUP) -> List[MenuRow]:
    rows: List[MenuRow] = []
    for rec in table.records:
        rows.append(MenuRow(
            id=normalize_text(rec.get("item_id")),
            category=normalize_group_name(rec.get("category"), default_group),
            name=normalize_text(rec.get("item_name")),
            price=normalize_price(rec.get("price")),
            description=normalize_text(rec.get("description")) or None,
        ))
    return rows


def import_menu_file(filename: str, raw: bytes, default_group: str = DEFAULT_GROUP) -> List[MenuRow]:
    table = read_table(filename, raw)
    require_headers(table, MENU_REQUIRED_HEADERS)
    candidates = menu_rows_from_table(table, default_group)
    rows = drop_duplicate_rows(filter_valid_rows(candidates))
    if not rows:
        raise CatalogImportError("No valid rows found in the file.")
    log.info(f"menu import {filename}: {len(rows)} of {len(candidates)} rows kept")
    return ensure_row_ids(rows, default_group)


# ---------- Bezorgzones ----------

def zone_rows_from_table(table: SheetTable, default_city: str = "") -> List[ZoneRow]:
    return [normalize_zone(rec, default_city) for rec in table.records]


def import_zone_file(filename: str, raw: bytes, default_city: str = "") -> List[ZoneRow]:
    table = read_table(filename, raw)
    require_headers(table, ZONE_REQUIRED_HEADERS)
    candidates = zone_rows_from_table(table, default_city)
    zones = reconcile_zones(candidates)
    if not zones:
        raise CatalogImportError("No valid rows found in the file.")
    log.info(f"zone import {filename}: {len(zones)} of {len(candidates)} rows kept")
    return zones
