"""
Normalisatie van losse spreadsheet- en formulierwaarden.

Alle functies zijn totaal: elke invoer (None, getallen, datums, rommel) levert
een waarde of None op, nooit een exceptie. Parsefouten zijn data; de aanroeper
filtert de rij weg.
"""
from __future__ import annotations
import math
import re
from typing import Any, Optional

DEFAULT_GROUP = "Uncategorized"

_WS_RE = re.compile(r"\s+")
_HEADER_SEP_RE = re.compile(r"[\s-]+")
_PRICE_STRIP_RE = re.compile(r"[^\d.\-]")
_PRICE_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_SLUG_RE = re.compile(r"[^a-z0-9]+")

_TRUE_WORDS = {"1", "true", "yes", "y", "active", "on", "ja"}
_FALSE_WORDS = {"0", "false", "no", "n", "inactive", "off", "nee"}


def normalize_header(text: Any) -> str:
    s = "" if text is None else str(text)
    if s.startswith("\ufeff"):
        s = s[1:]
    return _HEADER_SEP_RE.sub("_", s.strip().lower())


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        s = str(value)
    except Exception:
        return ""
    return _WS_RE.sub(" ", s).strip()


def normalize_price(value: Any) -> Optional[float]:
    """'PKR 1,250' -> 1250.0, '' / 'abc' -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            num = float(value)
        except OverflowError:
            return None
        return num if math.isfinite(num) else None
    raw = normalize_text(value)
    if not raw:
        return None
    cleaned = _PRICE_STRIP_RE.sub("", raw)
    if not _PRICE_RE.fullmatch(cleaned):
        return None
    num = float(cleaned)
    return num if math.isfinite(num) else None


def normalize_group_name(value: Any, default: str = DEFAULT_GROUP) -> str:
    return normalize_text(value) or default


def normalize_flag(value: Any, default: bool = True) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return value != 0 if math.isfinite(value) else default
    if isinstance(value, int):
        return value != 0
    s = normalize_text(value).lower()
    if s in _TRUE_WORDS:
        return True
    if s in _FALSE_WORDS:
        return False
    return default


def group_key(value: Any) -> str:
    # vergelijkingssleutel: 'Karachi ' == 'karachi'
    return normalize_text(value).lower()


def slugify(value: Any) -> str:
    s = _SLUG_RE.sub("-", normalize_text(value).lower()).strip("-")
    return s or "item"
