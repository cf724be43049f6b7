from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _num(value: float) -> Any:
    # 450.0 -> 450 in JSON, zoals de bot het verwacht
    return int(value) if float(value).is_integer() else value


@dataclass
class CatalogItem:
    id: str
    name: str
    price: float
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "name": self.name, "price": _num(self.price)}
        if self.description:
            d["description"] = self.description
        return d

@dataclass
class CatalogGroup:
    name: str
    items: List[CatalogItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "items": [it.to_dict() for it in self.items]}

@dataclass
class MenuRow:
    id: str = ""
    category: str = ""
    name: str = ""
    price: Optional[float] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "name": self.name,
            "price": _num(self.price) if self.price is not None else None,
            "description": self.description,
        }

@dataclass
class ZoneRow:
    city: str
    zone_name: str
    delivery_fee: Optional[float] = None
    min_order_amount: Optional[float] = 0.0
    is_active: bool = True
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "zone_name": self.zone_name,
            "delivery_fee": _num(self.delivery_fee) if self.delivery_fee is not None else None,
            "min_order_amount": _num(self.min_order_amount) if self.min_order_amount is not None else None,
            "is_active": self.is_active,
        }

@dataclass
class ZoneBatch:
    zones: List[ZoneRow]
    names_by_city: Dict[str, List[str]]

    def zones_for(self, city: str) -> List[ZoneRow]:
        return [z for z in self.zones if z.city == city]
