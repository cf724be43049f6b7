from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
from src.core.catalog.models import ZoneRow

class CatalogStore(ABC):
    """Enige plek die duurzame opslag leest of schrijft."""

    @abstractmethod
    def load_menu(self, restaurant_id: str) -> Optional[Dict[str, Any]]:
        """Geeft {'menu_items_json': ..., 'updated_at': ...} of None."""
        pass

    @abstractmethod
    def save_menu(self, restaurant_id: str, menu_items_json: List[Dict[str, Any]]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def list_zones(self, restaurant_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def replace_city_zones(
        self,
        restaurant_id: str,
        city: str,
        zone_names: Sequence[str],
        zones: Sequence[ZoneRow],
    ) -> None:
        """Verwijder zones van (restaurant, stad) met naam in zone_names en voeg zones toe, als één eenheid."""
        pass
