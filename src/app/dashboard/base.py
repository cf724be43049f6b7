from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
import secrets

from src.infra.settings import settings
from src.infra.logs import get_events
from src.infra.catalog_store import SqlCatalogStore
from src.ports.catalog_store import CatalogStore

router = APIRouter()
security = HTTPBasic()


def require_admin(credentials: HTTPBasicCredentials = Depends(security)):
    ok_user = secrets.compare_digest(credentials.username, settings.ADMIN_USER)
    ok_pass = secrets.compare_digest(credentials.password, settings.ADMIN_PASS)
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )


def get_store() -> CatalogStore:
    """Persistence gateway; in tests te vervangen via dependency_overrides."""
    return SqlCatalogStore()


@router.get("/dashboard")
def dashboard_root():
    """Hoofd-dashboard met de beschikbare routes."""
    return {
        "message": "Catalog dashboard actief",
        "routes": {
            "Menu": "/dashboard/api/restaurants/{id}/menu",
            "Menu import": "/dashboard/api/restaurants/{id}/menu/import",
            "Menu template": "/dashboard/api/menu-template.csv",
            "Bezorgzones": "/dashboard/api/restaurants/{id}/delivery-zones",
            "Zone import": "/dashboard/api/restaurants/{id}/delivery-zones/import",
            "Zone template": "/dashboard/api/zone-template.csv",
            "Logs": "/dashboard/api/logs",
        },
    }


@router.get("/dashboard/api/logs", dependencies=[Depends(require_admin)])
def dashboard_logs(limit: int = 100, level: Optional[str] = None, q: Optional[str] = None):
    return {"ok": True, "data": get_events(limit=min(max(limit, 1), 500), level=level, q=q)}
