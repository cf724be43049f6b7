import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from src.app.dashboard.base import router as admin_router
from src.app.dashboard.menu_api import router as menu_router
from src.app.dashboard.zones_api import router as zones_router
from src.core.catalog.errors import CatalogImportError, CatalogValidationError, ZoneReplaceError
from src.infra.logs import setup_logging

setup_logging()
log = logging.getLogger("catalog.app")
app = FastAPI(title="catalog-dashboard")


@app.exception_handler(CatalogImportError)
async def _import_error(request: Request, exc: CatalogImportError):
    log.info(f"import rejected: {exc}")
    return JSONResponse({"ok": False, "error": str(exc)}, status_code=400)


@app.exception_handler(CatalogValidationError)
async def _validation_error(request: Request, exc: CatalogValidationError):
    return JSONResponse({"ok": False, "error": str(exc), "issues": exc.problems}, status_code=422)


@app.exception_handler(ZoneReplaceError)
async def _zone_replace_error(request: Request, exc: ZoneReplaceError):
    # deels opgeslagen: laat zien welke stad faalde
    return JSONResponse(
        {"ok": False, "error": str(exc), "city": exc.city, "replaced": exc.replaced},
        status_code=500,
    )


@app.get("/")
def read_root():
    return {"status": "ok", "message": "Catalog dashboard backend actief"}

@app.get("/healthz")
def health():
    return {"ok": True}

app.include_router(admin_router)
app.include_router(menu_router)
app.include_router(zones_router)
