import io
import os

# vóór de eerste import van src.*: in-memory DB en vaste admin-login
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_USER"] = "admin"
os.environ["ADMIN_PASS"] = "secret"

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from src.infra.catalog_store import SqlCatalogStore
from src.infra.db import init_db, make_engine


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    init_db(eng)
    return eng


@pytest.fixture
def store(engine):
    return SqlCatalogStore(engine)


@pytest.fixture
def client(store):
    from src.app.app import app
    from src.app.dashboard.base import get_store

    app.dependency_overrides[get_store] = lambda: store
    c = TestClient(app)
    c.auth = ("admin", "secret")
    yield c
    app.dependency_overrides.clear()


def xlsx_bytes(rows):
    wb = Workbook()
    ws = wb.active
    for r in rows:
        ws.append(r)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def make_xlsx():
    return xlsx_bytes
