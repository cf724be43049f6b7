from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from src.infra.settings import settings

DATABASE_URL = settings.DATABASE_URL


def make_engine(url: str):
    """Postgres in productie, SQLite lokaal en in tests."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "future": True}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # in-memory: één gedeelde connectie, anders ziet elke thread een lege DB
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    # Render/Neon/PG: SSL vaak verplicht; SQLAlchemy v2 pakt sslmode uit URL
    return create_engine(url, pool_pre_ping=True, future=True)


engine = make_engine(DATABASE_URL)


def init_db(eng=None) -> None:
    """Maakt tabellen aan als ze nog niet bestaan."""
    eng = eng or engine
    if eng.dialect.name == "sqlite":
        pk, ts = "INTEGER PRIMARY KEY AUTOINCREMENT", "TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP"
    else:
        pk, ts = "BIGSERIAL PRIMARY KEY", "TIMESTAMPTZ NOT NULL DEFAULT now()"

    with eng.begin() as conn:
        # Generieke logs
        conn.exec_driver_sql(f"""
        CREATE TABLE IF NOT EXISTS logs (
          id      {pk},
          ts      {ts},
          level   VARCHAR(10) NOT NULL,
          msg     TEXT NOT NULL
        );
        """)

        # Menu per restaurant (canonieke JSON: categorieën met items)
        conn.exec_driver_sql(f"""
        CREATE TABLE IF NOT EXISTS menus (
          restaurant_id   VARCHAR(64) PRIMARY KEY,
          menu_items_json TEXT,
          updated_at      {ts}
        );
        """)

        # Bezorgzones
        conn.exec_driver_sql(f"""
        CREATE TABLE IF NOT EXISTS delivery_zones (
          id               {pk},
          restaurant_id    VARCHAR(64) NOT NULL,
          city             TEXT NOT NULL,
          zone_name        TEXT NOT NULL,
          delivery_fee     NUMERIC NOT NULL DEFAULT 0,
          min_order_amount NUMERIC NOT NULL DEFAULT 0,
          is_active        BOOLEAN NOT NULL DEFAULT TRUE,
          created_at       {ts}
        );
        """)
        conn.exec_driver_sql("""
        CREATE UNIQUE INDEX IF NOT EXISTS delivery_zones_unique
          ON delivery_zones (restaurant_id, city, zone_name);
        """)
        conn.exec_driver_sql("""
        CREATE INDEX IF NOT EXISTS idx_delivery_zones_city
          ON delivery_zones (restaurant_id, city);
        """)
