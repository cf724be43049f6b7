import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import text
from .db import engine, init_db
from .settings import settings

# ---------- DB logging handler ----------

class DBHandler(logging.Handler):
    def __init__(self, eng=None):
        super().__init__()
        self.engine = eng or engine

    def emit(self, record: logging.LogRecord) -> None:
        msg = self.format(record)
        lvl = record.levelname
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    text("INSERT INTO logs (level, msg) VALUES (:lvl, :msg)"),
                    {"lvl": lvl, "msg": msg},
                )
        except Exception:
            # logging mag de request nooit breken
            self.handleError(record)


def setup_logging() -> None:
    init_db()
    root = logging.getLogger()
    root.setLevel(getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO))
    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        root.addHandler(sh)
    if not any(isinstance(h, DBHandler) for h in root.handlers):
        dbh = DBHandler()
        dbh.setLevel(logging.INFO)
        dbh.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        root.addHandler(dbh)

# ---------- Queries voor dashboard ----------

def get_events(
    limit: int = 300,
    level: Optional[str] = None,
    q: Optional[str] = None,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    sql = "SELECT ts, level, msg FROM logs"
    conds: List[str] = []
    params: Dict[str, Any] = {}
    if level in ("INFO", "WARNING", "ERROR"):
        conds.append("level = :lvl")
        params["lvl"] = level
    if q:
        conds.append("LOWER(msg) LIKE :q")
        params["q"] = f"%{q.lower()}%"
    if conds:
        sql += " WHERE " + " AND ".join(conds)
    sql += " ORDER BY id DESC"
    sql += f" LIMIT {int(limit)} OFFSET {int(max(0, offset))}"
    with engine.connect() as conn:
        rows = conn.execute(text(sql), params).mappings().all()
    return [dict(r) for r in rows]
