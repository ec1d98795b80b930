from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrms.hrms.database.bootstrap import apply_sql_file, ensure_master_admin
from src.hrms.hrms.database.connection import DatabaseConnection, DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))

    apply_sql_file(conn, path=REPO_ROOT / "database" / "seed.sql")
    ensure_master_admin(conn, email=settings.MASTER_ADMIN_EMAIL, password=settings.MASTER_ADMIN_PASSWORD)

    cfg = conn.config
    print(f"OK: Seeded database -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database}")


if __name__ == "__main__":
    main()
