from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.logging_config import configure_logging, get_logger
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.record_store import RecordStore
from .governance.controller import register as register_governance
from .headcount.controller import register as register_headcount

logger = get_logger("main")

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(*, store: Optional[RecordStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    backend = getattr(settings, "RECORD_STORE", "mysql")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "Starting headcount workflow",
        extra={
            "settings": settings_module,
            "record_store": backend,
            "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        },
    )

    if store is None and backend == "mysql":
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready", extra={"tables": len(list_tables(db_config))})
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("Demo seed ready")

    container = build_container(
        db_config=db_config,
        record_store=backend,
        store=store,
        notification_webhook_url=getattr(settings, "NOTIFICATION_WEBHOOK_URL", None),
        notification_timeout=float(getattr(settings, "NOTIFICATION_TIMEOUT_SECONDS", 5.0)),
    )
    app.extensions["headcount_container"] = container

    register_headcount(app, container)
    register_governance(app, container)

    return app
