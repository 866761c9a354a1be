from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .schedules.controller import register as register_schedules
from .submissions.controller import register as register_submissions
from .tokens.controller import register as register_tokens

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PUBLIC_ORIGIN"] = getattr(settings, "PUBLIC_ORIGIN", "")

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            manager_code_hash=getattr(settings, "MANAGER_OVERRIDE_CODE_HASH", ""),
            settings=settings,
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(container.conn, schema_path=schema_path)
            logger.info("Schema ready (tables=%s)", len(list_tables(container.conn)))

    if not getattr(settings, "MANAGER_OVERRIDE_CODE_HASH", ""):
        logger.warning("No manager override code configured; double bookings cannot be overridden")

    register_tokens(app, container)
    register_submissions(app, container)
    register_schedules(app, container)

    return app
