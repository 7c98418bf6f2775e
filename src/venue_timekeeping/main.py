from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv

from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("venue_timekeeping")


def load_settings(module_name: Optional[str] = None) -> ModuleType:
    load_dotenv(override=False)
    return importlib.import_module(module_name or get_settings_module())


def configure_logging(settings: ModuleType) -> None:
    logging.basicConfig(
        level=logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_container(module_name: Optional[str] = None) -> Container:
    settings = load_settings(module_name)
    configure_logging(settings)
    db_config = settings.DB_CONFIG

    logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        settings.__name__,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    return build_container(settings=settings)
