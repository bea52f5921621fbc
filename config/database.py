from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .settings import settings

__all__ = ["DATABASE_URL", "get_engine_config", "get_engine"]

DATABASE_URL: str = settings.DATABASE_URL


def get_engine_config(url: str = DATABASE_URL) -> Dict[str, Any]:
    """Get engine configuration based on database type."""
    config: Dict[str, Any] = {}

    if url.startswith("sqlite"):
        config["connect_args"] = {"check_same_thread": False}
    else:
        config.update({
            "pool_size": int(os.getenv('DB_POOL_SIZE', '5')),
            "max_overflow": int(os.getenv('DB_MAX_OVERFLOW', '10')),
            "pool_timeout": int(os.getenv('DB_POOL_TIMEOUT', '30')),
            "pool_recycle": int(os.getenv('DB_POOL_RECYCLE', '3600')),
            "pool_pre_ping": True,
        })

    config["echo"] = os.getenv('DB_ECHO', '').lower() == 'true'

    return config


@lru_cache(maxsize=None)
def get_engine(url: str = DATABASE_URL) -> Engine:
    """Create (once per URL) the engine used by SQLAlchemyConnection."""
    return create_engine(url, **get_engine_config(url))
