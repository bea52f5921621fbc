from __future__ import annotations

import os


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "scoped-query")
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0.0")
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # Logging
    LOG_CHANNEL: str = os.getenv("LOG_CHANNEL", "stderr")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "warning")

    # Record every executed statement on the `query` log channel
    QUERY_LOG: bool = os.getenv("QUERY_LOG", "False").lower() == "true"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///:memory:")


settings = Settings()
