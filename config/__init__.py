from .database import get_engine, DATABASE_URL
from .settings import settings

__all__ = ["get_engine", "DATABASE_URL", "settings"]
