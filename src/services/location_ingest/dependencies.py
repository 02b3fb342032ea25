# src/services/location_ingest/dependencies.py
"""
Зависимости для Location Ingest.
"""

from __future__ import annotations

from typing import Optional

from src.common.constants import TypeMsg
from src.common.logger import log_info
from src.config import settings
from src.core.tracking import LocationIngestService, RateLimiter, create_rate_limiter
from src.infra.database import DatabaseManager, close_db, get_db, init_db
from src.infra.redis_client import RedisClient, close_redis, get_redis, init_redis

_db: Optional[DatabaseManager] = None
_redis: Optional[RedisClient] = None
_rate_limiter: Optional[RateLimiter] = None
_ingest_service: Optional[LocationIngestService] = None


async def init_dependencies() -> None:
    """Инициализация всех зависимостей сервиса."""
    global _db, _redis, _rate_limiter, _ingest_service

    await init_db()
    _db = get_db()

    # Redis нужен только для общего счётчика rate limit
    if settings.tracking.RATE_LIMIT_BACKEND == "redis":
        await init_redis()
        _redis = get_redis()

    _rate_limiter = create_rate_limiter(redis=_redis)
    _ingest_service = LocationIngestService(_db, rate_limiter=_rate_limiter)

    await log_info(
        f"Location Ingest инициализирован (rate limit: {type(_rate_limiter).__name__}, "
        f"{_rate_limiter.max_updates}/{_rate_limiter.window_seconds}s)",
        type_msg=TypeMsg.INFO,
    )


async def close_dependencies() -> None:
    """Закрытие всех ресурсов."""
    global _db, _redis, _rate_limiter, _ingest_service

    if _redis is not None:
        await close_redis()
        _redis = None

    if _db is not None:
        await close_db()
        _db = None

    _rate_limiter = None
    _ingest_service = None


def get_database() -> DatabaseManager:
    if _db is None:
        raise RuntimeError("DatabaseManager не инициализирован")
    return _db


def get_redis_client() -> Optional[RedisClient]:
    """Redis клиент (None при backend=memory)."""
    return _redis


def get_ingest_service() -> LocationIngestService:
    """Получение сервиса приёма геолокации."""
    if _ingest_service is None:
        raise RuntimeError("LocationIngestService не инициализирован")
    return _ingest_service
