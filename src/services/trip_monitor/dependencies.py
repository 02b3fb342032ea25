# src/services/trip_monitor/dependencies.py
"""
Зависимости для Trip Monitor.
"""

from __future__ import annotations

from typing import Optional

from src.common.constants import TypeMsg
from src.common.logger import log_info
from src.core.monitoring import TripMonitorService
from src.infra.database import DatabaseManager, close_db, get_db, init_db

_db: Optional[DatabaseManager] = None
_monitor_service: Optional[TripMonitorService] = None


async def init_dependencies() -> None:
    """Инициализация всех зависимостей сервиса."""
    global _db, _monitor_service

    await init_db()
    _db = get_db()
    _monitor_service = TripMonitorService(_db)

    await log_info("Trip Monitor инициализирован", type_msg=TypeMsg.INFO)


async def close_dependencies() -> None:
    """Закрытие всех ресурсов."""
    global _db, _monitor_service

    if _db is not None:
        await close_db()
        _db = None

    _monitor_service = None


def get_database() -> DatabaseManager:
    if _db is None:
        raise RuntimeError("DatabaseManager не инициализирован")
    return _db


def get_monitor_service() -> TripMonitorService:
    """Получение сервиса проверки поездок."""
    if _monitor_service is None:
        raise RuntimeError("TripMonitorService не инициализирован")
    return _monitor_service
