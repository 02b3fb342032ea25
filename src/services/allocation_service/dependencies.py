# src/services/allocation_service/dependencies.py
"""
Зависимости для Allocation Service.
Инициализация и управление ресурсами.
"""

from __future__ import annotations

from typing import Optional

from src.common.constants import TypeMsg
from src.common.logger import log_info
from src.core.allocation import AllocationService
from src.core.identity import IdentityResolver
from src.infra.database import DatabaseManager, close_db, get_db, init_db

# Глобальные экземпляры
_db: Optional[DatabaseManager] = None
_identity: Optional[IdentityResolver] = None
_allocation_service: Optional[AllocationService] = None


async def init_dependencies() -> None:
    """Инициализация всех зависимостей сервиса."""
    global _db, _identity, _allocation_service

    await init_db()
    _db = get_db()
    _identity = IdentityResolver()
    _allocation_service = AllocationService(_db)

    await log_info("Allocation Service инициализирован", type_msg=TypeMsg.INFO)


async def close_dependencies() -> None:
    """Закрытие всех ресурсов."""
    global _db, _identity, _allocation_service

    if _identity is not None:
        await _identity.close()
        _identity = None

    if _db is not None:
        await close_db()
        _db = None

    _allocation_service = None


def get_database() -> DatabaseManager:
    """Получение экземпляра DatabaseManager."""
    if _db is None:
        raise RuntimeError("DatabaseManager не инициализирован")
    return _db


def get_identity_resolver() -> IdentityResolver:
    """Получение резолвера идентичности."""
    if _identity is None:
        raise RuntimeError("IdentityResolver не инициализирован")
    return _identity


def get_allocation_service() -> AllocationService:
    """Получение сервиса распределения."""
    if _allocation_service is None:
        raise RuntimeError("AllocationService не инициализирован")
    return _allocation_service
