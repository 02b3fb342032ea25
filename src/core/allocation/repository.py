# src/core/allocation/repository.py
"""
Репозиторий распределения грузов.
Чтение водителей, ТС, кузовов и грузов; атомарная фиксация доставки.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Optional

import asyncpg

from src.common.constants import TypeMsg
from src.common.exceptions import LoadNotFound, StoreError
from src.common.logger import log_error, log_info
from src.core.allocation.models import (
    CargoBody,
    Delivery,
    Driver,
    Load,
    Vehicle,
    derive_load_status,
)
from src.infra.database import DatabaseManager


def _id(value: Any) -> Optional[str]:
    """asyncpg возвращает UUID: приводим к строке."""
    return str(value) if value is not None else None


class AllocationRepository:
    """Репозиторий распределения."""

    def __init__(self, db: DatabaseManager) -> None:
        """
        Args:
            db: Менеджер базы данных (Dependency Injection)
        """
        self._db = db

    async def _fetchrow(self, operation: str, query: str, *args: Any) -> Optional[asyncpg.Record]:
        """
        Выполняет чтение одной строки.
        Некорректный идентификатор трактуется как отсутствие сущности,
        прочие сбои хранилища поднимаются как StoreError.
        """
        try:
            return await self._db.fetchrow(query, *args)
        except asyncpg.DataError:
            return None
        except Exception as e:
            await log_error(f"Ошибка запроса {operation}: {e}")
            raise StoreError(str(e), operation=operation) from e

    # =========================================================================
    # ЧТЕНИЕ
    # =========================================================================

    async def get_driver_by_user(self, user_id: str) -> Optional[Driver]:
        """Возвращает водителя по ID пользователя провайдера идентификации."""
        row = await self._fetchrow(
            "driver_query_failed",
            "SELECT id, user_id, driver_class FROM drivers WHERE user_id = $1",
            user_id,
        )
        if row is None:
            return None
        return Driver(id=_id(row["id"]), user_id=_id(row["user_id"]), driver_class=row["driver_class"])

    async def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        row = await self._fetchrow(
            "vehicle_query_failed",
            "SELECT id, driver_id, has_integrated_body, body_id FROM vehicles WHERE id = $1",
            vehicle_id,
        )
        if row is None:
            return None
        return Vehicle(
            id=_id(row["id"]),
            driver_id=_id(row["driver_id"]),
            has_integrated_body=bool(row["has_integrated_body"]),
            body_id=_id(row["body_id"]),
        )

    async def get_body(self, body_id: str) -> Optional[CargoBody]:
        row = await self._fetchrow(
            "body_query_failed",
            "SELECT id, driver_id, capacity_kg FROM cargo_bodies WHERE id = $1",
            body_id,
        )
        if row is None:
            return None
        return CargoBody(id=_id(row["id"]), driver_id=_id(row["driver_id"]), capacity_kg=row["capacity_kg"])

    async def get_load(self, load_id: str) -> Optional[Load]:
        row = await self._fetchrow(
            "load_query_failed",
            "SELECT id, total_kg, available_kg, divisible FROM loads WHERE id = $1",
            load_id,
        )
        return self._row_to_load(row) if row is not None else None

    # =========================================================================
    # АТОМАРНАЯ ФИКСАЦИЯ
    # =========================================================================

    async def commit_allocation(
        self,
        *,
        load_id: str,
        driver_id: str,
        vehicle_id: str,
        body_id: str,
        allocated_kg: Decimal,
        validate: Callable[[Load, Decimal], None],
    ) -> Delivery:
        """
        Создаёт доставку и списывает вес груза в одной транзакции.

        Строка груза блокируется (SELECT ... FOR UPDATE), поэтому конкурентные
        принятия одного груза выполняются последовательно, и validate видит
        актуальный остаток. Любое исключение откатывает транзакцию целиком.

        Args:
            validate: Проверка груза под блокировкой (бросает доменную ошибку)
        """
        try:
            async with self._db.transaction() as conn:
                row = await conn.fetchrow(
                    "SELECT id, total_kg, available_kg, divisible FROM loads WHERE id = $1 FOR UPDATE",
                    load_id,
                )
                if row is None:
                    raise LoadNotFound(load_id=load_id)

                load = self._row_to_load(row)
                validate(load, allocated_kg)

                remaining = load.available_kg - allocated_kg
                status = derive_load_status(load.total_kg, remaining)

                delivery_row = await conn.fetchrow(
                    """
                    INSERT INTO deliveries (load_id, driver_id, vehicle_id, body_id, allocated_kg)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING id, load_id, driver_id, vehicle_id, body_id, allocated_kg, created_at
                    """,
                    load_id,
                    driver_id,
                    vehicle_id,
                    body_id,
                    allocated_kg,
                )
                await conn.execute(
                    "UPDATE loads SET available_kg = $2, status = $3 WHERE id = $1",
                    load_id,
                    remaining,
                    status.value,
                )
        except asyncpg.PostgresError as e:
            await log_error(f"Ошибка фиксации распределения груза {load_id}: {e}")
            raise StoreError(str(e), operation="accept_failed") from e

        delivery = self._row_to_delivery(delivery_row)
        await log_info(
            f"Груз {load_id}: распределено {allocated_kg} кг, остаток {remaining} кг ({status.value})",
            type_msg=TypeMsg.INFO,
            extra={"delivery_id": delivery.id, "driver_id": driver_id},
        )
        return delivery

    # =========================================================================
    # ВСПОМОГАТЕЛЬНЫЕ МЕТОДЫ
    # =========================================================================

    @staticmethod
    def _row_to_load(row: asyncpg.Record) -> Load:
        return Load(
            id=_id(row["id"]),
            total_kg=row["total_kg"],
            available_kg=row["available_kg"],
            divisible=row["divisible"],
        )

    @staticmethod
    def _row_to_delivery(row: asyncpg.Record) -> Delivery:
        return Delivery(
            id=_id(row["id"]),
            load_id=_id(row["load_id"]),
            driver_id=_id(row["driver_id"]),
            vehicle_id=_id(row["vehicle_id"]),
            body_id=_id(row["body_id"]),
            allocated_kg=row["allocated_kg"],
            created_at=row["created_at"],
        )
