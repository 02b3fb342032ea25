# src/core/tracking/repository.py
"""
Репозиторий точек геолокации.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import asyncpg

from src.common.exceptions import DeliveryNotFound, DriverNotFound, InvalidInput, StoreError
from src.common.logger import log_error
from src.core.tracking.models import LocationSample
from src.infra.database import DatabaseManager

_SAMPLE_COLUMNS = """
    id, delivery_id, driver_id, latitude, longitude, accuracy, speed,
    heading, altitude, battery_level, is_moving, created_at
"""


class LocationRepository:
    """Репозиторий таблицы locations (только добавление и чтение)."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def get_latest_sample(self, delivery_id: str) -> Optional[LocationSample]:
        """
        Возвращает последнюю точку доставки.
        При равных created_at порядок задаёт последовательность id.

        Raises:
            InvalidInput: delivery_id не является UUID
        """
        try:
            row = await self._db.fetchrow(
                f"""
                SELECT {_SAMPLE_COLUMNS}
                FROM locations
                WHERE delivery_id = $1
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                delivery_id,
            )
        except asyncpg.DataError as e:
            raise InvalidInput("Malformed delivery_id", delivery_id=delivery_id) from e
        except Exception as e:
            await log_error(f"Ошибка получения последней точки доставки {delivery_id}: {e}")
            raise StoreError(str(e), operation="location_query_failed") from e

        return self._row_to_sample(row) if row is not None else None

    async def insert_sample(
        self,
        *,
        delivery_id: str,
        driver_id: str,
        latitude: float,
        longitude: float,
        accuracy: Optional[float],
        speed: float,
        heading: Optional[float],
        altitude: Optional[float],
        battery_level: Optional[float],
        is_moving: bool,
        created_at: datetime,
    ) -> LocationSample:
        """
        Сохраняет обогащённую точку и возвращает сохранённую строку.

        Raises:
            InvalidInput: Идентификатор не является UUID
            DeliveryNotFound, DriverNotFound: Ссылка на несуществующую запись
        """
        try:
            row = await self._db.fetchrow(
                f"""
                INSERT INTO locations (
                    delivery_id, driver_id, latitude, longitude, accuracy, speed,
                    heading, altitude, battery_level, is_moving, created_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                RETURNING {_SAMPLE_COLUMNS}
                """,
                delivery_id,
                driver_id,
                latitude,
                longitude,
                accuracy,
                speed,
                heading,
                altitude,
                battery_level,
                is_moving,
                created_at,
            )
        except asyncpg.DataError as e:
            raise InvalidInput("Malformed identifier", delivery_id=delivery_id, driver_id=driver_id) from e
        except asyncpg.ForeignKeyViolationError as e:
            if "driver" in (e.constraint_name or ""):
                raise DriverNotFound(driver_id=driver_id) from e
            raise DeliveryNotFound(delivery_id=delivery_id) from e
        except Exception as e:
            await log_error(f"Ошибка сохранения точки доставки {delivery_id}: {e}")
            raise StoreError(str(e), operation="location_insert_failed") from e

        return self._row_to_sample(row)

    @staticmethod
    def _row_to_sample(row: Any) -> LocationSample:
        data = dict(row)
        data["delivery_id"] = str(data["delivery_id"])
        data["driver_id"] = str(data["driver_id"])
        return LocationSample(**data)
