# src/core/tracking/service.py
"""
Сервис приёма геолокации.

Конвейер: проверка полей -> rate limit -> фильтр точности ->
расчёт расстояния и скорости от предыдущей точки -> сохранение.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from src.common.constants import LocationEventType, TypeMsg
from src.common.exceptions import InvalidInput, LowAccuracy, RateLimited
from src.common.logger import log_debug, log_info
from src.config.loader import TrackingSettings
from src.core.geo import calculate_distance
from src.core.tracking.models import (
    IngestResult,
    KinematicMetrics,
    LocationEvent,
    LocationInput,
)
from src.core.tracking.rate_limiter import RateLimiter
from src.core.tracking.repository import LocationRepository
from src.infra.database import DatabaseManager


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationIngestService:
    """Приём одной точки геолокации."""

    def __init__(
        self,
        db: DatabaseManager | None = None,
        rate_limiter: RateLimiter | None = None,
        config: TrackingSettings | None = None,
        repository: LocationRepository | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            db: Менеджер базы данных
            rate_limiter: Ограничитель частоты по водителю
            config: Секция tracking (по умолчанию из конфига)
            repository: Репозиторий точек (для тестов)
            clock: Источник текущего времени (UTC)
        """
        if config is None:
            from src.config import settings
            config = settings.tracking
        if rate_limiter is None:
            from src.core.tracking.rate_limiter import MemoryRateLimiter
            rate_limiter = MemoryRateLimiter(config.RATE_LIMIT_MAX_UPDATES, config.RATE_LIMIT_WINDOW_SECONDS)
        if repository is None:
            if db is None:
                raise ValueError("Нужен db или repository")
            repository = LocationRepository(db)

        self._repo = repository
        self._limiter = rate_limiter
        self._config = config
        self._clock = clock

    async def ingest(self, location: LocationInput | None) -> IngestResult:
        """
        Обрабатывает точку геолокации.

        Raises:
            InvalidInput: Нет delivery_id, driver_id или координат
            RateLimited: Водитель превысил лимит обновлений
            LowAccuracy: Точность хуже порога
        """
        if (
            location is None
            or not location.delivery_id
            or not location.driver_id
            or location.lat is None
            or location.lon is None
        ):
            raise InvalidInput("Missing required fields")

        if not await self._limiter.allow(location.driver_id):
            raise RateLimited(driver_id=location.driver_id)

        if location.accuracy is not None and location.accuracy > self._config.MAX_ACCURACY_METERS:
            await log_debug(f"Точка отброшена: точность {location.accuracy} м")
            raise LowAccuracy(accuracy=location.accuracy)

        now = self._clock()
        previous = await self._repo.get_latest_sample(location.delivery_id)

        speed = location.speed if location.speed is not None else 0.0
        distance_km = 0.0

        if previous is not None:
            distance_km = calculate_distance(
                previous.latitude, previous.longitude, location.lat, location.lon,
            )
            elapsed_hours = (now - previous.created_at).total_seconds() / 3600
            # Совпадающие или перевёрнутые метки времени: берём скорость устройства
            if elapsed_hours > 0:
                speed = distance_km / elapsed_hours

        is_moving = (
            location.is_moving
            if location.is_moving is not None
            else speed > self._config.MOVING_SPEED_THRESHOLD_KMH
        )

        sample = await self._repo.insert_sample(
            delivery_id=location.delivery_id,
            driver_id=location.driver_id,
            latitude=location.lat,
            longitude=location.lon,
            accuracy=location.accuracy,
            speed=speed,
            heading=location.heading,
            altitude=location.altitude,
            battery_level=location.battery_level,
            is_moving=is_moving,
            created_at=now,
        )

        events = self._derive_events(location, distance_km)
        if events:
            await log_info(
                f"Доставка {location.delivery_id}: события {[e.type.value for e in events]}",
                type_msg=TypeMsg.DEBUG,
            )

        return IngestResult(
            location=sample,
            events=events,
            metrics=KinematicMetrics(
                distance_km=round(distance_km, 3),
                speed_kmh=round(speed, 1),
            ),
        )

    def _derive_events(self, location: LocationInput, distance_km: float) -> list[LocationEvent]:
        events: list[LocationEvent] = []

        if location.battery_level is not None and location.battery_level < self._config.LOW_BATTERY_THRESHOLD:
            events.append(LocationEvent(type=LocationEventType.LOW_BATTERY, level=location.battery_level))

        if 0 < distance_km < self._config.NEAR_DESTINATION_KM:
            events.append(LocationEvent(type=LocationEventType.NEAR_DESTINATION, distance_km=distance_km))

        return events
