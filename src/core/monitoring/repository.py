# src/core/monitoring/repository.py
"""
Репозиторий проверки поездок: активные сессии и журнал уведомлений.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from src.common.constants import NotificationKind, TrackingStatus
from src.common.exceptions import StoreError
from src.common.logger import log_error
from src.core.monitoring.models import ActiveSession, TripNotification
from src.core.tracking.models import LocationSample
from src.core.tracking.repository import LocationRepository
from src.infra.database import DatabaseManager


class MonitoringRepository:
    """Репозиторий для TripMonitorService."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db
        self._locations = LocationRepository(db)

    async def get_active_sessions(self) -> list[ActiveSession]:
        """
        Возвращает активные сессии вместе с координатами назначения
        (сессия -> доставка -> груз -> адрес назначения).
        """
        try:
            rows = await self._db.fetch(
                """
                SELECT ts.id, ts.delivery_id, ts.driver_id, ts.average_speed_kmh,
                       addr.latitude AS destination_latitude,
                       addr.longitude AS destination_longitude
                FROM tracking_sessions ts
                LEFT JOIN deliveries d ON d.id = ts.delivery_id
                LEFT JOIN loads l ON l.id = d.load_id
                LEFT JOIN load_addresses addr ON addr.id = l.destination_address_id
                WHERE ts.status = $1
                ORDER BY ts.started_at
                """,
                TrackingStatus.ACTIVE.value,
            )
        except Exception as e:
            await log_error(f"Ошибка получения активных сессий: {e}")
            raise StoreError(str(e), operation="sessions_query_failed") from e

        return [
            ActiveSession(
                id=str(row["id"]),
                delivery_id=str(row["delivery_id"]),
                driver_id=str(row["driver_id"]),
                average_speed_kmh=row["average_speed_kmh"],
                destination_latitude=row["destination_latitude"],
                destination_longitude=row["destination_longitude"],
            )
            for row in rows
        ]

    async def get_latest_sample(self, delivery_id: str) -> Optional[LocationSample]:
        return await self._locations.get_latest_sample(delivery_id)

    async def has_recent_notification(
        self,
        delivery_id: str,
        kind: NotificationKind,
        since: datetime,
    ) -> bool:
        """Есть ли уведомление данного типа для доставки, отправленное не раньше since."""
        row = await self._db.fetchrow(
            """
            SELECT id FROM notifications_log
            WHERE delivery_id = $1 AND kind = $2 AND sent_at >= $3
            LIMIT 1
            """,
            delivery_id,
            kind.value,
            since,
        )
        return row is not None

    async def insert_notifications(self, notifications: list[TripNotification], sent_at: datetime) -> None:
        """Записывает все уведомления прохода одним пакетом."""
        await self._db.executemany(
            """
            INSERT INTO notifications_log (delivery_id, driver_id, kind, title, message, data, sent_at)
            VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7)
            """,
            [
                (
                    n.delivery_id,
                    n.driver_id,
                    n.kind.value,
                    n.title,
                    n.message,
                    json.dumps(n.data, ensure_ascii=False, default=str),
                    sent_at,
                )
                for n in notifications
            ],
        )
