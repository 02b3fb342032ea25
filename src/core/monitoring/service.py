# src/core/monitoring/service.py
"""
Периодическая проверка активных поездок.

Для каждой активной сессии считает расстояние до точки назначения и ETA,
классифицирует состояние (прибытие, приближение, нет связи) и формирует
уведомления с дедупликацией по окну для каждой пары (доставка, тип).
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from src.common.constants import NotificationKind, TypeMsg
from src.common.localization import get_text
from src.common.logger import log_error, log_info, log_warning
from src.config.loader import MonitoringSettings
from src.core.geo import calculate_distance
from src.core.monitoring.models import ActiveSession, SweepSummary, TripNotification
from src.core.monitoring.repository import MonitoringRepository
from src.core.tracking.models import LocationSample
from src.infra.database import DatabaseManager


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def estimate_eta_minutes(distance_km: float, average_speed_kmh: Optional[float]) -> Optional[int]:
    """ETA в минутах при известной положительной средней скорости, иначе None."""
    if not average_speed_kmh or average_speed_kmh <= 0:
        return None
    # Округление половины вверх
    return math.floor(distance_km / average_speed_kmh * 60 + 0.5)


class TripMonitorService:
    """Сервис периодической проверки поездок."""

    def __init__(
        self,
        db: DatabaseManager | None = None,
        config: MonitoringSettings | None = None,
        language: str | None = None,
        repository: MonitoringRepository | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            db: Менеджер базы данных
            config: Секция monitoring (по умолчанию из конфига)
            language: Язык текстов уведомлений
            repository: Репозиторий (для тестов)
            clock: Источник текущего времени (UTC)
        """
        if config is None or language is None:
            from src.config import settings
            config = config or settings.monitoring
            language = language or settings.notifications.DEFAULT_LANGUAGE
        if repository is None:
            if db is None:
                raise ValueError("Нужен db или repository")
            repository = MonitoringRepository(db)

        self._repo = repository
        self._config = config
        self._language = language
        self._clock = clock

    def _dedup_window(self, kind: NotificationKind) -> timedelta:
        seconds = {
            NotificationKind.ARRIVAL: self._config.ARRIVAL_DEDUP_SECONDS,
            NotificationKind.ETA_UPDATE: self._config.ETA_DEDUP_SECONDS,
            NotificationKind.OFFLINE: self._config.OFFLINE_DEDUP_SECONDS,
        }[kind]
        return timedelta(seconds=seconds)

    async def sweep(self, now: datetime | None = None) -> SweepSummary:
        """
        Выполняет один проход по активным сессиям.

        Ошибка чтения отдельной сессии пропускает только её. Ошибка пакетной
        записи уведомлений логируется и попадает в notifications_failed.

        Raises:
            StoreError: Не удалось получить список активных сессий
        """
        now = now or self._clock()
        sessions = await self._repo.get_active_sessions()

        if not sessions:
            return SweepSummary(message="No active sessions")

        notifications: list[TripNotification] = []
        for session in sessions:
            try:
                notifications.extend(await self._evaluate_session(session, now))
            except Exception as e:
                await log_warning(f"Сессия {session.id} пропущена: {e}")

        summary = SweepSummary(sessions_checked=len(sessions))
        if not notifications:
            return summary

        try:
            await self._repo.insert_notifications(notifications, sent_at=now)
        except Exception as e:
            await log_error(f"Ошибка записи {len(notifications)} уведомлений: {e}", exc_info=True)
            summary.notifications_failed = len(notifications)
            return summary

        summary.notifications_sent = len(notifications)
        await log_info(
            f"Проверка поездок: сессий {summary.sessions_checked}, уведомлений {summary.notifications_sent}",
            type_msg=TypeMsg.INFO,
        )
        return summary

    async def _evaluate_session(self, session: ActiveSession, now: datetime) -> list[TripNotification]:
        if not session.has_destination:
            return []

        latest = await self._repo.get_latest_sample(session.delivery_id)
        if latest is None:
            return []

        distance_km = calculate_distance(
            latest.latitude,
            latest.longitude,
            session.destination_latitude,
            session.destination_longitude,
        )
        eta_minutes = estimate_eta_minutes(distance_km, session.average_speed_kmh)

        result: list[TripNotification] = []

        if distance_km < self._config.ARRIVAL_RADIUS_KM:
            if not await self._recently_sent(session, NotificationKind.ARRIVAL, now):
                result.append(self._arrival(session, distance_km))
        elif (
            eta_minutes is not None
            and self._config.ETA_MIN_MINUTES <= eta_minutes <= self._config.ETA_MAX_MINUTES
        ):
            if not await self._recently_sent(session, NotificationKind.ETA_UPDATE, now):
                result.append(self._eta(session, eta_minutes, distance_km))

        # Проверяется независимо от близости к точке назначения
        if now - latest.created_at > timedelta(seconds=self._config.OFFLINE_AFTER_SECONDS):
            if not await self._recently_sent(session, NotificationKind.OFFLINE, now):
                result.append(self._offline(session, latest))

        return result

    async def _recently_sent(self, session: ActiveSession, kind: NotificationKind, now: datetime) -> bool:
        return await self._repo.has_recent_notification(
            session.delivery_id, kind, now - self._dedup_window(kind),
        )

    # =========================================================================
    # ТЕКСТЫ УВЕДОМЛЕНИЙ
    # =========================================================================

    def _arrival(self, session: ActiveSession, distance_km: float) -> TripNotification:
        distance_m = round(distance_km * 1000)
        return TripNotification(
            delivery_id=session.delivery_id,
            driver_id=session.driver_id,
            kind=NotificationKind.ARRIVAL,
            title=get_text("NOTIFY_ARRIVAL_TITLE", self._language),
            message=get_text("NOTIFY_ARRIVAL_MESSAGE", self._language, distance_m=distance_m),
            data={"distance_m": distance_m},
        )

    def _eta(self, session: ActiveSession, eta_minutes: int, distance_km: float) -> TripNotification:
        return TripNotification(
            delivery_id=session.delivery_id,
            driver_id=session.driver_id,
            kind=NotificationKind.ETA_UPDATE,
            title=get_text("NOTIFY_ETA_TITLE", self._language),
            message=get_text("NOTIFY_ETA_MESSAGE", self._language, eta_minutes=eta_minutes),
            data={"eta_minutes": eta_minutes, "distance_km": round(distance_km, 2)},
        )

    def _offline(self, session: ActiveSession, latest: LocationSample) -> TripNotification:
        return TripNotification(
            delivery_id=session.delivery_id,
            driver_id=session.driver_id,
            kind=NotificationKind.OFFLINE,
            title=get_text("NOTIFY_OFFLINE_TITLE", self._language),
            message=get_text(
                "NOTIFY_OFFLINE_MESSAGE",
                self._language,
                minutes=self._config.OFFLINE_AFTER_SECONDS // 60,
            ),
            data={"last_update": latest.created_at.isoformat()},
        )
