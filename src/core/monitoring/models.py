# src/core/monitoring/models.py
"""
Модели периодической проверки поездок.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.common.constants import NotificationKind


class ActiveSession(BaseModel):
    """Активная сессия отслеживания с координатами назначения груза."""

    id: str
    delivery_id: str
    driver_id: str
    average_speed_kmh: Optional[float] = None
    destination_latitude: Optional[float] = None
    destination_longitude: Optional[float] = None

    @property
    def has_destination(self) -> bool:
        return self.destination_latitude is not None and self.destination_longitude is not None


class TripNotification(BaseModel):
    """Уведомление для записи в notifications_log."""

    delivery_id: str
    driver_id: str
    kind: NotificationKind
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class SweepSummary(BaseModel):
    """Итог одного прохода."""

    success: bool = True
    sessions_checked: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0
    message: Optional[str] = None
