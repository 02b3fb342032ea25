# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class DriverClass(str, Enum):
    """Класс регистрации водителя."""
    INDEPENDENT = "independent"
    FLEET = "fleet"


class LoadStatus(str, Enum):
    """Статусы груза (выводятся из available_kg)."""
    PUBLISHED = "published"
    PARTIALLY_ALLOCATED = "partially_allocated"
    FULLY_ALLOCATED = "fully_allocated"


class TrackingStatus(str, Enum):
    """Статусы сессии отслеживания."""
    ACTIVE = "active"
    ENDED = "ended"


class NotificationKind(str, Enum):
    """Типы уведомлений о поездке."""
    ARRIVAL = "chegada_destino"
    ETA_UPDATE = "eta_update"
    OFFLINE = "offline"


class LocationEventType(str, Enum):
    """События, выводимые при приёме геолокации."""
    LOW_BATTERY = "low_battery"
    NEAR_DESTINATION = "near_destination"
