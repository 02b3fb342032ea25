# src/core/__init__.py
"""
Доменный слой (Core Domain).
Бизнес-логика распределения грузов, приёма геолокации и мониторинга поездок.
"""

from src.core.allocation import AllocationService
from src.core.monitoring import TripMonitorService
from src.core.tracking import LocationIngestService

__all__ = [
    "AllocationService",
    "LocationIngestService",
    "TripMonitorService",
]
