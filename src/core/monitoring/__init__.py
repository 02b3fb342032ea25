# src/core/monitoring/__init__.py
"""
Домен мониторинга поездок: прибытие, ETA, потеря связи.
"""

from src.core.monitoring.models import ActiveSession, SweepSummary, TripNotification
from src.core.monitoring.repository import MonitoringRepository
from src.core.monitoring.service import TripMonitorService, estimate_eta_minutes

__all__ = [
    "ActiveSession",
    "SweepSummary",
    "TripNotification",
    "MonitoringRepository",
    "TripMonitorService",
    "estimate_eta_minutes",
]
