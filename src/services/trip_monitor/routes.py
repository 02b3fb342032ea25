# src/services/trip_monitor/routes.py
"""
Маршруты Trip Monitor.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.core.monitoring import SweepSummary, TripMonitorService
from src.services.trip_monitor.dependencies import get_monitor_service
from src.shared.models.common import ErrorResponse

router = APIRouter(prefix="/monitoring", tags=["Monitoring"])


@router.api_route(
    "/sweep",
    methods=["POST", "GET"],
    response_model=SweepSummary,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse, "description": "Сбой хранилища"}},
    summary="Проверить активные поездки",
)
async def run_sweep(
    service: TripMonitorService = Depends(get_monitor_service),
) -> SweepSummary:
    """
    Один проход по активным сессиям отслеживания.

    Вызывается внешним планировщиком (или воркером sweep_worker)
    примерно каждые 30 секунд. Повторный вызов безопасен.
    """
    return await service.sweep()
