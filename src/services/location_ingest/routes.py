# src/services/location_ingest/routes.py
"""
Маршруты Location Ingest.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.core.tracking import IngestResult, LocationEnvelope, LocationIngestService
from src.services.location_ingest.dependencies import get_ingest_service
from src.shared.models.common import ErrorResponse

router = APIRouter(prefix="/locations", tags=["Location"])


@router.post(
    "",
    response_model=IngestResult,
    responses={
        400: {"model": ErrorResponse, "description": "Нет обязательных полей или низкая точность"},
        429: {"model": ErrorResponse, "description": "Превышен лимит обновлений"},
    },
    summary="Принять точку геолокации",
)
async def ingest_location(
    envelope: LocationEnvelope,
    service: LocationIngestService = Depends(get_ingest_service),
) -> IngestResult:
    """
    Сохраняет точку геолокации водителя.

    Возвращает сохранённую точку, производные события
    (low_battery, near_destination) и рассчитанные расстояние и скорость.
    """
    return await service.ingest(envelope.location)
