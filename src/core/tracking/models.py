# src/core/tracking/models.py
"""
Модели приёма геолокации.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.common.constants import LocationEventType


class LocationInput(BaseModel):
    """
    Точка геолокации от устройства водителя.
    Обязательность полей проверяет сервис (invalid_input), а не схема.
    """

    model_config = ConfigDict(populate_by_name=True)

    delivery_id: Optional[str] = None
    driver_id: Optional[str] = None
    lat: Optional[float] = Field(None, validation_alias=AliasChoices("lat", "latitude"))
    lon: Optional[float] = Field(None, validation_alias=AliasChoices("lon", "longitude"))
    accuracy: Optional[float] = Field(None, description="Точность, м")
    speed: Optional[float] = Field(None, description="Скорость по данным устройства, км/ч")
    heading: Optional[float] = None
    altitude: Optional[float] = None
    battery_level: Optional[float] = None
    is_moving: Optional[bool] = None


class LocationEnvelope(BaseModel):
    """Тело запроса: {"location": {...}}."""

    location: Optional[LocationInput] = None


class LocationSample(BaseModel):
    """Сохранённая точка геолокации."""

    id: int
    delivery_id: str
    driver_id: str
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    speed: float = 0.0
    heading: Optional[float] = None
    altitude: Optional[float] = None
    battery_level: Optional[float] = None
    is_moving: bool = False
    created_at: datetime


class LocationEvent(BaseModel):
    """Производное событие (не сохраняется)."""

    type: LocationEventType
    level: Optional[float] = None
    distance_km: Optional[float] = None


class KinematicMetrics(BaseModel):
    distance_km: float
    speed_kmh: float


class IngestResult(BaseModel):
    """Результат приёма точки."""

    success: bool = True
    location: LocationSample
    events: list[LocationEvent] = Field(default_factory=list)
    metrics: KinematicMetrics
