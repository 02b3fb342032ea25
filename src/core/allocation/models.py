# src/core/allocation/models.py
"""
Модели домена распределения грузов.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field, PlainSerializer, model_validator

from src.common.constants import DriverClass, LoadStatus


# Вес хранится как NUMERIC и считается в Decimal; в JSON отдаётся числом
Kilograms = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def derive_load_status(total_kg: Decimal, available_kg: Decimal) -> LoadStatus:
    """
    Выводит статус груза из остатка веса.

    available == total -> published, 0 < available < total -> partially_allocated,
    available == 0 -> fully_allocated.
    """
    if available_kg <= 0:
        return LoadStatus.FULLY_ALLOCATED
    if available_kg >= total_kg:
        return LoadStatus.PUBLISHED
    return LoadStatus.PARTIALLY_ALLOCATED


class Driver(BaseModel):
    """Водитель."""

    id: str
    user_id: str
    driver_class: DriverClass

    @property
    def is_independent(self) -> bool:
        return self.driver_class == DriverClass.INDEPENDENT


class Vehicle(BaseModel):
    """Транспортное средство."""

    id: str
    driver_id: str
    has_integrated_body: bool = False
    body_id: Optional[str] = Field(None, description="Кузов, встроенный в ТС")


class CargoBody(BaseModel):
    """Грузовой кузов (carroceria)."""

    id: str
    driver_id: str
    capacity_kg: Optional[Kilograms] = Field(None, description="Предельный вес одной погрузки")


class Load(BaseModel):
    """
    Груз (carga).
    Статус не хранится независимо: всегда пересчитывается из available_kg.
    """

    id: str
    total_kg: Kilograms = Field(..., ge=0)
    available_kg: Optional[Kilograms] = None
    divisible: bool = True
    status: LoadStatus = LoadStatus.PUBLISHED

    @model_validator(mode="after")
    def _derive(self) -> "Load":
        # До первого распределения остаток равен общему весу
        if self.available_kg is None:
            self.available_kg = self.total_kg
        self.status = derive_load_status(self.total_kg, self.available_kg)
        return self

    @property
    def is_open(self) -> bool:
        """Доступен ли груз для распределения."""
        return self.status in (LoadStatus.PUBLISHED, LoadStatus.PARTIALLY_ALLOCATED)


class Delivery(BaseModel):
    """Доставка: принятая водителем часть груза."""

    id: str
    load_id: str
    driver_id: str
    vehicle_id: str
    body_id: str
    allocated_kg: Kilograms
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AcceptLoadRequest(BaseModel):
    """
    Запрос на принятие груза.
    Поля опциональны: наличие проверяет сервис, чтобы вернуть invalid_input.
    """

    load_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    body_id: Optional[str] = None
    allocated_kg: Optional[Any] = None

    def validated_weight(self) -> Optional[Decimal]:
        """Возвращает вес как Decimal, если это конечное число > 0, иначе None."""
        value = self.allocated_kg
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value) or value <= 0:
            return None
        return Decimal(str(value))


class AcceptLoadResponse(BaseModel):
    """Ответ на успешное принятие груза."""

    delivery: Delivery
