# src/common/exceptions.py
"""
Иерархия доменных ошибок.

Каждая ошибка несёт машиночитаемый код, HTTP статус и диагностические
данные (например, доступный вес). Транспортный слой превращает их
в ErrorResponse без дополнительной логики.
"""

from __future__ import annotations

from typing import Any


class FreightCoreError(Exception):
    """Базовая доменная ошибка."""

    error_code: str = "unexpected_error"
    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details: dict[str, Any] = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Сериализует ошибку для ответа API."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details or None,
        }


# =============================================================================
# 400: НЕКОРРЕКТНЫЙ ЗАПРОС И НАРУШЕНИЯ БИЗНЕС-ПРАВИЛ
# =============================================================================

class InvalidInput(FreightCoreError):
    error_code = "invalid_input"
    status_code = 400
    default_message = "Missing or malformed fields"


class BusinessRuleViolation(FreightCoreError):
    """Нарушение бизнес-правила, исправимое клиентом."""
    status_code = 400


class BodyRequired(BusinessRuleViolation):
    error_code = "body_required"
    default_message = "Vehicle has no integrated body: body_id is required"


class CapacityUnset(BusinessRuleViolation):
    error_code = "capacity_unset"
    default_message = "Cargo body has no capacity_kg"


class ExceedsBodyCapacity(BusinessRuleViolation):
    error_code = "exceeds_body_capacity"
    default_message = "Allocated weight exceeds cargo body capacity"


class LoadUnavailable(BusinessRuleViolation):
    error_code = "load_unavailable"
    default_message = "Load is not available for allocation"


class NotDivisible(BusinessRuleViolation):
    error_code = "not_divisible"
    default_message = "Load does not allow partial allocation"


class ExceedsAvailable(BusinessRuleViolation):
    error_code = "exceeds_available"
    default_message = "Allocated weight exceeds available load weight"


class LowAccuracy(BusinessRuleViolation):
    error_code = "low_accuracy"
    default_message = "Location accuracy too low"


class RateLimited(BusinessRuleViolation):
    error_code = "rate_limited"
    status_code = 429
    default_message = "Rate limit exceeded. Please slow down."


# =============================================================================
# 401 / 403: ИДЕНТИФИКАЦИЯ И ВЛАДЕНИЕ
# =============================================================================

class Unauthorized(FreightCoreError):
    error_code = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(FreightCoreError):
    error_code = "forbidden"
    status_code = 403
    default_message = "Only independent drivers can accept loads"


class VehicleNotOwned(Forbidden):
    error_code = "vehicle_not_owned"
    default_message = "Vehicle does not belong to the driver"


class BodyNotOwned(Forbidden):
    error_code = "body_not_owned"
    default_message = "Cargo body does not belong to the driver"


# =============================================================================
# 404: СУЩНОСТЬ НЕ НАЙДЕНА
# =============================================================================

class NotFound(FreightCoreError):
    error_code = "not_found"
    status_code = 404
    default_message = "Entity not found"


class DriverNotFound(NotFound):
    error_code = "driver_not_found"
    default_message = "Driver not found"


class VehicleNotFound(NotFound):
    error_code = "vehicle_not_found"
    default_message = "Vehicle not found"


class BodyNotFound(NotFound):
    error_code = "body_not_found"
    default_message = "Cargo body not found"


class LoadNotFound(NotFound):
    error_code = "load_not_found"
    default_message = "Load not found"


class DeliveryNotFound(NotFound):
    error_code = "delivery_not_found"
    default_message = "Delivery not found"


# =============================================================================
# 500: ОШИБКИ ХРАНИЛИЩА
# =============================================================================

class StoreError(FreightCoreError):
    """Сбой хранилища данных (не повторяется внутри ядра)."""
    error_code = "store_error"
    status_code = 500
    default_message = "Data store failure"
