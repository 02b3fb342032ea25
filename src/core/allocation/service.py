# src/core/allocation/service.py
"""
Сервис принятия грузов водителями.
Проверяет цепочку владения и вместимости, затем атомарно создаёт доставку.
"""

from __future__ import annotations

from decimal import Decimal

from src.common.constants import TypeMsg
from src.common.exceptions import (
    BodyNotFound,
    BodyNotOwned,
    BodyRequired,
    CapacityUnset,
    DriverNotFound,
    ExceedsAvailable,
    ExceedsBodyCapacity,
    Forbidden,
    InvalidInput,
    LoadNotFound,
    LoadUnavailable,
    NotDivisible,
    VehicleNotFound,
    VehicleNotOwned,
)
from src.common.logger import log_info
from src.core.allocation.models import AcceptLoadRequest, CargoBody, Delivery, Driver, Load, Vehicle
from src.core.allocation.repository import AllocationRepository
from src.infra.database import DatabaseManager


def validate_load_for_allocation(load: Load, allocated_kg: Decimal) -> None:
    """
    Проверяет, что груз может принять указанный вес.
    Вызывается дважды: до транзакции и под блокировкой строки груза.

    Raises:
        LoadUnavailable, NotDivisible, ExceedsAvailable
    """
    if not load.is_open:
        raise LoadUnavailable(status=load.status.value)

    if not load.divisible and allocated_kg != load.total_kg:
        raise NotDivisible(required_kg=float(load.total_kg))

    if allocated_kg > load.available_kg:
        raise ExceedsAvailable(available_kg=float(load.available_kg))


class AllocationService:
    """
    Сервис распределения.
    Каждая проверка прерывает операцию при первой ошибке;
    запись выполняется только в commit_allocation.
    """

    def __init__(
        self,
        db: DatabaseManager | None = None,
        repository: AllocationRepository | None = None,
    ) -> None:
        if repository is None:
            if db is None:
                raise ValueError("Нужен db или repository")
            repository = AllocationRepository(db)
        self._repo = repository

    async def accept_load(self, user_id: str, request: AcceptLoadRequest) -> Delivery:
        """
        Принимает груз (или его часть) от имени водителя.

        Args:
            user_id: ID пользователя, полученный от провайдера идентификации
            request: Параметры принятия

        Returns:
            Созданная доставка с фактическим кузовом
        """
        allocated_kg = request.validated_weight()
        if not request.load_id or not request.vehicle_id or allocated_kg is None:
            raise InvalidInput("load_id, vehicle_id and a positive allocated_kg are required")

        driver = await self._resolve_driver(user_id)
        vehicle = await self._resolve_vehicle(driver, request.vehicle_id)
        body = await self._resolve_body(driver, vehicle, request.body_id, allocated_kg)

        load = await self._repo.get_load(request.load_id)
        if load is None:
            raise LoadNotFound(load_id=request.load_id)
        validate_load_for_allocation(load, allocated_kg)

        delivery = await self._repo.commit_allocation(
            load_id=load.id,
            driver_id=driver.id,
            vehicle_id=vehicle.id,
            body_id=body.id,
            allocated_kg=allocated_kg,
            validate=validate_load_for_allocation,
        )

        await log_info(
            f"Водитель {driver.id} принял груз {load.id}: доставка {delivery.id}",
            type_msg=TypeMsg.INFO,
        )
        return delivery

    # =========================================================================
    # ЦЕПОЧКА ПРОВЕРОК
    # =========================================================================

    async def _resolve_driver(self, user_id: str) -> Driver:
        driver = await self._repo.get_driver_by_user(user_id)
        if driver is None:
            raise DriverNotFound()
        if not driver.is_independent:
            raise Forbidden(driver_class=driver.driver_class.value)
        return driver

    async def _resolve_vehicle(self, driver: Driver, vehicle_id: str) -> Vehicle:
        vehicle = await self._repo.get_vehicle(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(vehicle_id=vehicle_id)
        if vehicle.driver_id != driver.id:
            raise VehicleNotOwned(vehicle_id=vehicle_id)
        return vehicle

    async def _resolve_body(
        self,
        driver: Driver,
        vehicle: Vehicle,
        requested_body_id: str | None,
        allocated_kg: Decimal,
    ) -> CargoBody:
        """
        Определяет фактический кузов.
        Встроенный кузов ТС имеет приоритет над переданным body_id.
        """
        if vehicle.has_integrated_body:
            body_id = vehicle.body_id
        else:
            body_id = requested_body_id
            if not body_id:
                raise BodyRequired()

        body = await self._repo.get_body(body_id) if body_id else None
        if body is None:
            raise BodyNotFound(body_id=body_id)
        if body.driver_id != driver.id:
            raise BodyNotOwned(body_id=body_id)
        if body.capacity_kg is None:
            raise CapacityUnset(body_id=body_id)
        if allocated_kg > body.capacity_kg:
            raise ExceedsBodyCapacity(capacity_kg=float(body.capacity_kg))
        return body
