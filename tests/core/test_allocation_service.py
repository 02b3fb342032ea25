# tests/core/test_allocation_service.py
"""
Тесты для сервиса распределения грузов.
"""

from __future__ import annotations

import asyncio
import itertools
from decimal import Decimal
from typing import Callable, Optional

import pytest

from src.common.constants import DriverClass, LoadStatus
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
from src.core.allocation import (
    AcceptLoadRequest,
    AllocationService,
    CargoBody,
    Delivery,
    Driver,
    Load,
    Vehicle,
    derive_load_status,
    validate_load_for_allocation,
)


class FakeAllocationRepository:
    """
    Репозиторий в памяти.
    commit_allocation сериализуется замком, как строка груза под FOR UPDATE.
    """

    def __init__(self) -> None:
        self.drivers: dict[str, Driver] = {}
        self.vehicles: dict[str, Vehicle] = {}
        self.bodies: dict[str, CargoBody] = {}
        self.loads: dict[str, Load] = {}
        self.deliveries: list[Delivery] = []
        self._lock = asyncio.Lock()
        self._ids = itertools.count(1)

    async def get_driver_by_user(self, user_id: str) -> Optional[Driver]:
        return self.drivers.get(user_id)

    async def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        return self.vehicles.get(vehicle_id)

    async def get_body(self, body_id: str) -> Optional[CargoBody]:
        return self.bodies.get(body_id)

    async def get_load(self, load_id: str) -> Optional[Load]:
        return self.loads.get(load_id)

    async def commit_allocation(
        self,
        *,
        load_id: str,
        driver_id: str,
        vehicle_id: str,
        body_id: str,
        allocated_kg: Decimal,
        validate: Callable[[Load, Decimal], None],
    ) -> Delivery:
        async with self._lock:
            # Отдаём управление, пока замок удерживается
            await asyncio.sleep(0)
            load = self.loads.get(load_id)
            if load is None:
                raise LoadNotFound(load_id=load_id)
            validate(load, allocated_kg)

            self.loads[load_id] = Load(
                id=load.id,
                total_kg=load.total_kg,
                available_kg=load.available_kg - allocated_kg,
                divisible=load.divisible,
            )
            delivery = Delivery(
                id=f"delivery-{next(self._ids)}",
                load_id=load_id,
                driver_id=driver_id,
                vehicle_id=vehicle_id,
                body_id=body_id,
                allocated_kg=allocated_kg,
            )
            self.deliveries.append(delivery)
            return delivery


@pytest.fixture
def repo() -> FakeAllocationRepository:
    """Независимый водитель с ТС без кузова, кузовом на 800 кг и грузом 1000 кг."""
    repo = FakeAllocationRepository()
    repo.drivers["user-1"] = Driver(id="driver-1", user_id="user-1", driver_class=DriverClass.INDEPENDENT)
    repo.drivers["user-2"] = Driver(id="driver-2", user_id="user-2", driver_class=DriverClass.FLEET)
    repo.drivers["user-3"] = Driver(id="driver-3", user_id="user-3", driver_class=DriverClass.INDEPENDENT)
    repo.vehicles["vehicle-1"] = Vehicle(id="vehicle-1", driver_id="driver-1")
    repo.vehicles["truck-1"] = Vehicle(
        id="truck-1", driver_id="driver-1", has_integrated_body=True, body_id="body-integrated",
    )
    repo.vehicles["vehicle-3"] = Vehicle(id="vehicle-3", driver_id="driver-3")
    repo.bodies["body-1"] = CargoBody(id="body-1", driver_id="driver-1", capacity_kg=800)
    repo.bodies["body-integrated"] = CargoBody(id="body-integrated", driver_id="driver-1", capacity_kg=1200)
    repo.bodies["body-nocap"] = CargoBody(id="body-nocap", driver_id="driver-1", capacity_kg=None)
    repo.bodies["body-3"] = CargoBody(id="body-3", driver_id="driver-3", capacity_kg=800)
    repo.loads["load-1"] = Load(id="load-1", total_kg=1000)
    repo.loads["load-whole"] = Load(id="load-whole", total_kg=1000, divisible=False)
    return repo


@pytest.fixture
def service(repo: FakeAllocationRepository) -> AllocationService:
    return AllocationService(repository=repo)


def _request(**overrides) -> AcceptLoadRequest:
    data = {"load_id": "load-1", "vehicle_id": "vehicle-1", "body_id": "body-1", "allocated_kg": 400}
    data.update(overrides)
    return AcceptLoadRequest(**data)


class TestDeriveLoadStatus:
    """Статус груза выводится только из остатка."""

    @pytest.mark.parametrize(
        ("available", "expected"),
        [
            (1000, LoadStatus.PUBLISHED),
            (400, LoadStatus.PARTIALLY_ALLOCATED),
            (0, LoadStatus.FULLY_ALLOCATED),
        ],
    )
    def test_status(self, available: float, expected: LoadStatus) -> None:
        assert derive_load_status(1000, available) is expected

    def test_load_without_available_is_published(self) -> None:
        """До первого распределения остаток равен общему весу."""
        load = Load(id="l", total_kg=500)

        assert load.available_kg == 500
        assert load.status is LoadStatus.PUBLISHED
        assert load.is_open


class TestValidateLoadForAllocation:
    """Тесты для validate_load_for_allocation."""

    def test_indivisible_requires_exact_weight(self) -> None:
        """Неделимый груз 1000 кг: 999 отклоняется, 1000 принимается."""
        load = Load(id="l", total_kg=1000, divisible=False)

        with pytest.raises(NotDivisible) as exc_info:
            validate_load_for_allocation(load, 999)
        assert exc_info.value.details == {"required_kg": 1000}

        validate_load_for_allocation(load, 1000)

    def test_exceeds_available(self) -> None:
        load = Load(id="l", total_kg=1000, available_kg=300)

        with pytest.raises(ExceedsAvailable) as exc_info:
            validate_load_for_allocation(load, 301)
        assert exc_info.value.details == {"available_kg": 300}

    def test_fully_allocated_is_unavailable(self) -> None:
        load = Load(id="l", total_kg=1000, available_kg=0)

        with pytest.raises(LoadUnavailable) as exc_info:
            validate_load_for_allocation(load, 1)
        assert exc_info.value.details == {"status": "fully_allocated"}


class TestAcceptLoad:
    """Тесты для AllocationService.accept_load."""

    @pytest.mark.asyncio
    async def test_partial_acceptance(self, service: AllocationService, repo: FakeAllocationRepository) -> None:
        """Частичное принятие: доставка создана, груз частично распределён."""
        delivery = await service.accept_load("user-1", _request(allocated_kg=400))

        assert delivery.allocated_kg == 400
        assert delivery.body_id == "body-1"
        assert delivery.driver_id == "driver-1"
        assert repo.loads["load-1"].available_kg == 600
        assert repo.loads["load-1"].status is LoadStatus.PARTIALLY_ALLOCATED

    @pytest.mark.asyncio
    async def test_full_acceptance_closes_load(self, service: AllocationService, repo: FakeAllocationRepository) -> None:
        repo.bodies["body-1"] = CargoBody(id="body-1", driver_id="driver-1", capacity_kg=1000)

        await service.accept_load("user-1", _request(allocated_kg=1000))

        assert repo.loads["load-1"].status is LoadStatus.FULLY_ALLOCATED

        with pytest.raises(LoadUnavailable):
            await service.accept_load("user-1", _request(allocated_kg=1))

    @pytest.mark.asyncio
    async def test_decimal_split_closes_load(self, service: AllocationService, repo: FakeAllocationRepository) -> None:
        """333.3 + 333.3 + 333.4 из 1000 кг: остаток ровно 0, груз закрыт."""
        for weight in (333.3, 333.3, 333.4):
            await service.accept_load("user-1", _request(allocated_kg=weight))

        load = repo.loads["load-1"]
        assert load.available_kg == 0
        assert load.status is LoadStatus.FULLY_ALLOCATED
        assert not load.is_open

    @pytest.mark.asyncio
    async def test_fractional_weights_fill_small_load(
        self, service: AllocationService, repo: FakeAllocationRepository,
    ) -> None:
        """Три принятия по 0.1 кг полностью распределяют груз 0.3 кг."""
        repo.loads["load-small"] = Load(id="load-small", total_kg=Decimal("0.3"))

        for _ in range(3):
            await service.accept_load("user-1", _request(load_id="load-small", allocated_kg=0.1))

        assert repo.loads["load-small"].available_kg == 0
        assert repo.loads["load-small"].status is LoadStatus.FULLY_ALLOCATED

    def test_weight_is_decimal(self) -> None:
        assert _request(allocated_kg=333.3).validated_weight() == Decimal("333.3")

    @pytest.mark.asyncio
    async def test_integrated_body_overrides_request(self, service: AllocationService) -> None:
        """Встроенный кузов ТС используется вместо переданного body_id."""
        delivery = await service.accept_load(
            "user-1", _request(vehicle_id="truck-1", body_id="body-1", allocated_kg=900),
        )

        assert delivery.body_id == "body-integrated"

    @pytest.mark.asyncio
    async def test_indivisible_load(self, service: AllocationService, repo: FakeAllocationRepository) -> None:
        with pytest.raises(NotDivisible):
            await service.accept_load("user-1", _request(load_id="load-whole", vehicle_id="truck-1", allocated_kg=999))

        delivery = await service.accept_load(
            "user-1", _request(load_id="load-whole", vehicle_id="truck-1", allocated_kg=1000),
        )

        assert delivery.allocated_kg == 1000
        assert repo.loads["load-whole"].status is LoadStatus.FULLY_ALLOCATED

    @pytest.mark.parametrize("weight", [None, 0, -5, "400", True, float("nan"), float("inf")])
    @pytest.mark.asyncio
    async def test_invalid_weight(self, service: AllocationService, weight) -> None:
        with pytest.raises(InvalidInput):
            await service.accept_load("user-1", _request(allocated_kg=weight))

    @pytest.mark.parametrize("missing", ["load_id", "vehicle_id"])
    @pytest.mark.asyncio
    async def test_missing_ids(self, service: AllocationService, missing: str) -> None:
        with pytest.raises(InvalidInput):
            await service.accept_load("user-1", _request(**{missing: None}))

    @pytest.mark.asyncio
    async def test_unknown_driver(self, service: AllocationService) -> None:
        with pytest.raises(DriverNotFound):
            await service.accept_load("nobody", _request())

    @pytest.mark.asyncio
    async def test_fleet_driver_forbidden(self, service: AllocationService) -> None:
        with pytest.raises(Forbidden) as exc_info:
            await service.accept_load("user-2", _request())

        assert exc_info.value.error_code == "forbidden"
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_vehicle_errors(self, service: AllocationService) -> None:
        with pytest.raises(VehicleNotFound):
            await service.accept_load("user-1", _request(vehicle_id="missing"))

        with pytest.raises(VehicleNotOwned):
            await service.accept_load("user-1", _request(vehicle_id="vehicle-3"))

    @pytest.mark.asyncio
    async def test_body_required_for_detachable(self, service: AllocationService) -> None:
        with pytest.raises(BodyRequired):
            await service.accept_load("user-1", _request(body_id=None))

    @pytest.mark.asyncio
    async def test_body_errors(self, service: AllocationService) -> None:
        with pytest.raises(BodyNotFound):
            await service.accept_load("user-1", _request(body_id="missing"))

        with pytest.raises(BodyNotOwned):
            await service.accept_load("user-1", _request(body_id="body-3"))

        with pytest.raises(CapacityUnset):
            await service.accept_load("user-1", _request(body_id="body-nocap"))

    @pytest.mark.asyncio
    async def test_exceeds_body_capacity(self, service: AllocationService, repo: FakeAllocationRepository) -> None:
        """Вес больше вместимости кузова: ничего не записано."""
        with pytest.raises(ExceedsBodyCapacity) as exc_info:
            await service.accept_load("user-1", _request(allocated_kg=801))

        assert exc_info.value.details == {"capacity_kg": 800}
        assert repo.deliveries == []
        assert repo.loads["load-1"].available_kg == 1000

    @pytest.mark.asyncio
    async def test_load_not_found(self, service: AllocationService) -> None:
        with pytest.raises(LoadNotFound):
            await service.accept_load("user-1", _request(load_id="missing"))

    @pytest.mark.asyncio
    async def test_concurrent_acceptances_do_not_oversell(
        self, service: AllocationService, repo: FakeAllocationRepository,
    ) -> None:
        """
        Два водителя одновременно принимают по 600 кг из 1000.
        Оба проходят предварительную проверку, но под замком успевает только один.
        """
        results = await asyncio.gather(
            service.accept_load("user-1", _request(allocated_kg=600)),
            service.accept_load("user-3", _request(vehicle_id="vehicle-3", body_id="body-3", allocated_kg=600)),
            return_exceptions=True,
        )

        delivered = [r for r in results if isinstance(r, Delivery)]
        rejected = [r for r in results if isinstance(r, ExceedsAvailable)]

        assert len(delivered) == 1
        assert len(rejected) == 1
        assert rejected[0].details == {"available_kg": 400}
        assert repo.loads["load-1"].available_kg == 400
        assert sum(d.allocated_kg for d in repo.deliveries) == 600


def test_service_requires_db_or_repository() -> None:
    with pytest.raises(ValueError):
        AllocationService()
