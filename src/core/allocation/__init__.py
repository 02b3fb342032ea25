# src/core/allocation/__init__.py
"""
Домен распределения грузов.
Принятие груза водителем и атомарное списание остатка.
"""

from src.core.allocation.models import (
    AcceptLoadRequest,
    AcceptLoadResponse,
    CargoBody,
    Delivery,
    Driver,
    Load,
    Vehicle,
    derive_load_status,
)
from src.core.allocation.repository import AllocationRepository
from src.core.allocation.service import AllocationService, validate_load_for_allocation

__all__ = [
    "AcceptLoadRequest",
    "AcceptLoadResponse",
    "CargoBody",
    "Delivery",
    "Driver",
    "Load",
    "Vehicle",
    "derive_load_status",
    "AllocationRepository",
    "AllocationService",
    "validate_load_for_allocation",
]
