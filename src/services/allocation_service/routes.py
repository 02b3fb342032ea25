# src/services/allocation_service/routes.py
"""
Маршруты Allocation Service.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header

from src.core.allocation import AcceptLoadRequest, AcceptLoadResponse, AllocationService
from src.core.identity import IdentityResolver
from src.services.allocation_service.dependencies import get_allocation_service, get_identity_resolver
from src.shared.models.common import ErrorResponse

router = APIRouter(prefix="/allocations", tags=["Allocations"])


@router.post(
    "/accept",
    response_model=AcceptLoadResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Некорректный запрос или нарушение правил"},
        401: {"model": ErrorResponse, "description": "Не аутентифицирован"},
        403: {"model": ErrorResponse, "description": "Нет прав или чужое ТС/кузов"},
        404: {"model": ErrorResponse, "description": "Сущность не найдена"},
        405: {"model": ErrorResponse, "description": "Метод не поддерживается"},
    },
    summary="Принять груз",
)
async def accept_load(
    request: AcceptLoadRequest,
    authorization: Optional[str] = Header(None),
    identity: IdentityResolver = Depends(get_identity_resolver),
    service: AllocationService = Depends(get_allocation_service),
) -> AcceptLoadResponse:
    """
    Принимает груз (целиком или частично) от имени водителя.

    Создаёт доставку и списывает вес груза в одной транзакции.
    """
    user_id = await identity.resolve(authorization)
    delivery = await service.accept_load(user_id, request)
    return AcceptLoadResponse(delivery=delivery)
