# src/services/allocation_service/app.py
"""
FastAPI приложение для Allocation Service.

Endpoints:
- POST /api/v1/allocations/accept - принять груз
- GET /health - состояние сервиса
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.common.constants import TypeMsg
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.services.allocation_service.dependencies import (
    close_dependencies,
    get_database,
    init_dependencies,
)
from src.services.allocation_service.routes import router
from src.shared.http import install_http_handlers
from src.shared.models.common import HealthStatus

SERVICE_NAME = "allocation_service"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info("Allocation Service запускается...", type_msg=TypeMsg.INFO)

    await init_dependencies()

    yield

    await close_dependencies()
    await log_info("Allocation Service остановлен", type_msg=TypeMsg.INFO)


app = FastAPI(
    title="Allocation Service",
    description="Принятие грузов водителями с атомарным списанием остатка",
    version=settings.system.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

install_http_handlers(app)
app.include_router(router, prefix="/api/v1")


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    """Проверка здоровья сервиса."""
    deps = {}
    try:
        deps["postgres"] = "healthy" if await get_database().health_check() else "unhealthy"
    except RuntimeError:
        deps["postgres"] = "unhealthy"

    overall = "healthy" if all(v == "healthy" for v in deps.values()) else "degraded"
    return HealthStatus(
        service=SERVICE_NAME,
        status=overall,
        version=settings.system.VERSION,
        dependencies=deps,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.deployment.ALLOCATION_SERVICE_PORT)
