# src/services/trip_monitor/app.py
"""
FastAPI приложение для Trip Monitor.

Endpoints:
- POST /api/v1/monitoring/sweep - проход по активным поездкам
- GET /health - состояние сервиса
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.common.constants import TypeMsg
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.services.trip_monitor.dependencies import (
    close_dependencies,
    get_database,
    init_dependencies,
)
from src.services.trip_monitor.routes import router
from src.shared.http import install_http_handlers
from src.shared.models.common import HealthStatus

SERVICE_NAME = "trip_monitor"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info("Trip Monitor запускается...", type_msg=TypeMsg.INFO)

    await init_dependencies()

    yield

    await close_dependencies()
    await log_info("Trip Monitor остановлен", type_msg=TypeMsg.INFO)


app = FastAPI(
    title="Trip Monitor",
    description="Уведомления о прибытии, ETA и потере связи по активным поездкам",
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
    uvicorn.run(app, host="0.0.0.0", port=settings.deployment.TRIP_MONITOR_PORT)
