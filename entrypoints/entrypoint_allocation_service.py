#!/usr/bin/env python3
"""
Entrypoint для Allocation Service.

Запуск:
    python entrypoint_allocation_service.py

Порт по умолчанию: 8101
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить Allocation Service."""
    uvicorn.run(
        "src.services.allocation_service.app:app",
        host="0.0.0.0",
        port=settings.deployment.ALLOCATION_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
