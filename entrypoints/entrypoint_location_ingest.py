#!/usr/bin/env python3
"""
Entrypoint для Location Ingest.

Запуск:
    python entrypoint_location_ingest.py

Порт по умолчанию: 8102
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить Location Ingest."""
    uvicorn.run(
        "src.services.location_ingest.app:app",
        host="0.0.0.0",
        port=settings.deployment.LOCATION_INGEST_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
