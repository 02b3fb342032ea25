#!/usr/bin/env python3
"""
Entrypoint для Trip Monitor.

Запуск:
    python entrypoint_trip_monitor.py

Порт по умолчанию: 8103
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить Trip Monitor."""
    uvicorn.run(
        "src.services.trip_monitor.app:app",
        host="0.0.0.0",
        port=settings.deployment.TRIP_MONITOR_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
