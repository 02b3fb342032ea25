#!/usr/bin/env python3
# main.py
"""
Главная точка входа Freight Core.
Запускает HTTP сервисы и sweep worker в зависимости от режима.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import TypeMsg
from src.infra.database import init_db, close_db
from src.infra.redis_client import init_redis, close_redis


VALID_MODES = ("allocation", "location", "monitor", "sweep_worker", "all")

# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


def _uses_redis() -> bool:
    return settings.tracking.RATE_LIMIT_BACKEND == "redis"


async def init_infrastructure() -> None:
    """Инициализирует подключения к инфраструктуре."""
    await log_info("Инициализация инфраструктуры...", type_msg=TypeMsg.INFO)

    await init_db()
    if _uses_redis():
        await init_redis()

    await log_info("Инфраструктура инициализирована", type_msg=TypeMsg.INFO)


async def close_infrastructure() -> None:
    """Закрывает все подключения."""
    await log_info("Закрытие подключений...", type_msg=TypeMsg.INFO)

    if _uses_redis():
        await close_redis()
    await close_db()

    await log_info("Подключения закрыты", type_msg=TypeMsg.INFO)


async def run_http_service(name: str, app_path: str, port: int) -> None:
    """Запускает FastAPI приложение через uvicorn в текущем event loop."""
    import uvicorn

    await log_info(f"Запуск {name} на порту {port}...", type_msg=TypeMsg.INFO)

    config = uvicorn.Config(
        app_path,
        host="0.0.0.0",
        port=port,
        log_level="debug" if settings.system.DEBUG else "info",
    )
    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info(f"{name}: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_allocation_service() -> None:
    await run_http_service(
        "Allocation Service",
        "src.services.allocation_service.app:app",
        settings.deployment.ALLOCATION_SERVICE_PORT,
    )


async def run_location_ingest() -> None:
    await run_http_service(
        "Location Ingest",
        "src.services.location_ingest.app:app",
        settings.deployment.LOCATION_INGEST_PORT,
    )


async def run_trip_monitor() -> None:
    await run_http_service(
        "Trip Monitor",
        "src.services.trip_monitor.app:app",
        settings.deployment.TRIP_MONITOR_PORT,
    )


async def run_sweep_worker() -> None:
    from src.worker.sweep_runner import run_sweep_worker as _run
    await _run(init_infra=False)


async def main(mode: str | None = None) -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (allocation, location, monitor, sweep_worker, all).
              Если None, берётся из COMPONENT_MODE.
    """
    global _running_tasks

    setup_logging()
    setup_signal_handlers()

    if mode is None:
        mode = settings.system.COMPONENT_MODE
    if mode not in VALID_MODES:
        await log_error(f"Неизвестный режим '{mode}'. Допустимые: {', '.join(VALID_MODES)}")
        sys.exit(1)

    await log_info(
        f"Freight Core v{settings.system.VERSION}: запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
    )

    runners = {
        "allocation": [run_allocation_service],
        "location": [run_location_ingest],
        "monitor": [run_trip_monitor],
        "sweep_worker": [run_sweep_worker],
        "all": [run_allocation_service, run_location_ingest, run_trip_monitor, run_sweep_worker],
    }[mode]

    try:
        await init_infrastructure()

        _running_tasks = [asyncio.create_task(runner()) for runner in runners]
        try:
            await asyncio.gather(*_running_tasks, return_exceptions=True)
        except asyncio.CancelledError:
            await log_info("Отмена всех задач...", type_msg=TypeMsg.INFO)
            for task in _running_tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*_running_tasks, return_exceptions=True)
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}", exc_info=True)
        raise
    finally:
        await close_infrastructure()


def print_usage() -> None:
    """Выводит справку по использованию."""
    print("""
Freight Core: запуск компонентов

Использование:
    python main.py [режим]

Режимы:
    allocation     Allocation Service (принятие грузов)
    location       Location Ingest (приём геолокации)
    monitor        Trip Monitor (HTTP эндпоинт прохода)
    sweep_worker   периодический проход без внешнего планировщика
    all            все компоненты в одном процессе

Без аргумента режим берётся из COMPONENT_MODE.
    """)


if __name__ == "__main__":
    mode = None

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        elif arg in VALID_MODES:
            mode = arg
        else:
            print(f"Ошибка: неизвестный режим '{arg}'")
            print_usage()
            sys.exit(1)

    try:
        asyncio.run(main(mode))
    except KeyboardInterrupt:
        pass
