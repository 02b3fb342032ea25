# src/worker/sweep_runner.py
"""
Планировщик проверки поездок.
Вызывает TripMonitorService.sweep() с фиксированным интервалом,
когда внешний планировщик не используется.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info
from src.config import settings
from src.core.monitoring import SweepSummary, TripMonitorService
from src.infra.database import close_db, get_db, init_db


class SweepRunner:
    """
    Периодический запуск прохода.
    Ошибка одного прохода логируется, следующий выполняется по расписанию.
    """

    def __init__(self, service: TripMonitorService, interval_seconds: float) -> None:
        self.service = service
        self.interval_seconds = interval_seconds
        self.runs = 0

    async def run_once(self) -> Optional[SweepSummary]:
        """Выполняет один проход. Возвращает None при ошибке."""
        self.runs += 1
        try:
            return await self.service.sweep()
        except Exception as e:
            await log_error(f"Проход #{self.runs} завершился ошибкой: {e}", exc_info=True)
            return None

    async def run_forever(self) -> None:
        """Запускает проходы до отмены задачи."""
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            await self.run_once()
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self.interval_seconds - elapsed))


async def run_sweep_worker(init_infra: bool = True) -> None:
    """
    Запускает SweepRunner.

    Args:
        init_infra: Если True, подключается к БД сам. При запуске из main.py
                    инфраструктура уже инициализирована.
    """
    interval = settings.monitoring.SWEEP_INTERVAL_SECONDS
    await log_info(f"Запуск sweep worker (интервал {interval} с)...", type_msg=TypeMsg.INFO)

    if init_infra:
        await init_db()

    runner = SweepRunner(TripMonitorService(get_db()), interval)
    try:
        await runner.run_forever()
    except asyncio.CancelledError:
        await log_info("Получен сигнал остановки", type_msg=TypeMsg.INFO)
    finally:
        if init_infra:
            await close_db()
        await log_info(f"Sweep worker остановлен после {runner.runs} проходов", type_msg=TypeMsg.INFO)


def main() -> None:
    """Точка входа."""
    try:
        asyncio.run(run_sweep_worker())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
