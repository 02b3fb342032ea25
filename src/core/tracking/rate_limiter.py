# src/core/tracking/rate_limiter.py
"""
Ограничение частоты обновлений геолокации по водителю.

Окно фиксированной длины: первое обновление открывает окно со счётчиком 1,
следующие увеличивают счётчик, пока он не достигнет лимита. По истечении
окна счётчик начинается заново.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from src.infra.redis_client import RedisClient, get_redis

# KEYS[1] = ключ счётчика, ARGV[1] = лимит, ARGV[2] = окно (мс)
RATE_LIMIT_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then
    redis.call('SET', KEYS[1], 1, 'PX', ARGV[2])
    return 1
end
if tonumber(current) >= tonumber(ARGV[1]) then
    return 0
end
redis.call('INCR', KEYS[1])
return 1
"""


class RateLimiter(ABC):
    """Базовый ограничитель частоты."""

    def __init__(self, max_updates: int = 30, window_seconds: float = 60) -> None:
        self.max_updates = max_updates
        self.window_seconds = window_seconds

    @abstractmethod
    async def allow(self, key: str) -> bool:
        """Возвращает True, если обновление допущено (и учитывает его)."""


@dataclass
class _Window:
    count: int
    reset_at: float


class MemoryRateLimiter(RateLimiter):
    """
    Ограничитель в памяти процесса.
    Корректен только при одном инстансе сервиса.
    """

    # Порог, после которого из карты вычищаются истёкшие окна
    PURGE_THRESHOLD = 10_000

    def __init__(
        self,
        max_updates: int = 30,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(max_updates, window_seconds)
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    async def allow(self, key: str) -> bool:
        now = self._clock()
        window = self._windows.get(key)

        if window is None or now >= window.reset_at:
            if len(self._windows) >= self.PURGE_THRESHOLD:
                self._purge(now)
            self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
            return True

        if window.count >= self.max_updates:
            return False

        window.count += 1
        return True

    def _purge(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now >= w.reset_at]
        for k in expired:
            del self._windows[k]


class RedisRateLimiter(RateLimiter):
    """
    Ограничитель на общем счётчике в Redis.
    Проверка и инкремент выполняются одним Lua скриптом, поэтому лимит
    соблюдается для всех инстансов сервиса.
    """

    KEY_PREFIX = "ratelimit:location"

    def __init__(
        self,
        redis: RedisClient,
        max_updates: int = 30,
        window_seconds: float = 60,
    ) -> None:
        super().__init__(max_updates, window_seconds)
        self._redis = redis

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}:{key}"

    async def allow(self, key: str) -> bool:
        result = await self._redis.eval(
            RATE_LIMIT_SCRIPT,
            keys=[self._key(key)],
            args=[self.max_updates, int(self.window_seconds * 1000)],
        )
        return int(result) == 1


def create_rate_limiter(
    backend: str | None = None,
    redis: RedisClient | None = None,
    max_updates: int | None = None,
    window_seconds: float | None = None,
) -> RateLimiter:
    """
    Создаёт ограничитель по настройкам tracking.

    Args:
        backend: memory | redis (по умолчанию из конфига)
        redis: Клиент Redis для backend=redis
    """
    from src.config import settings

    backend = backend or settings.tracking.RATE_LIMIT_BACKEND
    max_updates = max_updates or settings.tracking.RATE_LIMIT_MAX_UPDATES
    window_seconds = window_seconds or settings.tracking.RATE_LIMIT_WINDOW_SECONDS

    if backend == "redis":
        if redis is None:
            redis = get_redis()
        limiter: RateLimiter = RedisRateLimiter(redis, max_updates, window_seconds)
    elif backend == "memory":
        limiter = MemoryRateLimiter(max_updates, window_seconds)
    else:
        raise ValueError(f"Неизвестный backend rate limit: {backend}")

    return limiter
