# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("AUTH_API_KEY", "test_api_key")


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_lang_dict() -> dict[str, dict[str, str]]:
    """Мок словаря локализации для тестов."""
    return {
        "NOTIFY_ETA_TITLE": {
            "pt": "Chegando em breve",
            "en": "Arriving soon",
        },
        "NOTIFY_ETA_MESSAGE": {
            "pt": "Chegada em aproximadamente {eta_minutes} minutos",
            "en": "Arriving in about {eta_minutes} minutes",
        },
        "ONLY_EN": {
            "en": "English only",
        },
    }


@pytest.fixture
def temp_lang_dict_file(tmp_path: Path, mock_lang_dict: dict[str, dict[str, str]]) -> Path:
    """Создаёт временный файл локализации."""
    lang_file = tmp_path / "lang_dict.json"
    lang_file.write_text(json.dumps(mock_lang_dict, ensure_ascii=False, indent=2))
    return lang_file


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_conn() -> AsyncMock:
    """Мок соединения внутри транзакции."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.execute = AsyncMock(return_value="UPDATE 1")
    return conn


@pytest.fixture
def mock_db(mock_conn: AsyncMock) -> MagicMock:
    """Мок менеджера базы данных."""
    db = MagicMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="INSERT 0 1")
    db.executemany = AsyncMock(return_value=None)
    db.fetchval = AsyncMock(return_value=None)
    db.health_check = AsyncMock(return_value=True)

    @asynccontextmanager
    async def transaction():
        yield mock_conn

    db.transaction = transaction
    return db


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Мок клиента Redis."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.eval = AsyncMock(return_value=1)
    redis.health_check = AsyncMock(return_value=True)
    return redis


# =============================================================================
# ФИКСТУРЫ ДАННЫХ
# =============================================================================

@pytest.fixture
def fixed_now() -> datetime:
    """Фиксированное текущее время."""
    return datetime(2024, 5, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def load_row() -> dict[str, Any]:
    """Строка таблицы loads."""
    return {
        "id": "load-1",
        "total_kg": Decimal("1000"),
        "available_kg": Decimal("1000"),
        "divisible": True,
    }


@pytest.fixture
def delivery_row(fixed_now: datetime) -> dict[str, Any]:
    """Строка таблицы deliveries."""
    return {
        "id": "delivery-1",
        "load_id": "load-1",
        "driver_id": "driver-1",
        "vehicle_id": "vehicle-1",
        "body_id": "body-1",
        "allocated_kg": Decimal("400"),
        "created_at": fixed_now,
    }


@pytest.fixture
def location_row(fixed_now: datetime) -> dict[str, Any]:
    """Строка таблицы locations."""
    return {
        "id": 1,
        "delivery_id": "delivery-1",
        "driver_id": "driver-1",
        "latitude": -23.5505,
        "longitude": -46.6333,
        "accuracy": 10.0,
        "speed": 0.0,
        "heading": None,
        "altitude": None,
        "battery_level": 80.0,
        "is_moving": False,
        "created_at": fixed_now,
    }
