# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины: config/config.json.
Секретные данные переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "freight_core"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: str = "all"


class DeploymentSettings(BaseModel):
    """Настройки развертывания сервисов."""
    ALLOCATION_SERVICE_HOST: str = "allocation_service"
    ALLOCATION_SERVICE_PORT: int = 8101
    LOCATION_INGEST_HOST: str = "location_ingest"
    LOCATION_INGEST_PORT: int = 8102
    TRIP_MONITOR_HOST: str = "trip_monitor"
    TRIP_MONITOR_PORT: int = 8103


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = True
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class DatabaseSettings(BaseModel):
    """Настройки PostgreSQL."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "freight_core"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 5
    DB_MAX_POOL_SIZE: int = 20
    DB_COMMAND_TIMEOUT: int = 60
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """Возвращает DSN для подключения к PostgreSQL."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Настройки Redis."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "freight"
    REDIS_MAX_CONNECTIONS: int = 50

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class AuthSettings(BaseModel):
    """Настройки внешнего провайдера идентификации."""
    AUTH_URL: str = "http://localhost:9999/auth/v1"
    AUTH_API_KEY: str = ""
    AUTH_TIMEOUT: float = 5.0

    @field_validator("AUTH_API_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает API ключ из переменных окружения."""
        if not v:
            return os.getenv("AUTH_API_KEY", "")
        return v


class TrackingSettings(BaseModel):
    """Настройки приёма геолокации."""
    RATE_LIMIT_BACKEND: str = "memory"  # memory | redis
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_UPDATES: int = 30
    MAX_ACCURACY_METERS: float = 50.0
    MOVING_SPEED_THRESHOLD_KMH: float = 5.0
    LOW_BATTERY_THRESHOLD: float = 20.0
    NEAR_DESTINATION_KM: float = 0.5


class MonitoringSettings(BaseModel):
    """Настройки периодической проверки поездок."""
    SWEEP_INTERVAL_SECONDS: int = 30
    ARRIVAL_RADIUS_KM: float = 0.5
    ETA_MIN_MINUTES: int = 5
    ETA_MAX_MINUTES: int = 15
    OFFLINE_AFTER_SECONDS: int = 600
    ARRIVAL_DEDUP_SECONDS: int = 300
    ETA_DEDUP_SECONDS: int = 600
    OFFLINE_DEDUP_SECONDS: int = 900


class NotificationSettings(BaseModel):
    """Настройки текстов уведомлений."""
    DEFAULT_LANGUAGE: str = "pt"


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты переопределяются из переменных окружения.
        """
        config_data = load_config_json()

        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        filtered_data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=filtered_data.get("PROJECT_NAME", "freight_core"),
                VERSION=filtered_data.get("VERSION", "1.0.0"),
                DEBUG=filtered_data.get("DEBUG", True),
                LOG_LEVEL=filtered_data.get("LOG_LEVEL", "DEBUG"),
                ENVIRONMENT=filtered_data.get("ENVIRONMENT", "development"),
                COMPONENT_MODE=os.getenv("COMPONENT_MODE", filtered_data.get("COMPONENT_MODE", "all")),
            ),
            deployment=DeploymentSettings(
                ALLOCATION_SERVICE_HOST=os.getenv("ALLOCATION_SERVICE_HOST", filtered_data.get("ALLOCATION_SERVICE_HOST", "allocation_service")),
                ALLOCATION_SERVICE_PORT=filtered_data.get("ALLOCATION_SERVICE_PORT", 8101),
                LOCATION_INGEST_HOST=os.getenv("LOCATION_INGEST_HOST", filtered_data.get("LOCATION_INGEST_HOST", "location_ingest")),
                LOCATION_INGEST_PORT=filtered_data.get("LOCATION_INGEST_PORT", 8102),
                TRIP_MONITOR_HOST=os.getenv("TRIP_MONITOR_HOST", filtered_data.get("TRIP_MONITOR_HOST", "trip_monitor")),
                TRIP_MONITOR_PORT=filtered_data.get("TRIP_MONITOR_PORT", 8103),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=filtered_data.get("LOG_LEVEL", "DEBUG"),
                LOG_TO_FILE=filtered_data.get("LOG_TO_FILE", True),
                LOG_FILE_PATH=filtered_data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=filtered_data.get("LOG_FORMAT", "json"),
                LOG_MAX_BYTES=filtered_data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=filtered_data.get("LOG_BACKUP_COUNT", 5),
            ),
            database=DatabaseSettings(
                DB_HOST=os.getenv("DB_HOST", filtered_data.get("DB_HOST", "localhost")),
                DB_PORT=int(os.getenv("DB_PORT", filtered_data.get("DB_PORT", 5432))),
                DB_NAME=os.getenv("DB_NAME", filtered_data.get("DB_NAME", "freight_core")),
                DB_USER=os.getenv("DB_USER", filtered_data.get("DB_USER", "postgres")),
                DB_PASSWORD=os.getenv("DB_PASSWORD", filtered_data.get("DB_PASSWORD", "")),
                DB_MIN_POOL_SIZE=filtered_data.get("DB_MIN_POOL_SIZE", 5),
                DB_MAX_POOL_SIZE=filtered_data.get("DB_MAX_POOL_SIZE", 20),
                DB_COMMAND_TIMEOUT=filtered_data.get("DB_COMMAND_TIMEOUT", 60),
                DB_RETRY_ATTEMPTS=filtered_data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=filtered_data.get("DB_RETRY_DELAY", 1.0),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", filtered_data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", filtered_data.get("REDIS_PORT", 6379))),
                REDIS_DB=filtered_data.get("REDIS_DB", 0),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", filtered_data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=filtered_data.get("REDIS_NAMESPACE", "freight"),
                REDIS_MAX_CONNECTIONS=filtered_data.get("REDIS_MAX_CONNECTIONS", 50),
            ),
            auth=AuthSettings(
                AUTH_URL=os.getenv("AUTH_URL", filtered_data.get("AUTH_URL", "http://localhost:9999/auth/v1")),
                AUTH_API_KEY=os.getenv("AUTH_API_KEY", filtered_data.get("AUTH_API_KEY", "")),
                AUTH_TIMEOUT=filtered_data.get("AUTH_TIMEOUT", 5.0),
            ),
            tracking=TrackingSettings(
                RATE_LIMIT_BACKEND=os.getenv("RATE_LIMIT_BACKEND", filtered_data.get("RATE_LIMIT_BACKEND", "memory")),
                RATE_LIMIT_WINDOW_SECONDS=filtered_data.get("RATE_LIMIT_WINDOW_SECONDS", 60),
                RATE_LIMIT_MAX_UPDATES=filtered_data.get("RATE_LIMIT_MAX_UPDATES", 30),
                MAX_ACCURACY_METERS=filtered_data.get("MAX_ACCURACY_METERS", 50.0),
                MOVING_SPEED_THRESHOLD_KMH=filtered_data.get("MOVING_SPEED_THRESHOLD_KMH", 5.0),
                LOW_BATTERY_THRESHOLD=filtered_data.get("LOW_BATTERY_THRESHOLD", 20.0),
                NEAR_DESTINATION_KM=filtered_data.get("NEAR_DESTINATION_KM", 0.5),
            ),
            monitoring=MonitoringSettings(
                SWEEP_INTERVAL_SECONDS=filtered_data.get("SWEEP_INTERVAL_SECONDS", 30),
                ARRIVAL_RADIUS_KM=filtered_data.get("ARRIVAL_RADIUS_KM", 0.5),
                ETA_MIN_MINUTES=filtered_data.get("ETA_MIN_MINUTES", 5),
                ETA_MAX_MINUTES=filtered_data.get("ETA_MAX_MINUTES", 15),
                OFFLINE_AFTER_SECONDS=filtered_data.get("OFFLINE_AFTER_SECONDS", 600),
                ARRIVAL_DEDUP_SECONDS=filtered_data.get("ARRIVAL_DEDUP_SECONDS", 300),
                ETA_DEDUP_SECONDS=filtered_data.get("ETA_DEDUP_SECONDS", 600),
                OFFLINE_DEDUP_SECONDS=filtered_data.get("OFFLINE_DEDUP_SECONDS", 900),
            ),
            notifications=NotificationSettings(
                DEFAULT_LANGUAGE=filtered_data.get("NOTIFICATION_LANGUAGE", "pt"),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
