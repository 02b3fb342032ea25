# src/services/__init__.py
"""
HTTP сервисы приложения.

Архитектура:
- Каждый сервис является независимым FastAPI-приложением
- Общая PostgreSQL, Redis для общего rate limit

Сервисы:
- allocation_service: принятие грузов водителями
- location_ingest: приём геолокации
- trip_monitor: периодическая проверка поездок
"""

__all__: list[str] = []
