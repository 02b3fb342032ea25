# tests/services/test_trip_monitor_app.py
"""
Тесты HTTP слоя Trip Monitor.
"""

from __future__ import annotations

from typing import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.common.exceptions import StoreError
from src.core.monitoring import SweepSummary
from src.services.trip_monitor.app import app
from src.services.trip_monitor.dependencies import get_monitor_service

URL = "/api/v1/monitoring/sweep"


@pytest.fixture
def service() -> AsyncMock:
    service = AsyncMock()
    service.sweep.return_value = SweepSummary(sessions_checked=3, notifications_sent=2)
    return service


@pytest.fixture
def client(service: AsyncMock) -> Iterator[TestClient]:
    app.dependency_overrides[get_monitor_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSweepEndpoint:
    """Тесты для /api/v1/monitoring/sweep."""

    @pytest.mark.parametrize("method", ["post", "get"])
    def test_sweep_summary(self, client: TestClient, service: AsyncMock, method: str) -> None:
        """Проход вызывается без тела и возвращает счётчики."""
        response = getattr(client, method)(URL)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "sessions_checked": 3,
            "notifications_sent": 2,
            "notifications_failed": 0,
        }
        service.sweep.assert_called_once_with()

    def test_no_active_sessions_message(self, client: TestClient, service: AsyncMock) -> None:
        service.sweep.return_value = SweepSummary(message="No active sessions")

        response = client.post(URL)

        assert response.json()["message"] == "No active sessions"

    def test_store_failure(self, client: TestClient, service: AsyncMock) -> None:
        service.sweep.side_effect = StoreError("connection lost", operation="sessions_query_failed")

        response = client.post(URL)

        assert response.status_code == 500
        body = response.json()
        assert body["error_code"] == "store_error"
        assert body["details"] == {"operation": "sessions_query_failed"}

    def test_preflight(self, client: TestClient, service: AsyncMock) -> None:
        response = client.options(URL)

        assert response.status_code == 204
        service.sweep.assert_not_called()
