# tests/core/test_monitoring_repository.py
"""
Тесты для репозитория проверки поездок.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from uuid import UUID

import pytest

from src.common.constants import NotificationKind
from src.common.exceptions import StoreError
from src.core.monitoring import MonitoringRepository, TripNotification


@pytest.fixture
def repository(mock_db: MagicMock) -> MonitoringRepository:
    return MonitoringRepository(mock_db)


class TestActiveSessions:
    @pytest.mark.asyncio
    async def test_maps_rows_with_destination(self, repository: MonitoringRepository, mock_db: MagicMock) -> None:
        mock_db.fetch.return_value = [
            {
                "id": UUID("00000000-0000-0000-0000-000000000011"),
                "delivery_id": UUID("00000000-0000-0000-0000-000000000022"),
                "driver_id": UUID("00000000-0000-0000-0000-000000000033"),
                "average_speed_kmh": 42.0,
                "destination_latitude": -23.5,
                "destination_longitude": -46.6,
            },
        ]

        sessions = await repository.get_active_sessions()

        assert sessions[0].delivery_id == "00000000-0000-0000-0000-000000000022"
        assert sessions[0].has_destination
        assert mock_db.fetch.call_args.args[1] == "active"

    @pytest.mark.asyncio
    async def test_query_failure(self, repository: MonitoringRepository, mock_db: MagicMock) -> None:
        mock_db.fetch.side_effect = OSError("connection lost")

        with pytest.raises(StoreError) as exc_info:
            await repository.get_active_sessions()

        assert exc_info.value.details == {"operation": "sessions_query_failed"}


class TestNotificationsLog:
    @pytest.mark.asyncio
    async def test_has_recent_notification(
        self, repository: MonitoringRepository, mock_db: MagicMock, fixed_now: datetime,
    ) -> None:
        mock_db.fetchrow.return_value = {"id": 7}
        since = fixed_now - timedelta(minutes=5)

        assert await repository.has_recent_notification("delivery-1", NotificationKind.ARRIVAL, since)
        assert mock_db.fetchrow.call_args.args[1:] == ("delivery-1", "chegada_destino", since)

    @pytest.mark.asyncio
    async def test_batch_insert(self, repository: MonitoringRepository, mock_db: MagicMock, fixed_now: datetime) -> None:
        """Все уведомления прохода записываются одним executemany."""
        notifications = [
            TripNotification(
                delivery_id="delivery-1",
                driver_id="driver-1",
                kind=NotificationKind.ETA_UPDATE,
                title="Previsão",
                message="12 minutos",
                data={"eta_minutes": 12, "distance_km": 9.5},
            ),
            TripNotification(
                delivery_id="delivery-2",
                driver_id="driver-2",
                kind=NotificationKind.OFFLINE,
                title="Offline",
                message="Sem atualizações",
            ),
        ]

        await repository.insert_notifications(notifications, sent_at=fixed_now)

        mock_db.executemany.assert_called_once()
        query, rows = mock_db.executemany.call_args.args
        assert "INSERT INTO notifications_log" in query
        assert len(rows) == 2
        assert rows[0][2] == "eta_update"
        assert json.loads(rows[0][5]) == {"eta_minutes": 12, "distance_km": 9.5}
        assert rows[1][6] == fixed_now
