"""Unit tests for ActivityService."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from src.services.activity_service import ActivityService
from tests.helpers import PROFILE_ID, response_with


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(mock_client: MagicMock) -> ActivityService:
    with patch("src.services.activity_service.get_supabase_client", return_value=mock_client):
        return ActivityService()


class TestRecordActivity:
    """Tests for record_activity."""

    @pytest.mark.asyncio
    async def test_inserts_row(self, service: ActivityService, mock_client: MagicMock) -> None:
        await service.record_activity(PROFILE_ID, "login", ip_address="203.0.113.5", user_agent="pytest")

        mock_client.table.assert_called_with("user_activities")
        row = mock_client.table.return_value.insert.call_args[0][0]
        assert row == {
            "user_id": PROFILE_ID,
            "activity_type": "login",
            "activity_data": None,
            "ip_address": "203.0.113.5",
            "user_agent": "pytest",
        }

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self, service: ActivityService, mock_client: MagicMock) -> None:
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception("insert failed")

        await service.record_activity(PROFILE_ID, "login")


class TestQueries:
    """Tests for activity queries."""

    @pytest.mark.asyncio
    async def test_count_since(self, service: ActivityService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value.eq.return_value.gte.return_value
        query.execute.return_value = response_with([], count=4)
        since = datetime(2024, 5, 10, tzinfo=timezone.utc)

        assert await service.count_since("login", since) == 4
        mock_client.table.return_value.select.assert_called_once_with("id", count="exact")
        mock_client.table.return_value.select.return_value.eq.return_value.gte.assert_called_once_with(
            "created_at", "2024-05-10T00:00:00+00:00"
        )

    @pytest.mark.asyncio
    async def test_recent_activities_limit(self, service: ActivityService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value.order.return_value
        query.limit.return_value.execute.return_value = response_with([{"id": "1"}])

        assert await service.get_recent_activities(limit=20) == [{"id": "1"}]
        query.limit.assert_called_once_with(20)
