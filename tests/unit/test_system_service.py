"""Unit tests for SystemService."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.services.system_service import SystemService, month_over_month_growth
from tests.helpers import OTHER_PROFILE_ID, PROFILE_ID, response_with

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(mock_client: MagicMock) -> SystemService:
    with (
        patch("src.services.system_service.get_supabase_client", return_value=mock_client),
        patch("src.services.activity_service.get_supabase_client"),
    ):
        svc = SystemService()
    svc.activities = AsyncMock()
    return svc


class TestMonthOverMonthGrowth:
    """Tests for month_over_month_growth."""

    def test_growth(self) -> None:
        assert month_over_month_growth(6, 4) == 50.0

    def test_decline(self) -> None:
        assert month_over_month_growth(1, 3) == -66.7

    def test_no_users_last_month(self) -> None:
        assert month_over_month_growth(5, 0) == 100.0
        assert month_over_month_growth(0, 0) == 0.0


class TestGetStats:
    """Tests for get_stats."""

    @pytest.mark.asyncio
    async def test_collects_counts(self, service: SystemService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value
        query.execute.return_value = response_with(count=10)
        query.eq.return_value.execute.return_value = response_with(count=8)
        query.gte.return_value.lt.return_value.execute.side_effect = [
            response_with(count=6),
            response_with(count=4),
        ]
        service.activities.count_since.return_value = 3

        stats = await service.get_stats(now=NOW)

        assert stats.total_users == 10
        assert stats.active_users == 8
        assert stats.total_corporations == 10
        assert stats.today_logins == 3
        assert stats.monthly_growth == 50.0
        service.activities.count_since.assert_awaited_once_with(
            "login", datetime(2024, 5, 10, tzinfo=timezone.utc)
        )
        this_month, last_month = query.gte.call_args_list
        assert this_month[0] == ("created_at", "2024-05-01T00:00:00+00:00")
        assert last_month[0] == ("created_at", "2024-04-01T00:00:00+00:00")


class TestGetEngagement:
    """Tests for get_engagement."""

    @pytest.mark.asyncio
    async def test_daily_logins_are_zero_filled(self, service: SystemService) -> None:
        service.activities.get_recent_activities.return_value = []
        service.activities.get_activities_since.return_value = [
            {"id": "1", "user_id": PROFILE_ID, "created_at": "2024-05-10T01:00:00+00:00"},
            {"id": "2", "user_id": PROFILE_ID, "created_at": "2024-05-10T09:30:00Z"},
            {"id": "3", "user_id": OTHER_PROFILE_ID, "created_at": "2024-05-08T23:59:59+00:00"},
        ]

        engagement = await service.get_engagement(days=3, now=NOW)

        assert [(d.day, d.count) for d in engagement.daily_logins] == [
            (date(2024, 5, 8), 1),
            (date(2024, 5, 9), 0),
            (date(2024, 5, 10), 2),
        ]
        service.activities.get_activities_since.assert_awaited_once_with(
            "login", datetime(2024, 5, 8, tzinfo=timezone.utc)
        )

    @pytest.mark.asyncio
    async def test_user_stats_sorted_by_activity(self, service: SystemService) -> None:
        def activity(index: int, user_id: str, activity_type: str) -> dict:
            return {
                "id": f"dd0e8400-e29b-41d4-a716-44665544000{index}",
                "user_id": user_id,
                "activity_type": activity_type,
                "created_at": "2024-05-10T01:00:00+00:00",
                "profiles": {"id": user_id, "full_name": f"User {user_id[-1]}", "email": None},
            }

        service.activities.get_recent_activities.return_value = [
            activity(1, PROFILE_ID, "login"),
            activity(2, OTHER_PROFILE_ID, "login"),
            activity(3, OTHER_PROFILE_ID, "initial_setup"),
        ]
        service.activities.get_activities_since.return_value = []

        engagement = await service.get_engagement(days=1, now=NOW)

        assert engagement.total_activities == 3
        assert engagement.activities[0].profile.full_name == "User 0"
        top = engagement.user_stats[0]
        assert str(top.user_id) == OTHER_PROFILE_ID
        assert top.total_activities == 2
        assert top.login_count == 1
        assert engagement.by_type == {"login": 2, "initial_setup": 1}

    @pytest.mark.asyncio
    async def test_by_type_empty_without_activity(self, service: SystemService) -> None:
        service.activities.get_recent_activities.return_value = []
        service.activities.get_activities_since.return_value = []

        engagement = await service.get_engagement(days=1, now=NOW)

        assert engagement.by_type == {}
        assert engagement.total_activities == 0
