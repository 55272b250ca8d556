"""Unit tests for ProfileService."""

from unittest.mock import MagicMock, patch

import pytest

from src.api.middleware.error_handler import ConflictError
from src.services.profile_service import ProfileService
from tests.helpers import CONTRACT_ID, PROFILE_ID, make_corporation, make_profile, response_with


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(mock_client: MagicMock) -> ProfileService:
    with patch("src.services.profile_service.get_supabase_client", return_value=mock_client):
        return ProfileService()


class TestPortalUser:
    """Tests for the portal identity conversion."""

    def test_regular_profile(self) -> None:
        user = ProfileService.to_portal_user(make_profile(contract_id=CONTRACT_ID))

        assert user.login_id == "yamada"
        assert str(user.contract_id) == CONTRACT_ID
        assert user.requires_initial_setup is False

    def test_temporary_login_requires_setup(self) -> None:
        """Test that generated login IDs flag the account for initial setup."""
        user = ProfileService.to_portal_user(make_profile(login_id="temp_1718000000000042"))

        assert user.requires_initial_setup is True


class TestLookups:
    """Tests for profile lookups."""

    @pytest.mark.asyncio
    async def test_get_by_login_id_filters_inactive(self, service: ProfileService, mock_client: MagicMock) -> None:
        """Test that login lookups only see active profiles by default."""
        query = mock_client.table.return_value.select.return_value.eq.return_value
        query.eq.return_value.execute.return_value = response_with([make_profile()])

        profile = await service.get_by_login_id("yamada")

        assert profile["id"] == PROFILE_ID
        query.eq.assert_called_once_with("is_active", True)

    @pytest.mark.asyncio
    async def test_get_by_login_id_not_found(self, service: ProfileService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value.eq.return_value
        query.eq.return_value.execute.return_value = response_with([])

        assert await service.get_by_login_id("nobody") is None

    @pytest.mark.asyncio
    async def test_get_by_email_lowercases(self, service: ProfileService, mock_client: MagicMock) -> None:
        """Test that email lookups are case-insensitive."""
        mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value = (
            response_with([make_profile()])
        )

        await service.get_by_email("Taro@Example.COM")

        mock_client.table.return_value.select.return_value.eq.assert_called_once_with("email", "taro@example.com")

    @pytest.mark.asyncio
    async def test_email_exists_excludes_self(self, service: ProfileService, mock_client: MagicMock) -> None:
        """Test that a profile's own email does not count as taken."""
        mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value = (
            response_with([make_profile()])
        )

        assert await service.email_exists("taro@example.com") is True
        assert await service.email_exists("taro@example.com", exclude_profile_id=PROFILE_ID) is False


class TestWrites:
    """Tests for profile writes."""

    @pytest.mark.asyncio
    async def test_create_profile_defaults(self, service: ProfileService, mock_client: MagicMock) -> None:
        """Test that new profiles are active general users unless stated."""
        mock_client.table.return_value.insert.return_value.execute.return_value = response_with([make_profile()])

        await service.create_profile({"login_id": "yamada", "email": "taro@example.com"})

        inserted = mock_client.table.return_value.insert.call_args[0][0]
        assert inserted["is_active"] is True
        assert inserted["role"] == "general"

    @pytest.mark.asyncio
    async def test_create_profile_unique_violation(self, service: ProfileService, mock_client: MagicMock) -> None:
        """Test that duplicate keys become a conflict."""
        error = Exception("duplicate key value violates unique constraint")
        error.code = "23505"
        mock_client.table.return_value.insert.return_value.execute.side_effect = error

        with pytest.raises(ConflictError):
            await service.create_profile({"login_id": "yamada", "email": "taro@example.com"})

    @pytest.mark.asyncio
    async def test_update_profile_sets_updated_at(self, service: ProfileService, mock_client: MagicMock) -> None:
        mock_client.table.return_value.update.return_value.eq.return_value.execute.return_value = (
            response_with([make_profile(full_name="Yamada Hanako")])
        )

        result = await service.update_profile(PROFILE_ID, {"full_name": "Yamada Hanako"})

        assert result["full_name"] == "Yamada Hanako"
        update_data = mock_client.table.return_value.update.call_args[0][0]
        assert "updated_at" in update_data

    @pytest.mark.asyncio
    async def test_touch_last_login_swallows_errors(self, service: ProfileService, mock_client: MagicMock) -> None:
        """Test that a failed timestamp update does not fail the login."""
        mock_client.table.return_value.update.return_value.eq.return_value.execute.side_effect = Exception("down")

        await service.touch_last_login(PROFILE_ID)


class TestUserCorporations:
    """Tests for get_user_corporations."""

    @pytest.mark.asyncio
    async def test_maps_memberships(self, service: ProfileService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value.eq.return_value.eq.return_value
        query.execute.return_value = response_with(
            [
                {"role": "admin", "status": "active", "corporations": make_corporation()},
                {"role": "general", "status": "active", "corporations": None},
            ]
        )

        corporations = await service.get_user_corporations(PROFILE_ID)

        assert len(corporations) == 1
        assert corporations[0].name == "Sakura Trading"
        assert corporations[0].user_role == "admin"

    @pytest.mark.asyncio
    async def test_no_contract(self, service: ProfileService) -> None:
        assert await service.get_user_contract(make_profile()) is None
