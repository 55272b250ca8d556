"""Unit tests for UserService."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID

import pytest

from src.api.middleware.error_handler import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.models.profile import UserRole
from src.services.user_service import UserService
from tests.helpers import (
    AUTH_USER_ID,
    CONTRACT_ID,
    OTHER_PROFILE_ID,
    PROFILE_ID,
    make_profile,
    response_with,
)

ADMIN = make_profile(role="admin", contract_id=CONTRACT_ID)
SYSTEM_ADMIN = make_profile(role="system_admin")


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(mock_client: MagicMock) -> UserService:
    with (
        patch("src.services.user_service.get_supabase_client", return_value=mock_client),
        patch("src.services.profile_service.get_supabase_client"),
    ):
        svc = UserService()
    svc.profiles = AsyncMock()
    return svc


@pytest.fixture
def mock_auth():
    with patch("src.services.user_service.AuthService") as auth:
        auth.return_value.create_auth_user = AsyncMock(return_value=AUTH_USER_ID)
        auth.return_value.delete_auth_user = AsyncMock()
        yield auth.return_value


class TestListUsers:
    """Tests for list_users."""

    @pytest.mark.asyncio
    async def test_admin_sees_own_contract(self, service: UserService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value
        query.eq.return_value.order.return_value.execute.return_value = response_with([make_profile()])

        users = await service.list_users(ADMIN)

        assert len(users) == 1
        query.eq.assert_called_once_with("contract_id", CONTRACT_ID)

    @pytest.mark.asyncio
    async def test_system_admin_sees_everyone(self, service: UserService, mock_client: MagicMock) -> None:
        query = mock_client.table.return_value.select.return_value
        query.order.return_value.execute.return_value = response_with([make_profile(), make_profile()])

        users = await service.list_users(SYSTEM_ADMIN)

        assert len(users) == 2
        query.eq.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_without_contract(self, service: UserService) -> None:
        assert await service.list_users(make_profile(role="admin")) == []


class TestGetManagedUser:
    """Tests for get_managed_user."""

    @pytest.mark.asyncio
    async def test_not_found(self, service: UserService) -> None:
        service.profiles.get_profile.return_value = None

        with pytest.raises(NotFoundError):
            await service.get_managed_user(ADMIN, UUID(OTHER_PROFILE_ID))

    @pytest.mark.asyncio
    async def test_other_contract_forbidden(self, service: UserService) -> None:
        service.profiles.get_profile.return_value = make_profile(id=OTHER_PROFILE_ID, contract_id=None)

        with pytest.raises(AuthorizationError):
            await service.get_managed_user(ADMIN, UUID(OTHER_PROFILE_ID))

    @pytest.mark.asyncio
    async def test_system_admin_any_user(self, service: UserService) -> None:
        service.profiles.get_profile.return_value = make_profile(id=OTHER_PROFILE_ID)

        user = await service.get_managed_user(SYSTEM_ADMIN, UUID(OTHER_PROFILE_ID))

        assert user["id"] == OTHER_PROFILE_ID


class TestCreateUser:
    """Tests for create_user and create_managed_user."""

    @pytest.mark.asyncio
    async def test_admin_creates_general_user(self, service: UserService, mock_auth) -> None:
        """Test that users get temporary credentials and the admin's contract."""
        service.profiles.email_exists.return_value = False
        service.profiles.create_profile.return_value = make_profile(id=OTHER_PROFILE_ID)

        profile, login_id, password = await service.create_user(ADMIN, "Hanako@Example.com", "Sato Hanako")

        assert profile["id"] == OTHER_PROFILE_ID
        assert login_id.startswith("temp_")
        assert password.startswith("temp_")
        mock_auth.create_auth_user.assert_awaited_once_with("hanako@example.com", password, "Sato Hanako")
        data = service.profiles.create_profile.call_args[0][0]
        assert data["role"] == "general"
        assert data["contract_id"] == CONTRACT_ID
        assert data["login_id"] == login_id

    @pytest.mark.asyncio
    async def test_system_admin_cannot_create_general_users(self, service: UserService) -> None:
        with pytest.raises(AuthorizationError):
            await service.create_user(SYSTEM_ADMIN, "hanako@example.com", "Sato Hanako")

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service: UserService, mock_auth) -> None:
        service.profiles.email_exists.return_value = True

        with pytest.raises(ConflictError) as exc_info:
            await service.create_managed_user("hanako@example.com", "Sato Hanako", UserRole.GENERAL, CONTRACT_ID)

        assert "already registered" in exc_info.value.message
        mock_auth.create_auth_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_auth_user(self, service: UserService, mock_auth) -> None:
        service.profiles.email_exists.return_value = False
        service.profiles.create_profile.side_effect = ConflictError("taken")

        with pytest.raises(ConflictError):
            await service.create_managed_user("hanako@example.com", "Sato Hanako", UserRole.ADMIN, CONTRACT_ID)

        mock_auth.delete_auth_user.assert_awaited_once_with(AUTH_USER_ID)


class TestDeactivate:
    """Tests for deactivation."""

    @pytest.mark.asyncio
    async def test_cannot_deactivate_self(self, service: UserService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.bulk_deactivate(ADMIN, [UUID(PROFILE_ID), UUID(OTHER_PROFILE_ID)])

        assert exc_info.value.message == "You cannot deactivate your own account"

    @pytest.mark.asyncio
    async def test_bulk_deactivate(self, service: UserService, mock_client: MagicMock) -> None:
        service.profiles.get_profile.return_value = make_profile(id=OTHER_PROFILE_ID, contract_id=CONTRACT_ID)

        count = await service.bulk_deactivate(ADMIN, [UUID(OTHER_PROFILE_ID), UUID(OTHER_PROFILE_ID)])

        assert count == 1
        update_data = mock_client.table.return_value.update.call_args[0][0]
        assert update_data["is_active"] is False
        mock_client.table.return_value.update.return_value.in_.assert_called_once_with("id", [OTHER_PROFILE_ID])

    @pytest.mark.asyncio
    async def test_deactivate_outside_contract(self, service: UserService, mock_client: MagicMock) -> None:
        service.profiles.get_profile.return_value = make_profile(id=OTHER_PROFILE_ID, contract_id=None)

        with pytest.raises(AuthorizationError):
            await service.deactivate_user(ADMIN, UUID(OTHER_PROFILE_ID))

        mock_client.table.return_value.update.assert_not_called()


class TestUpdateRole:
    """Tests for update_role."""

    @pytest.mark.asyncio
    async def test_cannot_change_own_role(self, service: UserService) -> None:
        with pytest.raises(ValidationError):
            await service.update_role(SYSTEM_ADMIN, UUID(PROFILE_ID), UserRole.GENERAL)

    @pytest.mark.asyncio
    async def test_updates_role(self, service: UserService) -> None:
        service.profiles.get_profile.return_value = make_profile(id=OTHER_PROFILE_ID)
        service.profiles.update_profile.return_value = make_profile(id=OTHER_PROFILE_ID, role="admin")

        result = await service.update_role(SYSTEM_ADMIN, UUID(OTHER_PROFILE_ID), UserRole.ADMIN)

        assert result["role"] == "admin"
        service.profiles.update_profile.assert_awaited_once_with(UUID(OTHER_PROFILE_ID), {"role": "admin"})
