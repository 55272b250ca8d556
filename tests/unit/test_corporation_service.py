"""Unit tests for CorporationService."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID

import pytest

from src.api.middleware.error_handler import ConflictError, NotFoundError, ValidationError
from src.models.corporation import CorporateRole
from src.schemas.corporation import CorporationCreate, CorporationUpdate
from src.services.corporation_service import CorporationService, validate_corporate_number
from tests.helpers import (
    CONTRACT_ID,
    CORPORATE_ID,
    OTHER_PROFILE_ID,
    PROFILE_ID,
    make_corporation,
    make_profile,
    response_with,
    route_tables,
)


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(mock_client: MagicMock) -> CorporationService:
    with patch("src.services.corporation_service.get_supabase_client", return_value=mock_client):
        return CorporationService()


class TestValidateCorporateNumber:
    """Tests for validate_corporate_number."""

    def test_accepts_thirteen_digits(self) -> None:
        assert validate_corporate_number("1234567890123") == "1234567890123"

    @pytest.mark.parametrize("number", ["123456789012", "12345678901234", "12345678901a3", ""])
    def test_rejects_malformed(self, number: str) -> None:
        with pytest.raises(ValidationError):
            validate_corporate_number(number)


class TestListForActor:
    """Tests for list_for_actor."""

    @pytest.mark.asyncio
    async def test_system_admin_sees_all(self, service: CorporationService, mock_client: MagicMock) -> None:
        corporations = MagicMock()
        corporations.select.return_value.order.return_value.execute.return_value = response_with(
            [make_corporation()]
        )
        route_tables(mock_client, corporations=corporations)

        result = await service.list_for_actor(make_profile(role="system_admin"))

        assert len(result) == 1
        corporations.select.return_value.in_.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_sees_contract_corporations(self, service: CorporationService, mock_client: MagicMock) -> None:
        corporate_users = MagicMock()
        corporate_users.select.return_value.eq.return_value.execute.return_value = response_with(
            [{"corporate_id": CORPORATE_ID}, {"corporate_id": CORPORATE_ID}]
        )
        corporations = MagicMock()
        corporations.select.return_value.in_.return_value.order.return_value.execute.return_value = (
            response_with([make_corporation()])
        )
        route_tables(mock_client, corporate_users=corporate_users, corporations=corporations)

        result = await service.list_for_actor(make_profile(role="admin", contract_id=CONTRACT_ID))

        assert result[0]["id"] == CORPORATE_ID
        corporate_users.select.return_value.eq.assert_called_once_with("contract_id", CONTRACT_ID)
        corporations.select.return_value.in_.assert_called_once_with("id", [CORPORATE_ID])

    @pytest.mark.asyncio
    async def test_general_user_without_assignments(self, service: CorporationService, mock_client: MagicMock) -> None:
        corporate_users = MagicMock()
        corporate_users.select.return_value.eq.return_value.eq.return_value.execute.return_value = (
            response_with([])
        )
        route_tables(mock_client, corporate_users=corporate_users)

        assert await service.list_for_actor(make_profile()) == []


class TestRegister:
    """Tests for register."""

    @pytest.mark.asyncio
    async def test_duplicate_number(self, service: CorporationService) -> None:
        service.get_by_number = AsyncMock(return_value=make_corporation())

        with pytest.raises(ConflictError):
            await service.register(
                CorporationCreate(corporate_number="1234567890123", name="Sakura Trading"),
                make_profile(role="system_admin"),
            )

    @pytest.mark.asyncio
    async def test_admin_becomes_corporate_admin(self, service: CorporationService, mock_client: MagicMock) -> None:
        """Test that a contract admin is added as the first admin member."""
        service.get_by_number = AsyncMock(return_value=None)
        service.add_user = AsyncMock()
        mock_client.table.return_value.insert.return_value.execute.return_value = response_with(
            [make_corporation()]
        )
        actor = make_profile(role="admin", contract_id=CONTRACT_ID)

        corporation = await service.register(
            CorporationCreate(corporate_number="1234567890123", name="Sakura Trading", city=""),
            actor,
        )

        assert corporation["id"] == CORPORATE_ID
        inserted = mock_client.table.return_value.insert.call_args[0][0]
        assert inserted["type"] == "株式会社"
        assert inserted["city"] is None
        service.add_user.assert_awaited_once_with(
            CORPORATE_ID, PROFILE_ID, CorporateRole.ADMIN, contract_id=CONTRACT_ID, invited_by=PROFILE_ID
        )

    @pytest.mark.asyncio
    async def test_system_admin_is_not_member(self, service: CorporationService, mock_client: MagicMock) -> None:
        service.get_by_number = AsyncMock(return_value=None)
        service.add_user = AsyncMock()
        mock_client.table.return_value.insert.return_value.execute.return_value = response_with(
            [make_corporation()]
        )

        await service.register(
            CorporationCreate(corporate_number="1234567890123", name="Sakura Trading"),
            make_profile(role="system_admin"),
        )

        service.add_user.assert_not_awaited()


class TestUpdate:
    """Tests for update."""

    @pytest.mark.asyncio
    async def test_only_changed_fields_are_written(self, service: CorporationService, mock_client: MagicMock) -> None:
        service.get_corporation = AsyncMock(return_value=make_corporation())
        mock_client.table.return_value.update.return_value.eq.return_value.execute.return_value = response_with(
            [make_corporation(city="Minato")]
        )

        result = await service.update(UUID(CORPORATE_ID), CorporationUpdate(name="Sakura Trading", city="Minato"))

        assert result["city"] == "Minato"
        changes = mock_client.table.return_value.update.call_args[0][0]
        assert "name" not in changes
        assert changes["city"] == "Minato"
        assert "updated_at" in changes

    @pytest.mark.asyncio
    async def test_no_changes(self, service: CorporationService) -> None:
        service.get_corporation = AsyncMock(return_value=make_corporation())

        with pytest.raises(ValidationError) as exc_info:
            await service.update(UUID(CORPORATE_ID), CorporationUpdate(name="Sakura Trading"))

        assert exc_info.value.message == "No changes to update"

    @pytest.mark.asyncio
    async def test_missing_corporation(self, service: CorporationService) -> None:
        service.get_corporation = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await service.update(UUID(CORPORATE_ID), CorporationUpdate(name="Other"))


class TestMembers:
    """Tests for corporate user management."""

    @pytest.mark.asyncio
    async def test_add_existing_member(self, service: CorporationService) -> None:
        service.get_corporate_user = AsyncMock(return_value={"role": "general"})

        with pytest.raises(ConflictError):
            await service.add_user(CORPORATE_ID, OTHER_PROFILE_ID)

    @pytest.mark.asyncio
    async def test_add_member(self, service: CorporationService, mock_client: MagicMock) -> None:
        service.get_corporate_user = AsyncMock(return_value=None)
        mock_client.table.return_value.insert.return_value.execute.return_value = response_with(
            [{"id": "m1", "role": "general"}]
        )

        await service.add_user(CORPORATE_ID, OTHER_PROFILE_ID, invited_by=PROFILE_ID)

        row = mock_client.table.return_value.insert.call_args[0][0]
        assert row["role"] == "general"
        assert row["status"] == "active"
        assert row["invited_by"] == PROFILE_ID

    @pytest.mark.asyncio
    async def test_cannot_remove_last_admin(self, service: CorporationService, mock_client: MagicMock) -> None:
        service.get_corporate_user = AsyncMock(return_value={"role": "admin"})
        service.count_admins = AsyncMock(return_value=1)

        with pytest.raises(ValidationError):
            await service.remove_user(UUID(CORPORATE_ID), UUID(PROFILE_ID))

        mock_client.table.return_value.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_admin_when_others_remain(self, service: CorporationService, mock_client: MagicMock) -> None:
        service.get_corporate_user = AsyncMock(return_value={"role": "admin"})
        service.count_admins = AsyncMock(return_value=2)

        await service.remove_user(UUID(CORPORATE_ID), UUID(PROFILE_ID))

        mock_client.table.return_value.delete.assert_called_once()

    @pytest.mark.asyncio
    async def test_cannot_demote_last_admin(self, service: CorporationService) -> None:
        service.get_corporate_user = AsyncMock(return_value={"role": "admin"})
        service.count_admins = AsyncMock(return_value=1)

        with pytest.raises(ValidationError):
            await service.update_user_role(UUID(CORPORATE_ID), UUID(PROFILE_ID), CorporateRole.GENERAL)

    @pytest.mark.asyncio
    async def test_promote_member(self, service: CorporationService, mock_client: MagicMock) -> None:
        service.get_corporate_user = AsyncMock(return_value={"role": "general"})
        mock_client.table.return_value.update.return_value.eq.return_value.eq.return_value.execute.return_value = (
            response_with([{"role": "admin"}])
        )

        result = await service.update_user_role(UUID(CORPORATE_ID), UUID(OTHER_PROFILE_ID), CorporateRole.ADMIN)

        assert result["role"] == "admin"

    @pytest.mark.asyncio
    async def test_remove_non_member(self, service: CorporationService) -> None:
        service.get_corporate_user = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await service.remove_user(UUID(CORPORATE_ID), UUID(OTHER_PROFILE_ID))
