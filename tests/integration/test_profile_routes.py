"""Integration tests for profile and account endpoints."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from src.api.middleware.error_handler import AuthorizationError, ValidationError
from src.schemas.permission import UserPermissionResponse
from src.schemas.profile import UserCorporation
from tests.helpers import CONTRACT_ID, CORPORATE_ID, PROFILE_ID, make_profile


class TestMyProfile:
    """Tests for /api/v1/profiles/me."""

    def test_get_profile(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())

        response = client.get("/api/v1/profiles/me")

        assert response.status_code == 200
        assert response.json()["id"] == PROFILE_ID

    def test_update_profile(self, client: TestClient, as_profile) -> None:
        profile = as_profile(make_profile())
        with patch("src.api.routes.profiles.AccountService") as mock_service:
            mock_service.return_value.update_settings = AsyncMock(
                return_value=make_profile(email="hanako@example.com")
            )

            response = client.put("/api/v1/profiles/me", json={"email": "hanako@example.com"})

        assert response.status_code == 200
        assert response.json()["email"] == "hanako@example.com"
        called_profile, data = mock_service.return_value.update_settings.call_args[0]
        assert called_profile == profile
        assert data.email == "hanako@example.com"

    def test_change_password_wrong_current(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())
        with patch("src.api.routes.profiles.AccountService") as mock_service:
            mock_service.return_value.change_password = AsyncMock(
                side_effect=ValidationError("Current password is incorrect")
            )

            response = client.post(
                "/api/v1/profiles/me/password",
                json={"current_password": "bad", "new_password": "new-secret", "confirm_password": "new-secret"},
            )

        assert response.status_code == 422
        assert response.json()["message"] == "Current password is incorrect"

    def test_delete_account(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())
        with patch("src.api.routes.profiles.AccountService") as mock_service:
            mock_service.return_value.delete_account = AsyncMock()

            response = client.request("DELETE", "/api/v1/profiles/me", json={"confirmation": "DELETE"})

        assert response.status_code == 200
        mock_service.return_value.delete_account.assert_awaited_once()


class TestInitialSetup:
    """Tests for POST /api/v1/profiles/me/initial-setup."""

    def _payload(self) -> dict:
        return {
            "new_login_id": "suzuki",
            "new_password": "my-own-secret",
            "confirm_password": "my-own-secret",
            "full_name": "Suzuki Ichiro",
            "email": "ichiro@example.com",
        }

    def test_completes_setup(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile(login_id="temp_1718000000000042"))
        with patch("src.api.routes.profiles.AccountService") as mock_service:
            mock_service.return_value.complete_initial_setup = AsyncMock(
                return_value=make_profile(login_id="suzuki", email="ichiro@example.com")
            )

            response = client.post("/api/v1/profiles/me/initial-setup", json=self._payload())

        assert response.status_code == 200
        data = response.json()
        assert data["login_id"] == "suzuki"
        assert data["requires_initial_setup"] is False

    def test_already_set_up(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())
        with patch("src.api.routes.profiles.AccountService") as mock_service:
            mock_service.return_value.complete_initial_setup = AsyncMock(
                side_effect=AuthorizationError("Initial setup has already been completed")
            )

            response = client.post("/api/v1/profiles/me/initial-setup", json=self._payload())

        assert response.status_code == 403

    def test_password_mismatch(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile(login_id="temp_1"))

        response = client.post(
            "/api/v1/profiles/me/initial-setup",
            json={**self._payload(), "confirm_password": "different"},
        )

        assert response.status_code == 422


class TestMyAssignments:
    """Tests for the caller's corporations, contract and permissions."""

    def test_my_corporations(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())
        with patch("src.api.routes.profiles.ProfileService") as mock_service:
            mock_service.return_value.get_user_corporations = AsyncMock(
                return_value=[
                    UserCorporation(
                        id=CORPORATE_ID,
                        corporate_number="1234567890123",
                        name="Sakura Trading",
                        user_role="general",
                        user_status="active",
                    )
                ]
            )

            response = client.get("/api/v1/profiles/me/corporations")

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Sakura Trading"

    def test_no_contract(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())
        with patch("src.api.routes.profiles.ProfileService") as mock_service:
            mock_service.return_value.get_user_contract = AsyncMock(return_value=None)

            response = client.get("/api/v1/profiles/me/contract")

        assert response.status_code == 404

    def test_my_contract(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile(contract_id=CONTRACT_ID))
        with patch("src.api.routes.profiles.ProfileService") as mock_service:
            mock_service.return_value.get_user_contract = AsyncMock(
                return_value={
                    "id": CONTRACT_ID,
                    "corporate_id": CORPORATE_ID,
                    "contract_type": "standard",
                    "start_date": "2024-04-01",
                    "status": "active",
                    "monthly_fee": 5000,
                    "created_at": "2024-04-01T00:00:00+00:00",
                }
            )

            response = client.get("/api/v1/profiles/me/contract")

        assert response.status_code == 200
        assert response.json()["monthly_fee"] == 5000

    def test_my_permissions(self, client: TestClient, as_profile) -> None:
        as_profile(make_profile())
        with patch("src.api.routes.profiles.PermissionService") as mock_service:
            mock_service.return_value.get_user_permissions = AsyncMock(
                return_value=[UserPermissionResponse(corporate_id=CORPORATE_ID, corporate_name="Sakura Trading", view=True)]
            )

            response = client.get("/api/v1/profiles/me/permissions")

        assert response.status_code == 200
        row = response.json()[0]
        assert row["view"] is True
        assert row["create"] is False
