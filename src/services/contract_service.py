"""Contract business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.models.contract import ContractStatus
from src.models.corporation import CorporateRole
from src.models.profile import UserRole
from src.schemas.contract import ContractCreate
from src.schemas.corporation import CorporationCreate
from src.services.corporation_service import CorporationService
from src.services.user_service import UserService

logger = logging.getLogger(__name__)

CONTRACT_SELECT = "*, corporations(*)"


class ContractService:
    """Service for contracts between the operator and corporations."""

    def __init__(self) -> None:
        """Initialize contract service with Supabase client."""
        self.client = get_supabase_client()

    async def list_contracts(
        self,
        search: str | None = None,
        status: ContractStatus | None = None,
    ) -> list[dict[str, Any]]:
        """List contracts with corporation and admin profile, newest first.

        Args:
            search: Case-insensitive match on corporation name or contract type.
            status: Optional filter by contract status.
        """
        query = self.client.table("contracts").select(CONTRACT_SELECT)
        if status:
            query = query.eq("status", status.value)

        response = query.order("created_at", desc=True).execute()
        contracts = response.data or []

        if search:
            needle = search.strip().lower()
            contracts = [
                contract
                for contract in contracts
                if needle in ((contract.get("corporations") or {}).get("name") or "").lower()
                or needle in (contract.get("contract_type") or "").lower()
            ]

        return await self._attach_admin_profiles(contracts)

    async def get_contract(self, contract_id: UUID) -> dict[str, Any]:
        """Get a contract by ID.

        Raises:
            NotFoundError: If the contract does not exist.
        """
        response = (
            self.client.table("contracts")
            .select(CONTRACT_SELECT)
            .eq("id", str(contract_id))
            .maybe_single()
            .execute()
        )

        if not response or not response.data:
            raise NotFoundError("Contract not found")
        return (await self._attach_admin_profiles([response.data]))[0]

    async def _attach_admin_profiles(self, contracts: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Embed each contract's administrator profile as ``admin_profile``."""
        admin_ids = sorted({c["admin_user_id"] for c in contracts if c.get("admin_user_id")})
        admins: dict[str, dict[str, Any]] = {}

        if admin_ids:
            response = (
                self.client.table("profiles")
                .select("id, login_id, full_name, email, role")
                .in_("id", admin_ids)
                .execute()
            )
            admins = {row["id"]: row for row in response.data or []}

        return [{**c, "admin_profile": admins.get(c.get("admin_user_id"))} for c in contracts]

    async def create_with_admin(self, data: ContractCreate, actor: dict[str, Any]) -> dict[str, Any]:
        """Create a contract together with its administrator account.

        Finds or registers the corporation, creates the contract, creates the
        admin user with temporary credentials bound to the contract, and makes
        them the corporation's admin member. The contract is removed again if
        the admin account cannot be created.

        Returns:
            dict: ``contract``, ``admin`` profile, ``temp_login_id`` and ``temp_password``.
        """
        corporations = CorporationService()
        corporation = await corporations.get_by_number(data.corporate_number)
        if not corporation:
            corporation = await corporations.register(
                CorporationCreate(corporate_number=data.corporate_number, name=data.corporate_name),
                actor,
            )

        contract_response = (
            self.client.table("contracts")
            .insert(
                {
                    "corporate_id": corporation["id"],
                    "contract_type": data.contract_type,
                    "start_date": data.start_date.isoformat(),
                    "end_date": data.end_date.isoformat() if data.end_date else None,
                    "status": data.status.value,
                    "monthly_fee": data.monthly_fee,
                    "created_by": str(actor["id"]),
                }
            )
            .execute()
        )
        contract = contract_response.data[0]

        try:
            admin, temp_login_id, temp_password = await UserService().create_managed_user(
                str(data.admin_email),
                data.admin_full_name,
                UserRole.ADMIN,
                contract["id"],
            )
        except Exception:
            self.client.table("contracts").delete().eq("id", contract["id"]).execute()
            raise

        update_response = (
            self.client.table("contracts")
            .update({"admin_user_id": admin["id"]})
            .eq("id", contract["id"])
            .execute()
        )
        if update_response.data:
            contract = update_response.data[0]

        await corporations.add_user(
            corporation["id"],
            admin["id"],
            CorporateRole.ADMIN,
            contract_id=contract["id"],
            invited_by=actor["id"],
        )

        logger.info("Contract %s created for corporation %s with admin %s", contract["id"], corporation["id"], admin["id"])

        return {
            "contract": contract,
            "admin": admin,
            "temp_login_id": temp_login_id,
            "temp_password": temp_password,
        }

    async def update_status(self, contract_id: UUID, status: ContractStatus) -> dict[str, Any]:
        """Change a contract's status.

        Raises:
            NotFoundError: If the contract does not exist.
        """
        response = (
            self.client.table("contracts")
            .update({"status": status.value})
            .eq("id", str(contract_id))
            .execute()
        )

        if not response.data:
            raise NotFoundError("Contract not found")

        logger.info("Contract %s status set to %s", contract_id, status.value)
        return response.data[0]

    async def list_users(self, contract_id: UUID) -> list[dict[str, Any]]:
        """List the profiles bound to a contract."""
        await self.get_contract(contract_id)

        response = (
            self.client.table("profiles")
            .select("*")
            .eq("contract_id", str(contract_id))
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []
