"""Contract API routes for system administrators."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from src.api.deps import SystemAdminProfile
from src.models.contract import ContractStatus
from src.schemas.contract import (
    ContractCreate,
    ContractCreatedResponse,
    ContractDetail,
    ContractResponse,
    ContractStatusUpdate,
)
from src.schemas.profile import ProfileResponse
from src.services.contract_service import ContractService
from src.services.email_service import EmailService

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get(
    "",
    response_model=list[ContractDetail],
    summary="List contracts",
    description="Contracts with corporation and administrator, newest first.",
)
async def list_contracts(
    actor: SystemAdminProfile,
    search: str | None = Query(default=None, description="Matches corporation name or contract type"),
    status_filter: ContractStatus | None = Query(default=None, alias="status", description="Contract status"),
) -> list[ContractDetail]:
    """List contracts."""
    contracts = await ContractService().list_contracts(search=search, status=status_filter)
    return [
        ContractDetail(**contract, corporation=contract.get("corporations"))
        for contract in contracts
    ]


@router.post(
    "",
    response_model=ContractCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a contract with its administrator",
    description=(
        "Finds or registers the corporation, creates the contract and an administrator "
        "account with temporary credentials, and emails the credentials."
    ),
    responses={409: {"description": "Administrator email already registered"}},
)
async def create_contract(data: ContractCreate, actor: SystemAdminProfile) -> ContractCreatedResponse:
    """Create a contract and its administrator."""
    result = await ContractService().create_with_admin(data, actor)

    email_result = await EmailService().send_welcome_email(
        to_email=result["admin"]["email"],
        full_name=result["admin"]["full_name"],
        temp_login_id=result["temp_login_id"],
        temp_password=result["temp_password"],
    )

    return ContractCreatedResponse(
        contract=ContractResponse(**result["contract"]),
        temp_login_id=result["temp_login_id"],
        temp_password=result["temp_password"],
        email_sent=email_result["success"],
    )


@router.put(
    "/{contract_id}/status",
    response_model=ContractResponse,
    summary="Change contract status",
)
async def update_contract_status(
    contract_id: UUID,
    data: ContractStatusUpdate,
    actor: SystemAdminProfile,
) -> ContractResponse:
    """Change a contract's status."""
    contract = await ContractService().update_status(contract_id, data.status)
    return ContractResponse(**contract)


@router.get(
    "/{contract_id}/users",
    response_model=list[ProfileResponse],
    summary="List a contract's users",
)
async def list_contract_users(contract_id: UUID, actor: SystemAdminProfile) -> list[ProfileResponse]:
    """List the profiles bound to a contract."""
    users = await ContractService().list_users(contract_id)
    return [ProfileResponse(**user) for user in users]
