"""Contract and settlement robot type definitions for database operations."""

from datetime import date, datetime
from enum import Enum
from typing import TypedDict
from uuid import UUID


class ContractStatus(str, Enum):
    """Contract status values."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class Contract(TypedDict):
    """Contract table row representation.

    A contract binds a corporation to an administrator who manages
    the users created under it.
    """

    id: UUID
    corporate_id: UUID
    contract_type: str
    start_date: date
    end_date: date | None
    status: ContractStatus
    monthly_fee: int
    admin_user_id: UUID | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime


class SettlementRobot(TypedDict):
    """Settlement robot table row representation.

    One robot per corporation and business year.
    """

    id: UUID
    corporate_id: UUID
    name: str
    business_year_start: date
    business_year_end: date
    phase: str
    created_by: UUID
    created_at: datetime
    updated_at: datetime
