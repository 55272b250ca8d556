"""Contract and settlement robot Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, model_validator

from src.models.contract import ContractStatus
from src.schemas.corporation import CORPORATE_NUMBER_PATTERN, CorporationResponse, MemberProfile


class ContractCreate(BaseModel):
    """Schema for creating a contract together with its administrator."""

    model_config = ConfigDict(from_attributes=True)

    corporate_number: str = Field(..., pattern=CORPORATE_NUMBER_PATTERN, description="13-digit corporate number")
    corporate_name: str = Field(..., min_length=1, max_length=255, description="Corporation name")
    admin_email: EmailStr = Field(..., description="Administrator email address")
    admin_full_name: str = Field(..., min_length=1, max_length=255, description="Administrator full name")
    contract_type: str = Field(default="standard", max_length=50, description="Contract plan")
    start_date: date = Field(..., description="Contract start date")
    end_date: date | None = Field(default=None, description="Contract end date")
    status: ContractStatus = Field(default=ContractStatus.ACTIVE, description="Contract status")
    monthly_fee: int = Field(default=5000, ge=0, description="Monthly fee in JPY")

    @model_validator(mode="after")
    def check_period(self) -> "ContractCreate":
        """Reject contracts ending before they start."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be earlier than start_date")
        return self


class ContractStatusUpdate(BaseModel):
    """Schema for changing a contract's status."""

    model_config = ConfigDict(from_attributes=True)

    status: ContractStatus = Field(..., description="New contract status")


class ContractResponse(BaseModel):
    """Schema for contract API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Contract unique identifier")
    corporate_id: UUID = Field(description="Contracted corporation")
    contract_type: str = Field(description="Contract plan")
    start_date: date = Field(description="Contract start date")
    end_date: date | None = Field(default=None, description="Contract end date")
    status: ContractStatus = Field(description="Contract status")
    monthly_fee: int | None = Field(default=None, description="Monthly fee in JPY")
    admin_user_id: UUID | None = Field(default=None, description="Administrator profile ID")
    created_by: UUID | None = Field(default=None, description="Profile ID of the creator")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


class ContractDetail(ContractResponse):
    """Contract with its corporation and administrator embedded."""

    corporation: CorporationResponse | None = Field(default=None, description="Contracted corporation")
    admin_profile: MemberProfile | None = Field(default=None, description="Administrator profile")


class ContractCreatedResponse(BaseModel):
    """Result of creating a contract with its administrator."""

    model_config = ConfigDict(from_attributes=True)

    contract: ContractResponse = Field(description="The created contract")
    temp_login_id: str = Field(description="Administrator's temporary login ID")
    temp_password: str = Field(description="Administrator's temporary password")
    email_sent: bool = Field(default=False, description="Whether the welcome email was sent")


# Settlement robot schemas


class SettlementRobotCreate(BaseModel):
    """Schema for creating a settlement robot."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., min_length=1, max_length=255, description="Robot name")
    business_year_start: date = Field(..., description="First day of the business year")
    business_year_end: date = Field(..., description="Last day of the business year")
    phase: str = Field(default="preparation", min_length=1, max_length=50, description="Settlement phase")

    @model_validator(mode="after")
    def check_business_year(self) -> "SettlementRobotCreate":
        """Reject business years that end before they start."""
        if self.business_year_start > self.business_year_end:
            raise ValueError("business_year_start must not be after business_year_end")
        return self


class SettlementRobotResponse(BaseModel):
    """Schema for settlement robot API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Robot unique identifier")
    corporate_id: UUID = Field(description="Owning corporation")
    name: str = Field(description="Robot name")
    business_year_start: date = Field(description="First day of the business year")
    business_year_end: date = Field(description="Last day of the business year")
    phase: str = Field(description="Settlement phase")
    created_by: UUID | None = Field(default=None, description="Profile ID of the creator")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last edit timestamp")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def business_year(self) -> str:
        """Business year label, e.g. 2024-04-01 ~ 2025-03-31."""
        return f"{self.business_year_start} ~ {self.business_year_end}"
