"""Corporation Pydantic schemas for API request/response models."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from src.models.corporation import CorporateRole, CorporateUserStatus, InvitationStatus

CORPORATE_NUMBER_PATTERN = r"^\d{13}$"
DEFAULT_CORPORATION_TYPE = "株式会社"


class CorporationFields(BaseModel):
    """Optional descriptive fields shared by create and update schemas."""

    furigana: str | None = Field(default=None, max_length=255, description="Name reading in katakana")
    prefecture: str | None = Field(default=None, max_length=50, description="Prefecture")
    city: str | None = Field(default=None, max_length=255, description="City")
    address: str | None = Field(default=None, max_length=255, description="Street address")
    overseas_location: str | None = Field(default=None, max_length=255, description="Location outside Japan")
    closure_date: date | None = Field(default=None, description="Date of closure")
    closure_reason: str | None = Field(default=None, max_length=255, description="Reason for closure")
    successor_number: str | None = Field(
        default=None,
        pattern=CORPORATE_NUMBER_PATTERN,
        description="Corporate number of the successor",
    )
    english_name: str | None = Field(default=None, max_length=255, description="English name")
    english_prefecture: str | None = Field(default=None, max_length=255, description="English prefecture")
    english_city: str | None = Field(default=None, max_length=255, description="English city")
    english_overseas_location: str | None = Field(
        default=None, max_length=255, description="English overseas location"
    )

    @field_validator(
        "furigana",
        "prefecture",
        "city",
        "address",
        "overseas_location",
        "closure_date",
        "closure_reason",
        "successor_number",
        "english_name",
        "english_prefecture",
        "english_city",
        "english_overseas_location",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Store empty form fields as null."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CorporationCreate(CorporationFields):
    """Schema for registering a corporation."""

    model_config = ConfigDict(from_attributes=True)

    corporate_number: str = Field(..., pattern=CORPORATE_NUMBER_PATTERN, description="13-digit corporate number")
    name: str = Field(..., min_length=1, max_length=255, description="Corporation name")
    type: str = Field(default=DEFAULT_CORPORATION_TYPE, max_length=50, description="Corporation type")

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, value: Any) -> Any:
        """Fall back to the default type when the form leaves it empty."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CORPORATION_TYPE
        return value

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value


class CorporationUpdate(CorporationFields):
    """Schema for updating a corporation.

    All fields are optional for partial updates.
    """

    model_config = ConfigDict(from_attributes=True)

    name: str | None = Field(default=None, min_length=1, max_length=255, description="Corporation name")
    type: str | None = Field(default=None, max_length=50, description="Corporation type")

    @field_validator("name", "type")
    @classmethod
    def not_blank(cls, value: str | None, info: ValidationInfo) -> str:
        """Omitted fields stay unchanged; supplied ones may not be cleared."""
        if value is None or not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return value


class CorporationResponse(BaseModel):
    """Schema for corporation API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Corporation unique identifier")
    corporate_number: str = Field(description="13-digit corporate number")
    name: str = Field(description="Corporation name")
    furigana: str | None = None
    type: str | None = None
    prefecture: str | None = None
    city: str | None = None
    address: str | None = None
    overseas_location: str | None = None
    closure_date: date | None = None
    closure_reason: str | None = None
    successor_number: str | None = None
    english_name: str | None = None
    english_prefecture: str | None = None
    english_city: str | None = None
    english_overseas_location: str | None = None
    created_at: datetime = Field(description="Registration timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


# Corporate user schemas


class MemberProfile(BaseModel):
    """Embedded profile info for corporate user responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Profile unique identifier")
    login_id: str | None = Field(default=None, description="Member login ID")
    full_name: str | None = Field(default=None, description="Member full name")
    email: str | None = Field(default=None, description="Member email")
    role: str | None = Field(default=None, description="Member portal role")


class CorporateUserResponse(BaseModel):
    """Schema for corporate user API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Membership record ID")
    corporate_id: UUID = Field(description="Corporation ID")
    user_id: UUID = Field(description="Member's profile ID")
    role: CorporateRole = Field(description="Member's role in the corporation")
    status: CorporateUserStatus = Field(description="Membership status")
    contract_id: UUID | None = Field(default=None, description="Contract the membership belongs to")
    joined_at: datetime | None = Field(default=None, description="When member joined")
    profile: MemberProfile | None = Field(default=None, description="Member's profile information")


class AddCorporateUserRequest(BaseModel):
    """Request schema for adding a user to a corporation."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(..., description="Profile ID to add")
    role: CorporateRole = Field(default=CorporateRole.GENERAL, description="Role in the corporation")
    contract_id: UUID | None = Field(default=None, description="Contract to bind the membership to")


class UpdateCorporateUserRoleRequest(BaseModel):
    """Request schema for changing a member's corporate role."""

    model_config = ConfigDict(from_attributes=True)

    role: CorporateRole = Field(..., description="New role in the corporation")


# Invitation schemas


class InvitationCreate(BaseModel):
    """Schema for creating an invitation."""

    model_config = ConfigDict(from_attributes=True)

    email: EmailStr = Field(..., description="Email address to invite")


class InvitationResponse(BaseModel):
    """Schema for invitation API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Invitation unique identifier")
    corporate_id: UUID = Field(description="Corporation being invited to")
    email: str = Field(description="Invited email address")
    invited_by: UUID = Field(description="Profile ID of inviter")
    status: InvitationStatus = Field(description="Current invitation status")
    expires_at: datetime = Field(description="Invitation expiration timestamp")
    created_at: datetime = Field(description="Invitation creation timestamp")
    responded_at: datetime | None = Field(default=None, description="When the invitation was answered")


class InvitationWithCorporation(InvitationResponse):
    """Invitation response with corporation details."""

    corporation_name: str = Field(description="Name of the corporation")
    corporate_number: str | None = Field(default=None, description="Corporate number")


class InvitationCreatedResponse(BaseModel):
    """Result of sending an invitation."""

    model_config = ConfigDict(from_attributes=True)

    invitation: InvitationResponse = Field(description="The created invitation")
    invitee_name: str | None = Field(
        default=None,
        description="Full name of the registered user owning the email, if any",
    )
    email_sent: bool = Field(default=False, description="Whether the invitation email was sent")
