"""Profile Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from src.models.profile import UserRole
from src.schemas.auth import require_confirmation


class ProfileResponse(BaseModel):
    """Schema for profile API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Profile unique identifier")
    auth_user_id: UUID | None = Field(default=None, description="Associated auth user ID")
    login_id: str = Field(description="Login ID")
    email: str = Field(description="User email address")
    full_name: str = Field(description="User full name")
    role: UserRole = Field(description="Portal role")
    is_active: bool = Field(default=True, description="Whether the account is active")
    contract_id: UUID | None = Field(default=None, description="Contract the user belongs to")
    last_login_at: datetime | None = Field(default=None, description="Last successful login")
    created_at: datetime = Field(description="Profile creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's profile.

    All fields are optional for partial updates.
    """

    model_config = ConfigDict(from_attributes=True)

    full_name: str | None = Field(default=None, min_length=1, max_length=255, description="New full name")
    email: EmailStr | None = Field(default=None, description="New email address")


class ChangePasswordRequest(BaseModel):
    """Request schema for changing password."""

    model_config = ConfigDict(from_attributes=True)

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, max_length=100, description="New password")
    confirm_password: str = Field(..., description="New password confirmation")

    @model_validator(mode="after")
    def check_passwords_match(self) -> "ChangePasswordRequest":
        require_confirmation(self.new_password, self.confirm_password, "New passwords do not match")
        return self


class DeleteAccountRequest(BaseModel):
    """Request schema for deleting the caller's account."""

    model_config = ConfigDict(from_attributes=True)

    confirmation: str = Field(..., description="Must be the literal string DELETE")


class InitialSetupRequest(BaseModel):
    """Request schema for replacing temporary credentials on first login."""

    model_config = ConfigDict(from_attributes=True)

    new_login_id: str = Field(..., min_length=1, max_length=255, description="New login ID")
    new_password: str = Field(..., min_length=1, max_length=100, description="New password")
    confirm_password: str = Field(..., description="New password confirmation")
    full_name: str = Field(..., min_length=1, max_length=255, description="Full name")
    email: EmailStr = Field(..., description="Email address")

    @model_validator(mode="after")
    def check_passwords_match(self) -> "InitialSetupRequest":
        require_confirmation(self.new_password, self.confirm_password)
        return self


class UserCorporation(BaseModel):
    """A corporation the caller is assigned to, with their role in it."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Corporation ID")
    corporate_number: str = Field(description="13-digit corporate number")
    name: str = Field(description="Corporation name")
    type: str | None = Field(default=None, description="Corporation type")
    prefecture: str | None = Field(default=None, description="Prefecture")
    city: str | None = Field(default=None, description="City")
    user_role: str = Field(description="Caller's role in the corporation")
    user_status: str = Field(description="Caller's membership status")


# User management schemas


class CreateUserRequest(BaseModel):
    """Request schema for an administrator creating a user."""

    model_config = ConfigDict(from_attributes=True)

    email: EmailStr = Field(..., description="New user's email address")
    full_name: str = Field(..., min_length=1, max_length=255, description="New user's full name")


class CreateUserResponse(BaseModel):
    """Generated credentials for an administrator-created user."""

    model_config = ConfigDict(from_attributes=True)

    temp_login_id: str = Field(description="Temporary login ID")
    temp_password: str = Field(description="Temporary password")
    user: ProfileResponse = Field(description="The created profile")
    email_sent: bool = Field(default=False, description="Whether the welcome email was sent")


class UpdateRoleRequest(BaseModel):
    """Request schema for changing a user's portal role."""

    model_config = ConfigDict(from_attributes=True)

    role: UserRole = Field(..., description="New portal role")


class BulkUserRequest(BaseModel):
    """Request schema for operations on several users at once."""

    model_config = ConfigDict(from_attributes=True)

    user_ids: list[UUID] = Field(..., min_length=1, description="Target profile IDs")


class BulkAssignRequest(BaseModel):
    """Request schema for assigning corporations to users in bulk."""

    model_config = ConfigDict(from_attributes=True)

    user_ids: list[UUID] = Field(..., min_length=1, description="Target profile IDs")
    corporate_ids: list[UUID] = Field(..., min_length=1, description="Corporations to assign")
