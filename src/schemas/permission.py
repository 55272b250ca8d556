"""Corporate permission Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PermissionFlags(BaseModel):
    """View / create / approve flags for one user on one corporation."""

    model_config = ConfigDict(from_attributes=True)

    view: bool = Field(default=False, description="May view the corporation's robots")
    create: bool = Field(default=False, description="May create settlement robots")
    approve: bool = Field(default=False, description="May approve settlement robots")

    @property
    def any_granted(self) -> bool:
        """Check whether at least one permission is granted."""
        return self.view or self.create or self.approve


class UserPermissionInput(PermissionFlags):
    """A user's permissions on one corporation, as submitted."""

    corporate_id: UUID = Field(..., description="Corporation ID")


class UserPermissionResponse(UserPermissionInput):
    """A user's permissions on one corporation, with the corporation name."""

    id: UUID | None = Field(default=None, description="Permission row ID")
    corporate_name: str = Field(default="Unknown", description="Corporation name")


class SaveUserPermissionsRequest(BaseModel):
    """Request schema replacing every permission row of a user."""

    model_config = ConfigDict(from_attributes=True)

    permissions: list[UserPermissionInput] = Field(default_factory=list, description="Permission rows")


class MatrixEntryInput(PermissionFlags):
    """One row of a corporation's permission matrix, as submitted."""

    user_id: UUID = Field(..., description="Profile ID")


class MatrixEntryResponse(MatrixEntryInput):
    """One row of a corporation's permission matrix."""

    user_name: str | None = Field(default=None, description="User full name")
    email: str | None = Field(default=None, description="User email")


class SaveMatrixRequest(BaseModel):
    """Request schema replacing a corporation's permission matrix."""

    model_config = ConfigDict(from_attributes=True)

    permissions: list[MatrixEntryInput] = Field(default_factory=list, description="Matrix rows")
