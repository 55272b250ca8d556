"""Token, identity and login/registration schemas."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from src.models.profile import UserRole


def require_confirmation(password: str, confirmation: str, message: str = "Passwords do not match") -> None:
    """Raise ValueError unless the confirmation repeats the password."""
    if password != confirmation:
        raise ValueError(message)


class UserContext(BaseModel):
    """Identity of the caller as asserted by their access token."""

    user_id: UUID = Field(description="Supabase Auth user ID (sub claim)")
    email: str | None = Field(default=None, description="Email claim")
    role: str | None = Field(default=None, description="Supabase role claim, e.g. authenticated")


class TokenPayload(BaseModel):
    """Claims of a verified Supabase access token."""

    sub: str
    email: str | None = None
    role: str | None = None
    exp: int
    iat: int
    aud: str | None = None
    iss: str | None = None

    def to_user_context(self) -> UserContext:
        return UserContext(user_id=UUID(self.sub), email=self.email, role=self.role)


class AuthenticatedResponse(BaseModel):
    """Body of the token check endpoint."""

    authenticated: bool = Field(default=True)
    user_id: str = Field(description="Supabase Auth user ID")
    email: str | None = Field(default=None)
    role: str | None = Field(default=None)


class PortalUser(BaseModel):
    """The signed-in user as the portal sees them."""

    id: UUID = Field(description="Profile ID")
    login_id: str = Field(description="Login ID used to sign in")
    email: str = Field(description="Email address")
    full_name: str = Field(description="Full name")
    role: UserRole = Field(description="Portal role")
    contract_id: UUID | None = Field(default=None, description="Contract the user is bound to")
    requires_initial_setup: bool = Field(
        default=False,
        description="True while the user still signs in with generated temporary credentials",
    )


class TokenPair(BaseModel):
    """Supabase session tokens."""

    access_token: str = Field(description="JWT access token")
    refresh_token: str | None = Field(default=None, description="Refresh token")
    expires_in: int = Field(description="Access token lifetime in seconds")


class LoginRequest(BaseModel):
    login_id: str = Field(..., min_length=1, max_length=255, description="Login ID")
    password: str = Field(..., min_length=1, description="Password")


class LoginResponse(TokenPair):
    user: PortalUser = Field(description="Signed-in portal user")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class RefreshTokenResponse(TokenPair):
    """Tokens of the refreshed session."""


class RegisterRequest(BaseModel):
    """Self sign-up.

    Length and uniqueness rules depend on settings and stored data, so
    AuthService checks them.
    """

    login_id: str = Field(..., min_length=1, max_length=255, description="Desired login ID")
    email: EmailStr = Field(..., description="Email address")
    full_name: str = Field(..., min_length=1, max_length=255, description="Full name")
    password: str = Field(..., min_length=1, max_length=100, description="Password")
    confirm_password: str = Field(..., description="Password again")

    @model_validator(mode="after")
    def check_passwords_match(self) -> "RegisterRequest":
        require_confirmation(self.password, self.confirm_password)
        return self


class RegisterResponse(BaseModel):
    user: PortalUser = Field(description="The created portal user")
    message: str = Field(description="Success message")
