"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=72)
    name: str | None = Field(None, max_length=255)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=72)


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
    notifications_enabled: bool


class UserPreferencesUpdate(BaseModel):
    """Update the current user's preferences."""

    name: str | None = Field(None, max_length=255)
    notifications_enabled: bool | None = None


class PasswordUpdate(BaseModel):
    """Change the current user's password."""

    current_password: str = Field(..., min_length=1, max_length=72)
    new_password: str = Field(..., min_length=8, max_length=72)


class AccountDelete(BaseModel):
    """Confirm account deletion with the current password."""

    password: str = Field(..., min_length=1, max_length=72)


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse
