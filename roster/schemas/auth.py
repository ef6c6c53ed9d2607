"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from roster.core.security import CALL_SIGN_MAX_LEN, CALL_SIGN_MIN_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


class LoginRequest(BaseModel):
    """Credentials for login. Call signs double as usernames."""

    call_sign: str = Field(..., min_length=CALL_SIGN_MIN_LEN, max_length=CALL_SIGN_MAX_LEN, description="Call sign")
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    role: str | None = Field(default=None, description="Highest role held")
    require_password_change: bool = Field(default=False)


class ChangePasswordRequest(BaseModel):
    """The caller's current password and the one replacing it."""

    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class ChangePasswordResponse(BaseModel):
    success: bool = True
    message: str = "Password updated successfully"


class PasswordResetResponse(BaseModel):
    """Shown once to the super admin; the identity must change it on next login."""

    temporary_password: str
    require_password_change: bool = True


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"


class PersonnelOut(BaseModel):
    """Personnel record as returned to clients (no password fields)."""

    id: int
    call_sign: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    rank_id: int | None = None
    status: str
    join_date: datetime | None = None
    discharge_date: datetime | None = None
    notes: str | None = None
    is_active: bool | None = None
    require_password_change: bool | None = None
    last_password_change: datetime | None = None

    class Config:
        from_attributes = True
