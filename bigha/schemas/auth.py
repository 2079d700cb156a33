"""
Authentication Pydantic schemas.

This module provides:
- Claims carried by a validated session
- Token pair and login results
- OTP status
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bigha.core.security import validate_password_strength


class SessionClaims(BaseModel):
    """Claims of a session token that passed signature and session-row checks."""

    admin_id: uuid.UUID
    email: str
    role: str | None = None
    session_id: uuid.UUID
    issued_at: datetime
    expires_at: datetime


class TokenPair(BaseModel):
    """
    Credentials issued at login or refresh.

    Attributes:
        access_token: Signed session token for the Authorization header
        refresh_token: Opaque refresh token (shown once, stored hashed)
        token_type: Always "Bearer"
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class LoginResult(BaseModel):
    """Outcome of adminLogin; tokens are absent while a second factor is pending."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    admin: object | None = None
    tokens: TokenPair | None = None
    requires_otp: bool = False
    message: str | None = None


class OTPStatus(BaseModel):
    can_resend: bool
    next_resend_in: int = Field(ge=0, description="Seconds until another OTP may be requested")
    attempts_remaining: int = Field(ge=0)
    is_blocked: bool
    block_expires_in: int = Field(ge=0)


class OTPRequestResult(BaseModel):
    success: bool
    message: str
    expires_in: int | None = None
    status: OTPStatus | None = None


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        is_valid, error_message = validate_password_strength(value)
        if not is_valid:
            raise ValueError(error_message)
        return value


class LoginInput(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
