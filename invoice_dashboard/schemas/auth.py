"""
Pydantic schemas for credential sign-in.

These models define the contract between the login form, the auth service
and the Supabase Auth provider.
"""

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from invoice_dashboard.utils.constants import DASHBOARD_PATH


class AuthFailureKind(str, Enum):
    """
    Closed set of sign-in failure categories.

    Every recognized provider failure maps to one member. UNHANDLED marks an
    error that is not an authentication error at all; callers must re-raise
    it rather than show a message.
    """
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    RATE_LIMITED = "rate_limited"
    PROVIDER_ERROR = "provider_error"
    UNHANDLED = "unhandled"


class LoginForm(BaseModel):
    """
    Login form submission.

    `redirect_to` is where the browser goes after a successful sign-in. Only
    local paths are accepted so the form cannot be used as an open redirect.
    """
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., description="User email")
    password: str = Field(..., description="User password (never logged)")
    redirect_to: str = Field(DASHBOARD_PATH, alias="redirectTo")

    @field_validator("redirect_to", mode="before")
    @classmethod
    def local_path_only(cls, value: Any) -> str:
        if not isinstance(value, str) or any(ord(ch) < 0x20 for ch in value):
            return DASHBOARD_PATH
        # Browsers treat a backslash as "/", so "/\evil.com" is protocol-relative too.
        normalized = value.replace("\\", "/")
        if not normalized.startswith("/") or normalized.startswith("//"):
            return DASHBOARD_PATH
        return value

    @classmethod
    def from_mapping(cls, form: Mapping[str, Any]) -> "LoginForm":
        """Build the form from a key/value submission; missing fields become empty strings."""
        return cls(
            email=str(form.get("email") or ""),
            password=str(form.get("password") or ""),
            redirectTo=form.get("redirectTo") or DASHBOARD_PATH,
        )


class AuthOutcome(BaseModel):
    """
    Result of a sign-in attempt.

    INVARIANT:
    - ok=True  → kind is None, access_token is set, message is None
    - ok=False → kind is set; message is set unless kind is UNHANDLED,
      in which case `error` holds the original exception
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    kind: Optional[AuthFailureKind] = None
    message: Optional[str] = None
    access_token: Optional[str] = None
    redirect_to: str = DASHBOARD_PATH
    error: Optional[BaseException] = Field(None, exclude=True)


class LoginErrorResponse(BaseModel):
    """Response body for a rejected login."""
    message: str = Field(..., examples=["Invalid credentials."])
