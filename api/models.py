"""
API request and response models for channelsync REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Separation of concerns: auth/ models = domain truth; api/ models = API contract.
No response model has a credential or password field, so neither can leak.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from auth.models import User

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CheckMode(str, Enum):
    all = "all"
    any = "any"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class UserPut(BaseModel):
    """Request body for PUT /api/v1/users/{name}.

    password is transient: it is hashed on save and never stored or echoed.
    Omitting it keeps the existing credential when the user already exists.
    An empty string clears the credential, which only the guest may have.
    """

    password: Optional[str] = Field(default=None, max_length=255)
    channels: list[str] = Field(default_factory=list)


class AuthorizeRequest(BaseModel):
    """Request body for POST /api/v1/authorize.

    Either channels (checked with mode "all" or "any") or doc_channels (a
    document's channel map; null or "" marks current membership). Not both.
    """

    channels: Optional[list[str]] = None
    mode: CheckMode = CheckMode.all
    doc_channels: Optional[dict[str, Optional[str]]] = None

    @model_validator(mode="after")
    def exactly_one_target(self) -> "AuthorizeRequest":
        if (self.channels is None) == (self.doc_channels is None):
            raise ValueError("Provide exactly one of 'channels' or 'doc_channels'.")
        return self


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user record."""

    model_config = ConfigDict(frozen=True)

    name: str
    channels: list[str]

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(name=user.name, channels=list(user.channels))


class MeResponse(BaseModel):
    """Response for GET /api/v1/me.

    name is None and access_control is False when channel access control is
    disabled; the caller can then see everything.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str]
    channels: list[str]
    access_control: bool = True


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
