"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Response models never carry the password digest.
"""

from pydantic import BaseModel, EmailStr, Field

from src.domain.identity import MAX_PASSWORD_BYTES
from src.domain.models import IdentityRecord


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    username: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(
        ..., min_length=1, max_length=MAX_PASSWORD_BYTES, description="User password"
    )


class LoginRequest(BaseModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateUserRequest(BaseModel):
    """Request model for a partial user update. Omitted fields are left unchanged."""

    username: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=1, max_length=MAX_PASSWORD_BYTES)


class UserResponse(BaseModel):
    """Public view of an identity record."""

    id: str
    username: str
    email: str

    @classmethod
    def from_record(cls, record: IdentityRecord) -> "UserResponse":
        return cls(id=record.id, username=record.username, email=record.email)


class UserListResponse(BaseModel):
    total_user: int
    allUsers: list[UserResponse]


class UserEnvelope(BaseModel):
    user: UserResponse


class RegisterResponse(BaseModel):
    newUser: UserResponse


class UpdateUserResponse(BaseModel):
    updateUser: UserResponse


class DeleteResponse(BaseModel):
    msg: str


class HealthResponse(BaseModel):
    status: str
    users: int


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
