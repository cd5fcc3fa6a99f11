"""Authentication and account request/response schemas."""

from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.schemas.common import CamelModel

_REQUEST_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class UserRegister(CamelModel):
    """User registration form fields. Files are received separately."""

    model_config = _REQUEST_CONFIG

    fullname: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        return value.lower()


class UserLogin(CamelModel):
    """User login request. Either username or email identifies the account."""

    model_config = _REQUEST_CONFIG

    username: str | None = Field(None, max_length=255)
    email: EmailStr | None = Field(None, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username", "email", mode="before")
    @classmethod
    def blank_as_missing(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def require_identifier(self) -> "UserLogin":
        if not self.username and not self.email:
            raise ValueError("Username or email is required")
        return self


class RefreshTokenRequest(CamelModel):
    """Refresh request body. The cookie takes precedence when present."""

    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    """Password change request. Trimmed the same way as login and registration."""

    model_config = _REQUEST_CONFIG

    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class UpdateAccountRequest(CamelModel):
    """Account details update. Both fields are required."""

    model_config = _REQUEST_CONFIG

    fullname: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)


class UserResponse(CamelModel):
    """User information response. Never carries credentials."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    """Login payload with the user and both tokens."""

    user: UserResponse
