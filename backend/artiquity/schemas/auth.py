"""Auth Schemas — user accounts, OAuth 2.0 token requests and client registration.

Invariants:
    - OAuth request and response bodies keep RFC 6749/7591/7662 snake_case names
    - TokenRequest requires code + redirect_uri for authorization_code and
      license_id for the rsl grant
    - user_type / country_code are only accepted with the rsl grant
    - UserCreate.password: 8-200 chars; country_code: two upper-case letters

Design Decisions:
    - OAuth bodies are plain BaseModel (not CamelModel): the field names are
      fixed by the RFCs and clients send them as-is
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from artiquity.core.domain_types import GrantType, UserType
from artiquity.schemas.common import CamelModel


class UserCreate(CamelModel):
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=200)
    user_type: UserType = UserType.INDIVIDUAL
    country_code: str | None = Field(None, min_length=2, max_length=2)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("country_code")
    @classmethod
    def upper_country(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class UserResponse(CamelModel):
    id: str
    email: str
    user_type: str
    country_code: str | None = None


class LoginRequest(CamelModel):
    email: str
    password: str


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserResponse


class TokenRequest(BaseModel):
    grant_type: GrantType
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    code: str | None = None
    redirect_uri: str | None = None
    scope: str | None = None
    license_id: str | None = None
    user_type: UserType | None = None
    country_code: str | None = Field(None, min_length=2, max_length=2)

    @model_validator(mode="after")
    def check_grant_fields(self):
        if self.grant_type == GrantType.AUTHORIZATION_CODE:
            if not self.code or not self.redirect_uri:
                raise ValueError("authorization_code grant requires code and redirect_uri")
        if self.grant_type == GrantType.RSL and not self.license_id:
            raise ValueError("rsl grant requires license_id")
        if self.grant_type != GrantType.RSL and (self.user_type or self.country_code):
            raise ValueError("user_type and country_code are only allowed with the rsl grant")
        return self


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    scope: str
    refresh_token: str | None = None
    rsl_license_id: str | None = None


class IntrospectionRequest(BaseModel):
    token: str = Field(min_length=1)
    token_type_hint: str | None = Field(None, pattern=r"^(access_token|refresh_token)$")


class ClientRegistration(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    redirect_uris: list[str] = Field(default_factory=list)
    grant_types: list[GrantType] = Field(
        default_factory=lambda: [GrantType.CLIENT_CREDENTIALS],
    )
    scope: str = "read"


class ClientRegistrationResponse(BaseModel):
    client_id: str
    client_secret: str
    client_id_issued_at: int
    client_secret_expires_at: int = 0
