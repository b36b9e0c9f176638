from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Club member profile as seen by the rest of the app."""
    id: UUID
    auth_id: UUID
    email: str
    first_name: str = ""
    last_name: str = ""
    membership_number: str | None = None
    role: str = "user"
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email


class TokenData(BaseModel):
    """Claims of an identity-provider JWT (API key or access token)."""
    sub: str | None = None
    role: str
    email: str | None = None

    model_config = ConfigDict(extra="ignore")


class IdentityUser(BaseModel):
    id: str
    email: str | None = None

    model_config = ConfigDict(extra="ignore")


class AuthSession(BaseModel):
    """Application session issued by the identity provider."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    user: IdentityUser

    model_config = ConfigDict(extra="ignore")


class LoginArtifact(BaseModel):
    """One-time login material; at least one of the tokens is set."""
    email: str
    email_otp: str | None = None
    hashed_token: str | None = None


class AssertionResult(BaseModel):
    """Outcome of a verified assertion: who holds the key, not yet a session."""
    user_id: str
    credential_id: str


# Session bootstrap bridge


class BootstrapRequest(BaseModel):
    user_id: str = Field(alias="userId")
    credential_id: str = Field(alias="credentialId")

    model_config = ConfigDict(populate_by_name=True)


class BootstrapUser(BaseModel):
    id: str
    email: str


class BootstrapResponse(BaseModel):
    email: str
    email_otp: str | None = None
    token: str | None = None
    user: BootstrapUser

    def to_artifact(self) -> LoginArtifact:
        return LoginArtifact(
            email=self.email,
            email_otp=self.email_otp,
            hashed_token=self.token,
        )


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


# Credential management


class CredentialInfo(BaseModel):
    """Registered credential, without its public key."""
    credential_id: str
    device_name: str | None = None
    transports: list[str] = []
    created_at: datetime | None = None
    last_used_at: datetime | None = None
    is_active: bool

    @classmethod
    def from_row(cls, row) -> "CredentialInfo":
        return cls(
            credential_id=row.credential_id,
            device_name=row.device_name,
            transports=row.transport_list,
            created_at=row.created_at,
            last_used_at=row.last_used_at,
            is_active=row.is_active,
        )


class CredentialListResponse(BaseModel):
    credentials: list[CredentialInfo]
    has_credentials: bool


class CredentialRevokeResponse(BaseModel):
    success: bool
    message: str | None = None
