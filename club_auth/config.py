import logging

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import PostgresDsn, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    jwt_secret: str
    db_url: PostgresDsn

    # Supabase project
    supabase_url: str = Field(default="http://localhost:54321", description="Project base URL")
    supabase_anon_key: str = Field(default="", description="Anonymous client API key")
    supabase_service_role_key: str = Field(default="", description="Administrative API key, bridge only")
    access_token_audience: str = "authenticated"
    http_timeout: float = Field(gt=0, default=10.0)

    # WebAuthn/Passkey settings
    webauthn_rp_id: str | None = Field(default=None, description="Relying Party ID, defaults to the origin hostname")
    webauthn_rp_name: str = Field(default="Club Portal", description="Relying Party display name")
    webauthn_origin: str = Field(default="https://localhost", description="Expected origin for WebAuthn")
    webauthn_timeout: int = Field(gt=0, default=60000, description="WebAuthn timeout in ms")
    webauthn_revoke_on_replay: bool = True

    # Session bootstrap bridge
    bootstrap_url: str | None = Field(default=None, description="Bridge endpoint used by clients")
    bootstrap_allowed_roles: list[str] = ["anon"]

    debug: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix='club_')

    @property
    def relying_party_id(self) -> str:
        return self.webauthn_rp_id or urlparse(self.webauthn_origin).hostname or "localhost"

    @property
    def bootstrap_endpoint(self) -> str:
        if self.bootstrap_url:
            return self.bootstrap_url
        return f"{self.supabase_url.rstrip('/')}/functions/v1/biometric-auth"


@lru_cache()
def get_settings():
    return Settings()
