# (c) Copyright Datacraft, 2026
"""Identity provider contracts consumed by the auth subsystem."""
from enum import Enum
from typing import Callable, Protocol

from club_auth.schema import AuthSession, LoginArtifact


class AuthEvent(str, Enum):
	SIGNED_IN = "SIGNED_IN"
	SIGNED_OUT = "SIGNED_OUT"


AuthStateCallback = Callable[[AuthEvent, AuthSession | None], None]


class IdentityProvider(Protocol):
	"""Client-side identity provider, authenticated with the anonymous key."""

	async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
		...

	async def sign_out(self) -> None:
		...

	async def get_session(self) -> AuthSession | None:
		...

	def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
		...

	async def verify_one_time_code(self, artifact: LoginArtifact) -> AuthSession:
		...


class IdentityAdmin(Protocol):
	"""Privileged identity operations, only reachable from the bootstrap bridge."""

	async def issue_one_time_login_artifact(self, email: str) -> LoginArtifact:
		...
