# (c) Copyright Datacraft, 2026
"""Platform authenticator capability.

The ceremonies themselves run on the member's device (Face ID, Touch ID,
Windows Hello, fingerprint). The flows only see this interface: coroutine
methods exchanging WebAuthn JSON (base64url binary fields), where a declined
or failed ceremony comes back as a `CeremonyFailure` value instead of an
exception.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class CeremonyError(str, Enum):
	"""Why a ceremony did not produce a credential (DOMException names)."""
	NOT_ALLOWED = "NotAllowedError"
	INVALID_STATE = "InvalidStateError"
	NOT_SUPPORTED = "NotSupportedError"
	ABORT = "AbortError"
	SECURITY = "SecurityError"
	UNKNOWN = "UnknownError"

	@classmethod
	def from_name(cls, name: str | None) -> "CeremonyError":
		"""Map a DOMException name to a member, UNKNOWN when unrecognised."""
		for member in cls:
			if member.value == name:
				return member
		return cls.UNKNOWN


@dataclass(frozen=True)
class CeremonyFailure:
	reason: CeremonyError
	message: str | None = None

	@property
	def cancelled(self) -> bool:
		# timeouts are reported as NotAllowedError by the platform
		return self.reason in (CeremonyError.NOT_ALLOWED, CeremonyError.ABORT)


CeremonyResult = dict[str, Any] | CeremonyFailure


@runtime_checkable
class PlatformAuthenticator(Protocol):
	async def is_available(self) -> bool:
		"""True when a user-verifying platform authenticator is present."""
		...

	async def create(self, options: dict[str, Any]) -> CeremonyResult:
		"""Run navigator.credentials.create with PublicKeyCredentialCreationOptions JSON."""
		...

	async def get(self, options: dict[str, Any]) -> CeremonyResult:
		"""Run navigator.credentials.get with PublicKeyCredentialRequestOptions JSON."""
		...
