# (c) Copyright Datacraft, 2026
"""WebAuthn/FIDO2 platform authenticator ceremonies."""

from .challenge import CHALLENGE_LENGTH, generate_challenge
from .options import RelyingParty, build_creation_options, build_request_options
from .authenticator import (
	CeremonyError,
	CeremonyFailure,
	CeremonyResult,
	PlatformAuthenticator,
)

__all__ = [
	"CHALLENGE_LENGTH",
	"generate_challenge",
	"RelyingParty",
	"build_creation_options",
	"build_request_options",
	"CeremonyError",
	"CeremonyFailure",
	"CeremonyResult",
	"PlatformAuthenticator",
]
