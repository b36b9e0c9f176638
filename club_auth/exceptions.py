# (c) Copyright Datacraft, 2026
"""Error taxonomy for biometric authentication and session bootstrap.

Every error carries the HTTP status it maps to and a message that is
safe to show to the caller. ``details`` holds diagnostic text that is
only exposed in debug mode.
"""


class ClubAuthError(Exception):
	"""Base error."""
	status_code: int = 500
	message: str = "Internal server error"

	def __init__(self, message: str | None = None, *, details: str | None = None):
		if message is not None:
			self.message = message
		self.details = details
		super().__init__(self.message)


class ValidationError(ClubAuthError):
	"""Missing or malformed input."""
	status_code = 400
	message = "Invalid request"


class InvalidLogin(ValidationError):
	"""Email/password pair rejected by the identity provider."""
	message = "Incorrect email or password"


class CapabilityUnavailable(ClubAuthError):
	"""Device lacks the platform authenticator support a ceremony needs."""
	status_code = 400
	message = "Biometric authentication unavailable on this device"


class CeremonyCancelled(ClubAuthError):
	"""User or platform declined the ceremony."""
	status_code = 400
	message = "Operation cancelled or not authorized"


class CredentialInvalid(ClubAuthError):
	"""Unknown, inactive or unverifiable credential."""
	status_code = 401
	message = "Invalid or inactive credential"


class CredentialAlreadyRegistered(CredentialInvalid):
	status_code = 409
	message = "Credential already registered"


class CredentialOwnershipMismatch(CredentialInvalid):
	status_code = 403
	message = "Credential does not belong to this user"


class ReplaySuspected(ClubAuthError):
	"""Authenticator counter did not increase."""
	status_code = 401
	message = "Replay suspected, authentication rejected"


class UserInactive(ClubAuthError):
	status_code = 404
	message = "User not found or inactive"


class UpstreamFailure(ClubAuthError):
	"""Identity provider or store call failed or returned an unexpected shape."""
	status_code = 500
	message = "Upstream service failure"


class InternalError(ClubAuthError):
	status_code = 500
	message = "Internal server error"


class AuthenticationRequired(ClubAuthError):
	"""Missing, invalid or expired API key / access token."""
	status_code = 401
	message = "Not authenticated"


class CredentialNotFound(ClubAuthError):
	status_code = 404
	message = "Credential not found"
