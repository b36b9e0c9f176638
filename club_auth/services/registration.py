# (c) Copyright Datacraft, 2026
"""Registration of a platform authenticator for the signed-in member."""
import logging

from webauthn import verify_registration_response
from webauthn.helpers.exceptions import InvalidJSONStructure, InvalidRegistrationResponse

from club_auth import schema
from club_auth.db.orm import WebAuthnCredential
from club_auth.exceptions import (
	CapabilityUnavailable,
	CeremonyCancelled,
	ClubAuthError,
	CredentialAlreadyRegistered,
	CredentialInvalid,
	ValidationError,
)
from club_auth.utils import bytes_to_b64, device_label
from club_auth.webauthn import (
	CeremonyError,
	CeremonyFailure,
	PlatformAuthenticator,
	RelyingParty,
	build_creation_options,
	generate_challenge,
)
from club_auth.webauthn.options import SUPPORTED_ALGORITHMS

from .credentials import CredentialStore

logger = logging.getLogger(__name__)


def registration_error(failure: CeremonyFailure) -> ClubAuthError:
	if failure.cancelled:
		return CeremonyCancelled("Registration cancelled or not authorized")
	if failure.reason == CeremonyError.INVALID_STATE:
		return CredentialAlreadyRegistered()
	if failure.reason in (CeremonyError.NOT_SUPPORTED, CeremonyError.SECURITY):
		return CapabilityUnavailable("Feature not supported on this device")
	return CeremonyCancelled("Registration failed", details=failure.message)


class RegistrationFlow:
	"""Bind a new platform authenticator to an authenticated member.

	Attestation is requested as ``none``: the response is checked for
	challenge, origin, RP id hash and user verification, and the public
	key is taken as presented.
	"""

	def __init__(
		self,
		authenticator: PlatformAuthenticator,
		store: CredentialStore,
		rp: RelyingParty,
		*,
		user_agent: str | None = None,
	):
		self.authenticator = authenticator
		self.store = store
		self.rp = rp
		self.user_agent = user_agent

	async def register(self, user: schema.User | None) -> WebAuthnCredential:
		"""Run the creation ceremony and store the resulting credential.

		Args:
			user: The signed-in member

		Returns:
			The stored, active credential row
		"""
		if user is None:
			raise ValidationError("User not authenticated")

		if not await self.authenticator.is_available():
			raise CapabilityUnavailable()

		challenge = generate_challenge()
		options = build_creation_options(
			self.rp,
			user,
			challenge,
			self.store.list_for_user(user.id),
		)

		outcome = await self.authenticator.create(options)
		if isinstance(outcome, CeremonyFailure):
			logger.info(f"Registration ceremony for user {user.id} ended with {outcome.reason.value}")
			raise registration_error(outcome)

		try:
			verification = verify_registration_response(
				credential=outcome,
				expected_challenge=challenge,
				expected_rp_id=self.rp.id,
				expected_origin=self.rp.origin,
				require_user_verification=True,
				supported_pub_key_algs=SUPPORTED_ALGORITHMS,
			)
		except (InvalidRegistrationResponse, InvalidJSONStructure) as e:
			logger.warning(f"Registration verification failed for user {user.id}: {e}")
			raise CredentialInvalid("Registration response could not be verified", details=str(e)) from e

		transports = (outcome.get("response") or {}).get("transports") or []

		return self.store.add(
			user_id=user.id,
			credential_id=bytes_to_b64(verification.credential_id),
			public_key=bytes_to_b64(verification.credential_public_key),
			counter=verification.sign_count,
			transports=transports,
			device_name=device_label(self.user_agent),
		)
