# (c) Copyright Datacraft, 2026
"""Assertion (sign-in) ceremony: proves the device holds the private key
of a registered credential and resolves it to the owning member. No
session is created here.
"""
import logging

from webauthn import verify_authentication_response
from webauthn.helpers import parse_authentication_credential_json, parse_authenticator_data
from webauthn.helpers.exceptions import InvalidAuthenticationResponse, InvalidJSONStructure
from webauthn.helpers.structs import AuthenticationCredential

from club_auth import schema
from club_auth.db.orm import WebAuthnCredential
from club_auth.exceptions import (
	CapabilityUnavailable,
	CeremonyCancelled,
	ClubAuthError,
	CredentialInvalid,
	ReplaySuspected,
)
from club_auth.utils import b64_to_bytes, bytes_to_b64
from club_auth.webauthn import (
	CeremonyError,
	CeremonyFailure,
	PlatformAuthenticator,
	RelyingParty,
	build_request_options,
	generate_challenge,
)

from .credentials import CredentialStore

logger = logging.getLogger(__name__)


def assertion_error(failure: CeremonyFailure) -> ClubAuthError:
	if failure.cancelled:
		return CeremonyCancelled("Authentication cancelled or not authorized")
	if failure.reason in (CeremonyError.NOT_SUPPORTED, CeremonyError.SECURITY):
		return CapabilityUnavailable("Feature not supported on this device")
	return CeremonyCancelled("Authentication failed", details=failure.message)


class AssertionFlow:

	def __init__(
		self,
		authenticator: PlatformAuthenticator,
		store: CredentialStore,
		rp: RelyingParty,
		*,
		revoke_on_replay: bool = True,
	):
		self.authenticator = authenticator
		self.store = store
		self.rp = rp
		self.revoke_on_replay = revoke_on_replay

	async def authenticate(self) -> schema.AssertionResult:
		if not await self.authenticator.is_available():
			raise CapabilityUnavailable()

		challenge = generate_challenge()
		outcome = await self.authenticator.get(build_request_options(self.rp, challenge))
		if isinstance(outcome, CeremonyFailure):
			logger.info(f"Assertion ceremony ended with {outcome.reason.value}")
			raise assertion_error(outcome)

		try:
			credential = parse_authentication_credential_json(outcome)
		except InvalidJSONStructure as e:
			raise CredentialInvalid("Invalid or unknown credential", details=str(e)) from e

		credential_id = bytes_to_b64(credential.raw_id)
		stored = self.store.find_active(credential_id)
		if stored is None:
			logger.warning(f"Assertion for unknown or inactive credential {credential_id[:12]}...")
			raise CredentialInvalid("Invalid or unknown credential")

		self._verify_signature(challenge, credential, stored)

		presented = parse_authenticator_data(credential.response.authenticator_data).sign_count
		self._record_use(stored, presented)

		logger.info(f"Biometric assertion verified for user {stored.user_id}")
		return schema.AssertionResult(user_id=str(stored.user_id), credential_id=credential_id)

	def _verify_signature(
		self,
		challenge: bytes,
		credential: AuthenticationCredential,
		stored: WebAuthnCredential,
	) -> None:
		try:
			verify_authentication_response(
				credential=credential,
				expected_challenge=challenge,
				expected_rp_id=self.rp.id,
				expected_origin=self.rp.origin,
				credential_public_key=b64_to_bytes(stored.public_key),
				# counter policy is applied by _record_use
				credential_current_sign_count=0,
				require_user_verification=True,
			)
		except InvalidAuthenticationResponse as e:
			logger.warning(f"Assertion verification failed for credential {stored.credential_id[:12]}...: {e}")
			raise CredentialInvalid("Assertion could not be verified", details=str(e)) from e

	def _record_use(self, stored: WebAuthnCredential, presented: int) -> None:
		"""Apply the signature counter rule and persist the use.

		Authenticators without a counter report 0 forever; only when both
		sides are 0 is the counter ignored.
		"""
		credential_id = stored.credential_id
		current = stored.counter or 0

		if presented == 0 and current == 0:
			if not self.store.touch(credential_id):
				# revoked after the lookup
				raise CredentialInvalid("Invalid or unknown credential")
			return

		if presented <= current:
			self._reject_replay(stored, presented)

		if not self.store.advance_counter(credential_id, presented):
			if self.store.find_active(credential_id) is None:
				raise CredentialInvalid("Invalid or unknown credential")
			# a concurrent assertion stored an equal or higher counter first
			self._reject_replay(stored, presented)

	def _reject_replay(self, stored: WebAuthnCredential, presented: int) -> None:
		logger.warning(
			f"Signature counter regression on credential {stored.credential_id[:12]}... "
			f"of user {stored.user_id}: presented {presented}, stored {stored.counter}"
		)
		if self.revoke_on_replay:
			self.store.revoke(stored.credential_id)
		raise ReplaySuspected()
