# (c) Copyright Datacraft, 2026
"""Creation and request options for the platform ceremonies."""
import json
from dataclasses import dataclass
from typing import Any, Iterable

from webauthn import (
	generate_authentication_options,
	generate_registration_options,
	options_to_json,
)
from webauthn.helpers.structs import (
	AttestationConveyancePreference,
	AuthenticatorAttachment,
	AuthenticatorSelectionCriteria,
	AuthenticatorTransport,
	COSEAlgorithmIdentifier,
	PublicKeyCredentialDescriptor,
	PublicKeyCredentialType,
	ResidentKeyRequirement,
	UserVerificationRequirement,
)

from club_auth import schema
from club_auth.config import Settings
from club_auth.db.orm import WebAuthnCredential
from club_auth.utils import b64_to_bytes

SUPPORTED_ALGORITHMS = [
	COSEAlgorithmIdentifier.ECDSA_SHA_256,
	COSEAlgorithmIdentifier.RSASSA_PKCS1_v1_5_SHA_256,
]


@dataclass(frozen=True)
class RelyingParty:
	"""The web app as a WebAuthn relying party."""
	id: str
	name: str
	origin: str
	timeout: int = 60000

	@classmethod
	def from_settings(cls, settings: Settings) -> "RelyingParty":
		return cls(
			id=settings.relying_party_id,
			name=settings.webauthn_rp_name,
			origin=settings.webauthn_origin,
			timeout=settings.webauthn_timeout,
		)


def _transports(credential: WebAuthnCredential) -> list[AuthenticatorTransport] | None:
	transports = []
	for hint in credential.transport_list:
		try:
			transports.append(AuthenticatorTransport(hint))
		except ValueError:
			continue
	return transports or None


def build_creation_options(
	rp: RelyingParty,
	user: schema.User,
	challenge: bytes,
	existing_credentials: Iterable[WebAuthnCredential] = (),
) -> dict[str, Any]:
	"""PublicKeyCredentialCreationOptions JSON for a platform, discoverable,
	user-verified credential bound to `user`.
	"""
	exclude_credentials = [
		PublicKeyCredentialDescriptor(
			id=b64_to_bytes(cred.credential_id),
			type=PublicKeyCredentialType.PUBLIC_KEY,
			transports=_transports(cred),
		)
		for cred in existing_credentials
		if cred.is_active
	]

	options = generate_registration_options(
		rp_id=rp.id,
		rp_name=rp.name,
		user_id=str(user.id).encode(),
		user_name=user.email,
		user_display_name=user.display_name,
		challenge=challenge,
		timeout=rp.timeout,
		attestation=AttestationConveyancePreference.NONE,
		authenticator_selection=AuthenticatorSelectionCriteria(
			authenticator_attachment=AuthenticatorAttachment.PLATFORM,
			resident_key=ResidentKeyRequirement.REQUIRED,
			require_resident_key=True,
			user_verification=UserVerificationRequirement.REQUIRED,
		),
		supported_pub_key_algs=SUPPORTED_ALGORITHMS,
		exclude_credentials=exclude_credentials if exclude_credentials else None,
	)
	return json.loads(options_to_json(options))


def build_request_options(rp: RelyingParty, challenge: bytes) -> dict[str, Any]:
	"""PublicKeyCredentialRequestOptions JSON with no allow list: the
	authenticator offers its own resident credentials for this RP.
	"""
	options = generate_authentication_options(
		rp_id=rp.id,
		challenge=challenge,
		timeout=rp.timeout,
		user_verification=UserVerificationRequirement.REQUIRED,
	)
	return json.loads(options_to_json(options))
