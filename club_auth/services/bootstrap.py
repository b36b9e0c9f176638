# (c) Copyright Datacraft, 2026
"""Session bootstrap: turns a verified (user, credential) pair into a
one-time login artifact using administrative identity-provider authority.
"""
import logging

from club_auth import schema
from club_auth.exceptions import (
	CredentialInvalid,
	CredentialOwnershipMismatch,
	UserInactive,
	ValidationError,
)
from club_auth.identity.base import IdentityAdmin
from club_auth.utils import parse_uuid

from .credentials import CredentialStore
from .users import UserDirectory

logger = logging.getLogger(__name__)


class SessionBootstrapService:
	"""Each gate short-circuits; nothing is written unless issuance succeeds.

	The service holds no state between calls. Two concurrent requests for the
	same credential each get their own single-use artifact.
	"""

	def __init__(
		self,
		credentials: CredentialStore,
		users: UserDirectory,
		admin: IdentityAdmin,
	):
		self.credentials = credentials
		self.users = users
		self.admin = admin

	async def bootstrap(self, user_id, credential_id) -> schema.BootstrapResponse:
		if not user_id or not credential_id:
			raise ValidationError("Missing required fields: userId and credentialId")
		if not isinstance(user_id, str) or not isinstance(credential_id, str):
			raise ValidationError("userId and credentialId must be strings")

		credential = self.credentials.find_active(credential_id)
		if credential is None:
			logger.error("Credential verification failed: unknown or inactive credential")
			raise CredentialInvalid("Invalid or inactive credential")

		if credential.user_id != parse_uuid(user_id):
			logger.error(f"User ID mismatch: credential owned by {credential.user_id}, claimed {user_id}")
			raise CredentialOwnershipMismatch()

		user = self.users.get_active(credential.user_id)
		if user is None:
			logger.error(f"User not found or inactive: {credential.user_id}")
			raise UserInactive()

		artifact = await self.admin.issue_one_time_login_artifact(user.email)

		self.credentials.touch(credential_id)
		logger.info(f"Biometric session bootstrap issued for user {user.id}")

		return schema.BootstrapResponse(
			email=user.email,
			email_otp=artifact.email_otp,
			token=artifact.hashed_token,
			user=schema.BootstrapUser(id=str(user.auth_id), email=user.email),
		)
