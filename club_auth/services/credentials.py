# (c) Copyright Datacraft, 2026
"""Credential store backed by the webauthn_credentials table."""
import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from club_auth.db.orm import WebAuthnCredential, utc_now
from club_auth.exceptions import CredentialAlreadyRegistered, UpstreamFailure
from club_auth.utils import parse_uuid

logger = logging.getLogger(__name__)


class CredentialStore:
	"""Row-level access to registered authenticators.

	Every mutation is a single-row, single-statement update followed by a
	commit. Revoked credentials are never returned by the `find_active`
	and `list_for_user` lookups.
	"""

	def __init__(self, db: Session):
		self.db = db

	def add(
		self,
		*,
		user_id: UUID,
		credential_id: str,
		public_key: str,
		counter: int = 0,
		transports: Iterable[str] = (),
		device_name: str | None = None,
	) -> WebAuthnCredential:
		"""Persist a newly registered credential.

		Raises:
			CredentialAlreadyRegistered: the credential id exists, active or not
		"""
		if self.get(credential_id) is not None:
			raise CredentialAlreadyRegistered()

		credential = WebAuthnCredential(
			user_id=user_id,
			credential_id=credential_id,
			public_key=public_key,
			counter=counter,
			transports=",".join(transports),
			device_name=device_name,
			is_active=True,
		)
		self.db.add(credential)
		try:
			self.db.commit()
		except IntegrityError as e:
			self.db.rollback()
			logger.warning(f"Duplicate credential registration for user {user_id}")
			raise CredentialAlreadyRegistered() from e
		except SQLAlchemyError as e:
			self.db.rollback()
			logger.error(f"Failed to store credential: {e}")
			raise UpstreamFailure("Failed to store credential", details=str(e)) from e

		self.db.refresh(credential)
		logger.info(f"Credential registered for user {user_id}")
		return credential

	def get(self, credential_id: str) -> WebAuthnCredential | None:
		return self._scalar(
			select(WebAuthnCredential).where(WebAuthnCredential.credential_id == credential_id)
		)

	def find_active(self, credential_id: str) -> WebAuthnCredential | None:
		return self._scalar(
			select(WebAuthnCredential).where(
				WebAuthnCredential.credential_id == credential_id,
				WebAuthnCredential.is_active.is_(True),
			)
		)

	def list_for_user(self, user_id: UUID | str) -> list[WebAuthnCredential]:
		"""Active credentials of a user, newest first."""
		uid = parse_uuid(user_id)
		if uid is None:
			return []
		stmt = (
			select(WebAuthnCredential)
			.where(
				WebAuthnCredential.user_id == uid,
				WebAuthnCredential.is_active.is_(True),
			)
			.order_by(WebAuthnCredential.created_at.desc())
		)
		try:
			return list(self.db.scalars(stmt))
		except SQLAlchemyError as e:
			raise UpstreamFailure("Credential store unavailable", details=str(e)) from e

	def has_credentials(self, user_id: UUID | str) -> bool:
		return len(self.list_for_user(user_id)) > 0

	def advance_counter(self, credential_id: str, counter: int) -> bool:
		"""Store `counter` only if it is strictly greater than the stored one.

		The comparison and the write are one conditional UPDATE, so two
		concurrent assertions presenting the same counter cannot both win.
		"""
		return self._update(
			update(WebAuthnCredential)
			.where(
				WebAuthnCredential.credential_id == credential_id,
				WebAuthnCredential.is_active.is_(True),
				WebAuthnCredential.counter < counter,
			)
			.values(counter=counter, last_used_at=utc_now())
		)

	def touch(self, credential_id: str) -> bool:
		"""Set last_used_at on an active credential."""
		return self._update(
			update(WebAuthnCredential)
			.where(
				WebAuthnCredential.credential_id == credential_id,
				WebAuthnCredential.is_active.is_(True),
			)
			.values(last_used_at=utc_now())
		)

	def revoke(self, credential_id: str, user_id: UUID | str | None = None) -> bool:
		"""Deactivate a credential. Revoking an inactive credential is a no-op
		that still succeeds; unknown or foreign credentials return False.
		"""
		credential = self.get(credential_id)
		if credential is None:
			return False
		if user_id is not None and credential.user_id != parse_uuid(user_id):
			return False
		if not credential.is_active:
			return True

		self._update(
			update(WebAuthnCredential)
			.where(WebAuthnCredential.credential_id == credential_id)
			.values(is_active=False)
		)
		logger.info(f"Credential {credential_id[:12]}... revoked for user {credential.user_id}")
		return True

	def _scalar(self, stmt) -> WebAuthnCredential | None:
		try:
			return self.db.scalar(stmt)
		except SQLAlchemyError as e:
			raise UpstreamFailure("Credential store unavailable", details=str(e)) from e

	def _update(self, stmt) -> bool:
		try:
			result = self.db.execute(stmt.execution_options(synchronize_session=False))
			self.db.commit()
		except SQLAlchemyError as e:
			self.db.rollback()
			logger.error(f"Credential update failed: {e}")
			raise UpstreamFailure("Credential store unavailable", details=str(e)) from e
		# loaded rows are stale after a bulk UPDATE
		self.db.expire_all()
		return result.rowcount == 1
