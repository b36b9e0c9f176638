# (c) Copyright Datacraft, 2026
"""Member-facing management of registered biometric credentials."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from club_auth import schema
from club_auth.db.engine import get_db
from club_auth.db.orm import User
from club_auth.exceptions import CredentialNotFound, UserInactive
from club_auth.services import CredentialStore, UserDirectory
from club_auth.utils import get_current_auth_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/credentials", tags=["Credentials"])


def get_current_member(
	auth_id: UUID = Depends(get_current_auth_id),
	db: Session = Depends(get_db),
) -> User:
	user = UserDirectory(db).get_by_auth_id(auth_id)
	if user is None:
		raise UserInactive("Account not found or deactivated")
	return user


@router.get("", response_model=schema.CredentialListResponse)
async def list_credentials(
	user: User = Depends(get_current_member),
	db: Session = Depends(get_db),
) -> schema.CredentialListResponse:
	"""List the caller's active credentials. Public keys are never returned."""
	credentials = CredentialStore(db).list_for_user(user.id)
	return schema.CredentialListResponse(
		credentials=[schema.CredentialInfo.from_row(cred) for cred in credentials],
		has_credentials=len(credentials) > 0,
	)


@router.delete("/{credential_id:path}", response_model=schema.CredentialRevokeResponse)
async def revoke_credential(
	credential_id: str,
	user: User = Depends(get_current_member),
	db: Session = Depends(get_db),
) -> schema.CredentialRevokeResponse:
	"""Revoke one of the caller's credentials."""
	if not CredentialStore(db).revoke(credential_id, user_id=user.id):
		raise CredentialNotFound()

	return schema.CredentialRevokeResponse(success=True, message="Credential revoked")
