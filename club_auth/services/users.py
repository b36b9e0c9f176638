# (c) Copyright Datacraft, 2026
"""Read access to club member profiles."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from club_auth.db.orm import User
from club_auth.exceptions import UpstreamFailure
from club_auth.utils import parse_uuid


class UserDirectory:

	def __init__(self, db: Session):
		self.db = db

	def get_active(self, user_id: UUID | str) -> User | None:
		uid = parse_uuid(user_id)
		if uid is None:
			return None
		return self._scalar(select(User).where(User.id == uid, User.is_active.is_(True)))

	def get_by_auth_id(self, auth_id: UUID | str, *, active_only: bool = True) -> User | None:
		aid = parse_uuid(auth_id)
		if aid is None:
			return None
		stmt = select(User).where(User.auth_id == aid)
		if active_only:
			stmt = stmt.where(User.is_active.is_(True))
		return self._scalar(stmt)

	def _scalar(self, stmt) -> User | None:
		try:
			return self.db.scalar(stmt)
		except SQLAlchemyError as e:
			raise UpstreamFailure("User store unavailable", details=str(e)) from e
