# (c) Copyright Datacraft, 2026
"""ORM models for club members and their WebAuthn credentials."""
import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import (
	BigInteger, Boolean, DateTime, ForeignKey, Index, String, Text, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


class User(Base):
	"""Club member profile, linked to the identity provider account by `auth_id`."""

	__tablename__ = "users"

	id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
	auth_id: Mapped[UUID] = mapped_column(Uuid, unique=True, nullable=False)
	email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
	first_name: Mapped[str] = mapped_column(String(100), default="")
	last_name: Mapped[str] = mapped_column(String(100), default="")
	membership_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
	role: Mapped[str] = mapped_column(String(20), default="user")
	is_active: Mapped[bool] = mapped_column(Boolean, default=True)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

	credentials: Mapped[list["WebAuthnCredential"]] = relationship(
		back_populates="user", cascade="all, delete-orphan"
	)

	def __repr__(self):
		return f"User({self.email})"


class WebAuthnCredential(Base):
	"""A registered platform authenticator. Revoked rows stay with `is_active` false."""

	__tablename__ = "webauthn_credentials"

	id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
	user_id: Mapped[UUID] = mapped_column(
		ForeignKey("users.id", ondelete="CASCADE"),
		nullable=False,
	)
	credential_id: Mapped[str] = mapped_column(String(1024), unique=True, nullable=False)
	public_key: Mapped[str] = mapped_column(Text, nullable=False)
	counter: Mapped[int] = mapped_column(BigInteger, default=0)
	transports: Mapped[str] = mapped_column(String(255), default="")
	device_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
	is_active: Mapped[bool] = mapped_column(Boolean, default=True)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
	last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

	user: Mapped["User"] = relationship(back_populates="credentials")

	__table_args__ = (
		Index("idx_webauthn_credentials_user", "user_id", "is_active"),
	)

	@property
	def transport_list(self) -> list[str]:
		return [t for t in (self.transports or "").split(",") if t]

	def __repr__(self):
		return f"WebAuthnCredential({self.credential_id[:12]}..., user={self.user_id})"
