# (c) Copyright Datacraft, 2026
"""Database module for club_auth."""
from .orm import User, WebAuthnCredential, utc_now
from .base import Base

__all__ = [
	'Base',
	'User',
	'WebAuthnCredential',
	'utc_now',
]
