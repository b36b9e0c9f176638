# (c) Copyright Datacraft, 2026
"""Identity provider clients."""

from .artifacts import extract_login_artifact
from .base import AuthEvent, AuthStateCallback, IdentityAdmin, IdentityProvider
from .gotrue import GoTrueAdmin, GoTrueClient

__all__ = [
	"extract_login_artifact",
	"AuthEvent",
	"AuthStateCallback",
	"IdentityAdmin",
	"IdentityProvider",
	"GoTrueAdmin",
	"GoTrueClient",
]
