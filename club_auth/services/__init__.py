# (c) Copyright Datacraft, 2026
"""Authentication services."""
from .credentials import CredentialStore
from .users import UserDirectory
from .registration import RegistrationFlow
from .assertion import AssertionFlow
from .bootstrap import SessionBootstrapService
from .bootstrap_client import BootstrapClient

__all__ = [
	"CredentialStore",
	"UserDirectory",
	"RegistrationFlow",
	"AssertionFlow",
	"SessionBootstrapService",
	"BootstrapClient",
]
