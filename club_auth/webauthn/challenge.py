# (c) Copyright Datacraft, 2026
"""Ceremony challenges.

A challenge lives only as long as the ceremony that generated it: the flow
keeps it in memory, hands it to the authenticator and checks the signed
client data against it exactly once.
"""
import secrets

CHALLENGE_LENGTH = 32


def generate_challenge() -> bytes:
	"""Return 32 bytes from the operating system CSPRNG."""
	return secrets.token_bytes(CHALLENGE_LENGTH)
