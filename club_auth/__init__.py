# (c) Copyright Datacraft, 2026
"""Biometric (WebAuthn) sign-in for the club portal."""
