# (c) Copyright Datacraft, 2026
"""Normalization of one-time login artifacts.

Depending on the GoTrue version and on which client wrapped the call, the
generate_link response carries the token material either at the top level,
under ``properties`` or under ``data.properties``; older releases only expose
it inside ``action_link``. Everything downstream sees a single
`LoginArtifact`.
"""
import logging
from typing import Any
from urllib.parse import parse_qs, urlparse

from club_auth.exceptions import UpstreamFailure
from club_auth.schema import LoginArtifact

logger = logging.getLogger(__name__)

_PREFIXES = (("properties",), (), ("data", "properties"), ("data",))


def _probe(payload: Any, path: tuple[str, ...]) -> Any:
	for key in path:
		if not isinstance(payload, dict):
			return None
		payload = payload.get(key)
	return payload


def _first(payload: dict, field: str) -> str | None:
	for prefix in _PREFIXES:
		value = _probe(payload, prefix + (field,))
		if isinstance(value, str) and value:
			return value
	return None


def _token_from_link(link: str | None) -> str | None:
	if not link:
		return None
	values = parse_qs(urlparse(link).query).get("token")
	return values[0] if values else None


def extract_login_artifact(email: str, payload: Any) -> LoginArtifact:
	"""Pull the one-time code and/or hashed token out of a generate_link response.

	Raises:
		UpstreamFailure: when no token material is present
	"""
	if not isinstance(payload, dict):
		logger.error(f"Unexpected generate_link response type: {type(payload).__name__}")
		raise UpstreamFailure("Failed to generate authentication token")

	email_otp = _first(payload, "email_otp")
	hashed_token = _first(payload, "hashed_token") or _token_from_link(_first(payload, "action_link"))

	if not email_otp and not hashed_token:
		logger.error("No OTP or token found in generate_link response")
		raise UpstreamFailure("Failed to generate authentication token")

	return LoginArtifact(email=email, email_otp=email_otp, hashed_token=hashed_token)
