# (c) Copyright Datacraft, 2026
"""Client side of the session bootstrap bridge."""
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from club_auth import schema
from club_auth.config import Settings
from club_auth.exceptions import (
	CredentialInvalid,
	CredentialOwnershipMismatch,
	UpstreamFailure,
	UserInactive,
	ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
	400: ValidationError,
	401: CredentialInvalid,
	403: CredentialOwnershipMismatch,
	404: UserInactive,
}


class BootstrapClient:
	"""Posts a verified assertion to the bridge with the anonymous API key."""

	def __init__(
		self,
		url: str,
		api_key: str,
		*,
		timeout: float = 10.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.url = url
		self.api_key = api_key
		self.timeout = timeout
		self._transport = transport

	@classmethod
	def from_settings(cls, settings: Settings, **kwargs) -> "BootstrapClient":
		return cls(
			settings.bootstrap_endpoint,
			settings.supabase_anon_key,
			timeout=settings.http_timeout,
			**kwargs,
		)

	async def bootstrap(self, assertion: schema.AssertionResult) -> schema.BootstrapResponse:
		headers = {
			"apikey": self.api_key,
			"Authorization": f"Bearer {self.api_key}",
		}
		body = schema.BootstrapRequest(
			user_id=assertion.user_id,
			credential_id=assertion.credential_id,
		).model_dump(by_alias=True)

		try:
			async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
				response = await client.post(self.url, json=body, headers=headers)
		except httpx.HTTPError as e:
			logger.error(f"Session bootstrap request failed: {e}")
			raise UpstreamFailure("Session bootstrap unavailable", details=str(e)) from e

		if response.is_error:
			try:
				message = response.json().get("error")
			except (ValueError, AttributeError):
				message = None
			error_class = _STATUS_ERRORS.get(response.status_code, UpstreamFailure)
			raise error_class(message or None)

		try:
			return schema.BootstrapResponse.model_validate(response.json())
		except (ValueError, PydanticValidationError) as e:
			raise UpstreamFailure("Unexpected session bootstrap response", details=str(e)) from e
