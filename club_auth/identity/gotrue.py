# (c) Copyright Datacraft, 2026
"""GoTrue (Supabase Auth) REST clients."""
import logging
from typing import Any, Callable

import httpx
from pydantic import ValidationError as PydanticValidationError

from club_auth.config import Settings
from club_auth.exceptions import InvalidLogin, UpstreamFailure
from club_auth.schema import AuthSession, LoginArtifact

from .artifacts import extract_login_artifact
from .base import AuthEvent, AuthStateCallback

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
	try:
		body = response.json()
	except ValueError:
		return response.text or response.reason_phrase
	if isinstance(body, dict):
		for key in ("msg", "error_description", "message", "error"):
			if body.get(key):
				return str(body[key])
	return str(body)


class _GoTrueHTTP:
	"""Shared request plumbing; one AsyncClient per call."""

	def __init__(
		self,
		base_url: str,
		api_key: str,
		*,
		timeout: float = 10.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.base_url = f"{base_url.rstrip('/')}/auth/v1"
		self.api_key = api_key
		self.timeout = timeout
		self._transport = transport

	async def _post(
		self,
		path: str,
		*,
		json: dict[str, Any] | None = None,
		params: dict[str, str] | None = None,
		bearer: str | None = None,
	) -> httpx.Response:
		headers = {
			"apikey": self.api_key,
			"Authorization": f"Bearer {bearer or self.api_key}",
		}
		try:
			async with httpx.AsyncClient(
				base_url=self.base_url,
				transport=self._transport,
				timeout=self.timeout,
			) as client:
				return await client.post(path, json=json, params=params, headers=headers)
		except httpx.HTTPError as e:
			logger.error(f"Identity provider request {path} failed: {e}")
			raise UpstreamFailure("Identity provider unavailable", details=str(e)) from e

	@staticmethod
	def _session_from(response: httpx.Response) -> AuthSession:
		try:
			return AuthSession.model_validate(response.json())
		except (ValueError, PydanticValidationError) as e:
			raise UpstreamFailure("Unexpected session response", details=str(e)) from e


class GoTrueClient(_GoTrueHTTP):
	"""Member-facing client. Keeps the current session in memory and
	notifies subscribers on sign in/out.
	"""

	def __init__(self, *args, **kwargs):
		super().__init__(*args, **kwargs)
		self._session: AuthSession | None = None
		self._listeners: list[AuthStateCallback] = []

	@classmethod
	def from_settings(cls, settings: Settings, **kwargs) -> "GoTrueClient":
		return cls(
			settings.supabase_url,
			settings.supabase_anon_key,
			timeout=settings.http_timeout,
			**kwargs,
		)

	async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
		response = await self._post(
			"/token",
			params={"grant_type": "password"},
			json={"email": email, "password": password},
		)
		if response.status_code in (400, 401):
			message = _error_message(response)
			if "invalid login credentials" in message.lower():
				raise InvalidLogin(details=message)
			raise UpstreamFailure(message)
		if response.is_error:
			raise UpstreamFailure(_error_message(response))

		self._set_session(self._session_from(response))
		return self._session

	async def verify_one_time_code(self, artifact: LoginArtifact) -> AuthSession:
		"""Exchange a one-time login artifact for a full session."""
		if artifact.email_otp:
			body = {"type": "email", "email": artifact.email, "token": artifact.email_otp}
		elif artifact.hashed_token:
			body = {"type": "magiclink", "token_hash": artifact.hashed_token}
		else:
			raise UpstreamFailure("Failed to generate authentication token")

		response = await self._post("/verify", json=body)
		if response.is_error:
			message = _error_message(response)
			logger.warning(f"One-time code verification failed for {artifact.email}: {message}")
			raise UpstreamFailure("One-time code verification failed", details=message)

		self._set_session(self._session_from(response))
		return self._session

	async def sign_out(self) -> None:
		session = self._session
		try:
			if session is not None:
				response = await self._post("/logout", bearer=session.access_token)
				if response.is_error:
					raise UpstreamFailure("Sign out failed", details=_error_message(response))
		finally:
			self._session = None
			self._emit(AuthEvent.SIGNED_OUT, None)

	async def get_session(self) -> AuthSession | None:
		return self._session

	def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
		self._listeners.append(callback)

		def unsubscribe():
			if callback in self._listeners:
				self._listeners.remove(callback)

		return unsubscribe

	def _set_session(self, session: AuthSession) -> None:
		self._session = session
		self._emit(AuthEvent.SIGNED_IN, session)

	def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
		logger.debug(f"Auth state changed: {event.value}")
		for callback in list(self._listeners):
			try:
				callback(event, session)
			except Exception:
				logger.exception("Error in auth state callback")


class GoTrueAdmin(_GoTrueHTTP):
	"""Service-role client. Never constructed outside the bootstrap bridge."""

	@classmethod
	def from_settings(cls, settings: Settings, **kwargs) -> "GoTrueAdmin":
		return cls(
			settings.supabase_url,
			settings.supabase_service_role_key,
			timeout=settings.http_timeout,
			**kwargs,
		)

	async def issue_one_time_login_artifact(self, email: str) -> LoginArtifact:
		"""Mint a magic-link one-time code for `email`, no password involved."""
		response = await self._post(
			"/admin/generate_link",
			json={"type": "magiclink", "email": email},
		)
		if response.is_error:
			message = _error_message(response)
			logger.error(f"Failed to generate OTP for {email}: {message}")
			raise UpstreamFailure("Failed to create session", details=message)

		try:
			payload = response.json()
		except ValueError as e:
			raise UpstreamFailure("Failed to create session", details="Invalid JSON from identity provider") from e

		return extract_login_artifact(email, payload)
