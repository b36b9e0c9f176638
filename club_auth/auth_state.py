# (c) Copyright Datacraft, 2026
"""Signed-in member state for a single client.

`AuthContext` owns the current member profile and its listeners. It is
built once per client (page, CLI session, test) and passed around
explicitly.
"""
import logging
from typing import Callable

from club_auth import schema
from club_auth.exceptions import CapabilityUnavailable, UserInactive
from club_auth.identity.base import AuthEvent, IdentityProvider
from club_auth.services import AssertionFlow, BootstrapClient, UserDirectory

logger = logging.getLogger(__name__)

AuthListener = Callable[[schema.User | None], None]

ADMIN_ROLE = "admin"
SUPERUSER_ROLE = "superuser"


class AuthContext:

	def __init__(
		self,
		identity: IdentityProvider,
		users: UserDirectory,
		assertion_flow: AssertionFlow | None = None,
		bootstrap_client: BootstrapClient | None = None,
	):
		self.identity = identity
		self.users = users
		self.assertion_flow = assertion_flow
		self.bootstrap_client = bootstrap_client
		self.current_user: schema.User | None = None
		self._listeners: list[AuthListener] = []
		self._unsubscribe: Callable[[], None] | None = None

	@property
	def is_authenticated(self) -> bool:
		return self.current_user is not None

	@property
	def is_admin(self) -> bool:
		return self.current_user is not None and self.current_user.role == ADMIN_ROLE

	@property
	def is_superuser(self) -> bool:
		return self.current_user is not None and self.current_user.role == SUPERUSER_ROLE

	@property
	def can_manage_events(self) -> bool:
		return self.is_admin or self.is_superuser

	def add_listener(self, callback: AuthListener) -> Callable[[], None]:
		self._listeners.append(callback)

		def remove():
			if callback in self._listeners:
				self._listeners.remove(callback)

		return remove

	async def init(self) -> schema.User | None:
		"""Restore the member of an existing provider session, if any."""
		session = await self.identity.get_session()
		if session is None:
			return None

		profile = self._load_profile(session.user.id)
		if profile is None:
			logger.error(f"No active profile for auth user {session.user.id}")
			await self.logout()
			return None

		self._set_user(profile)
		return self.current_user

	async def login(self, email: str, password: str) -> schema.User:
		"""Password sign in.

		Raises:
			InvalidLogin: the provider rejected the email/password pair
			UserInactive: the auth user has no active member profile
		"""
		session = await self.identity.sign_in_with_password(email.lower(), password)
		return await self._complete_sign_in(session)

	async def login_with_biometric(self) -> schema.User:
		"""Platform authenticator sign in, no password involved."""
		if self.assertion_flow is None or self.bootstrap_client is None:
			raise CapabilityUnavailable()

		assertion = await self.assertion_flow.authenticate()
		bootstrap = await self.bootstrap_client.bootstrap(assertion)
		session = await self.identity.verify_one_time_code(bootstrap.to_artifact())
		logger.info(f"Biometric sign in completed for {bootstrap.email}")
		return await self._complete_sign_in(session)

	async def logout(self) -> None:
		signed_in = self.current_user is not None
		try:
			await self.identity.sign_out()
		except Exception as e:
			logger.error(f"Logout error: {e}")
		# listeners already heard a SIGNED_OUT event that cleared the user
		if not (signed_in and self.current_user is None):
			self._set_user(None)

	async def refresh_current_user(self) -> schema.User | None:
		if self.current_user is None:
			return None

		session = await self.identity.get_session()
		profile = None
		if session is not None:
			profile = self._load_profile(session.user.id, active_only=False)
		if profile is None:
			await self.logout()
			return None

		self._set_user(profile)
		return self.current_user

	def setup_auth_listener(self) -> Callable[[], None]:
		"""Follow provider sign in/out events. Returns the unsubscribe function."""
		if self._unsubscribe is not None:
			return self._unsubscribe

		def on_change(event: AuthEvent, session: schema.AuthSession | None) -> None:
			logger.debug(f"Auth state changed: {event.value}")
			if event == AuthEvent.SIGNED_OUT:
				self._set_user(None)
			elif event == AuthEvent.SIGNED_IN and session is not None:
				profile = self._load_profile(session.user.id)
				if profile is not None:
					self._set_user(profile)

		self._unsubscribe = self.identity.on_auth_state_change(on_change)
		return self._unsubscribe

	async def _complete_sign_in(self, session: schema.AuthSession) -> schema.User:
		profile = self._load_profile(session.user.id)
		if profile is None:
			# authenticated upstream but no active member profile
			await self.logout()
			raise UserInactive("Account not found or deactivated")

		# the provider SIGNED_IN event may already have set it
		if self.current_user != profile:
			self._set_user(profile)
		return profile

	def _load_profile(self, auth_id: str, *, active_only: bool = True) -> schema.User | None:
		user = self.users.get_by_auth_id(auth_id, active_only=active_only)
		if user is None:
			return None
		return schema.User.model_validate(user)

	def _set_user(self, user: schema.User | None) -> None:
		self.current_user = user
		for callback in list(self._listeners):
			try:
				callback(user)
			except Exception:
				logger.exception("Error in auth listener")
