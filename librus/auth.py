"""Authentication handler for Librus Synergia."""

import asyncio
import logging
import time
from typing import Optional

import aiohttp

from .exceptions import LibrusAuthError, LibrusConnectionError

_LOGGER = logging.getLogger(__name__)

SYNERGIA_API_BASE = "https://synergia.librus.pl/gateway/api/2.0/"
MESSAGES_API_BASE = "https://wiadomosci.librus.pl/api/"

AUTH_URL = "https://api.librus.pl/OAuth/Authorization?client_id=46"
AUTH_TEST_URL = "https://api.librus.pl/OAuth/Authorization?client_id=46&response_type=code&scope=mydata"
AUTH_GRANT_URL = "https://api.librus.pl/OAuth/Authorization/Grant?client_id=46"
TOKEN_INFO_URL = f"{SYNERGIA_API_BASE}Auth/TokenInfo/"
MESSAGES_INIT_URL = "https://synergia.librus.pl/wiadomosci3"

DEFAULT_HEADERS = {
	"Accept": "application/json, text/plain, */*",
	"Accept-Language": "pl-PL,pl;q=0.9,en-US;q=0.8,en;q=0.7",
	"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36",
}


class LibrusAuth:
	"""Handles authentication with Librus.

	Session state lives in the aiohttp cookie jar. Anything that changes it
	after login (a refresh, the messaging session bootstrap) runs under one
	lock so concurrent callers wait for the in-flight operation instead of
	repeating it.
	"""

	def __init__(
		self,
		session: aiohttp.ClientSession,
		headers: Optional[dict] = None,
		timeout: Optional[aiohttp.ClientTimeout] = None,
	):
		"""Initialise authentication handler.

		Args:
			session: aiohttp session to use for requests
			headers: Headers sent with every handshake request
			timeout: Timeout applied to every request, including on shared sessions
		"""
		self.session = session
		self.headers = dict(headers or DEFAULT_HEADERS)
		self.timeout = timeout
		self.authenticated = False
		self.messages_initialised = False
		self.generation = 0  # bumped on every successful login
		self._lock = asyncio.Lock()
		self._last_auth_time: Optional[float] = None
		self._username: Optional[str] = None
		self._password: Optional[str] = None

	def request_kwargs(self) -> dict:
		"""Extra keyword arguments for every session request.

		Empty when no timeout was configured, so the session default applies.
		"""
		if self.timeout is None:
			return {}
		return {"timeout": self.timeout}

	@property
	def last_auth_time(self) -> Optional[float]:
		return self._last_auth_time

	async def login(self, username: str, password: str) -> bool:
		"""Run the OAuth login handshake.

		Args:
			username: Librus login
			password: Password

		Returns:
			True if authentication successful

		Raises:
			LibrusAuthError: The service rejected the credentials
			LibrusConnectionError: A handshake request failed at network level
		"""
		self._username = username
		self._password = password
		self.authenticated = False
		self.messages_initialised = False

		try:
			_LOGGER.debug("Step 1: Opening authorisation page")
			await self._request("GET", AUTH_TEST_URL)

			_LOGGER.debug("Step 2: Submitting credentials")
			form = {"action": "login", "login": username, "pass": password}
			await self._request("POST", AUTH_URL, data=form)

			_LOGGER.debug("Step 3: Granting authorisation")
			await self._request("GET", AUTH_GRANT_URL)

			_LOGGER.debug("Step 4: Checking token info")
			status = await self._request("GET", TOKEN_INFO_URL)
		except (aiohttp.ClientError, asyncio.TimeoutError) as e:
			raise LibrusConnectionError(f"Connection error during login: {e}") from e

		if status != 200:
			_LOGGER.warning(f"Token info returned HTTP {status} - credentials rejected")
			raise LibrusAuthError("authentication failed: invalid credentials or server error")

		self.authenticated = True
		self.generation += 1
		self._last_auth_time = time.time()
		_LOGGER.info("Authentication completed successfully")
		return True

	async def refresh(self) -> bool:
		"""Log in again with the stored credentials.

		Concurrent callers share one login: whoever waited on the lock while
		another refresh completed returns without logging in again.

		Returns:
			True if the session is authenticated afterwards
		"""
		if self._username is None or self._password is None:
			raise LibrusAuthError("Cannot refresh session - login() was never called")

		seen_generation = self.generation
		async with self._lock:
			if self.generation != seen_generation and self.authenticated:
				_LOGGER.debug("Session already refreshed by a concurrent caller")
				return True
			_LOGGER.info("Refreshing Librus session")
			return await self.login(self._username, self._password)

	async def ensure_messages_session(self) -> None:
		"""Open the messaging session once per login.

		The messaging API on its own host only accepts requests after the
		Synergia messages page has been visited with the logged-in cookies.
		"""
		if self.messages_initialised:
			return
		async with self._lock:
			if self.messages_initialised:
				return
			_LOGGER.debug("Initialising messaging session")
			try:
				status = await self._request("GET", MESSAGES_INIT_URL)
			except (aiohttp.ClientError, asyncio.TimeoutError) as e:
				raise LibrusConnectionError(f"Connection error: {e}") from e
			if not 200 <= status < 300:
				_LOGGER.warning(f"Messages page returned HTTP {status} - messaging calls may fail until the session is refreshed")
			self.messages_initialised = True

	async def _request(self, method: str, url: str, data: Optional[dict] = None) -> int:
		"""Issue one handshake request, drain the body and return the status."""
		if method == "POST":
			request = self.session.post(url, headers=self.headers, data=data, **self.request_kwargs())
		else:
			request = self.session.get(url, headers=self.headers, **self.request_kwargs())
		async with request as resp:
			await resp.read()
			_LOGGER.debug(f"{method} {url} -> HTTP {resp.status}")
			return resp.status
