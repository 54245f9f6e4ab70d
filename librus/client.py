"""Main client for the Librus Synergia API."""

import asyncio
import json
import logging
import os
from datetime import date, datetime
from typing import Any, Callable, List, Optional, TypeVar, Union
from urllib.parse import quote

import aiohttp

from . import parsers
from .auth import LibrusAuth, SYNERGIA_API_BASE, MESSAGES_API_BASE, DEFAULT_HEADERS
from .exceptions import (
	LibrusAPIError, LibrusConnectionError, LibrusDataError, LibrusHttpClientError,
	LibrusMissingCredentialsError, LibrusMissingEnvVarError
)
from .models import (
	Grade, GradeCategory, GradeComment, Lesson, Subject, Attendance,
	AttendanceType, Homework, Me, User, SchoolNotice, Timetable, UnreadCounts,
	InboxMessage, OutboxMessage, MessageDetail
)
from .utils import decode_message_content, notice_content_to_text

_LOGGER = logging.getLogger(__name__)

ENV_USERNAME = "LIBRUS_USERNAME"
ENV_PASSWORD = "LIBRUS_PASSWORD"

DEFAULT_TIMEOUT = 30.0

T = TypeVar("T")
Identifier = Union[int, str]


def _path_id(value: Identifier) -> str:
	"""Quote an identifier for use as a single URL path segment."""
	return quote(str(value), safe="")


class ClientBuilder:
	"""Builder for a LibrusClient with custom configuration.

	Example:
		client = await (
			LibrusClient.builder()
			.username("login")
			.password("secret")
			.timeout(10)
			.build()
		)
	"""

	def __init__(self):
		self._username: Optional[str] = None
		self._password: Optional[str] = None
		self._session: Optional[aiohttp.ClientSession] = None
		self._timeout: float = DEFAULT_TIMEOUT
		self._user_agent: Optional[str] = None

	def username(self, username: str) -> "ClientBuilder":
		"""Set the Librus login."""
		self._username = username
		return self

	def password(self, password: str) -> "ClientBuilder":
		"""Set the Librus password."""
		self._password = password
		return self

	def session(self, session: aiohttp.ClientSession) -> "ClientBuilder":
		"""Use an existing aiohttp session.

		The client will not close a session it did not create.
		"""
		self._session = session
		return self

	def timeout(self, seconds: float) -> "ClientBuilder":
		"""Set the total timeout for each request, in seconds."""
		if seconds <= 0:
			raise ValueError("timeout must be positive")
		self._timeout = seconds
		return self

	def user_agent(self, user_agent: str) -> "ClientBuilder":
		"""Override the User-Agent header sent with every request."""
		self._user_agent = user_agent
		return self

	async def build(self) -> "LibrusClient":
		"""Validate the configuration and authenticate.

		Raises:
			LibrusMissingCredentialsError: username or password was not set
			LibrusAuthError: Authentication failed
			LibrusConnectionError: A network error occurred
		"""
		if not self._username:
			raise LibrusMissingCredentialsError("username")
		if not self._password:
			raise LibrusMissingCredentialsError("password")
		return await LibrusClient._authenticate(
			self._username,
			self._password,
			session=self._session,
			timeout=self._timeout,
			user_agent=self._user_agent,
		)


class LibrusClient:
	"""Authenticated client for Librus Synergia and its messaging service.

	Create one with ``from_env()``, ``create()`` or ``builder()``; all three
	end in the same login. Use it as an async context manager, or call
	``close()`` when done.
	"""

	def __init__(self, session: aiohttp.ClientSession, auth: LibrusAuth, own_session: bool = True):
		"""Wrap an already authenticated session.

		Args:
			session: aiohttp session holding the login cookies
			auth: Authentication handler bound to that session
			own_session: Whether close() should close the session
		"""
		self._session = session
		self._own_session = own_session
		self.auth = auth

	async def __aenter__(self):
		"""Async context manager entry."""
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		"""Async context manager exit."""
		await self.close()

	async def close(self) -> None:
		"""Close the HTTP session if this client created it."""
		if self._own_session and self._session and not self._session.closed:
			await self._session.close()

	@property
	def authenticated(self) -> bool:
		return self.auth.authenticated

	@classmethod
	async def from_env(cls) -> "LibrusClient":
		"""Create a client from LIBRUS_USERNAME and LIBRUS_PASSWORD.

		Raises:
			LibrusMissingEnvVarError: A variable is not set
			LibrusAuthError: Authentication failed
		"""
		username = os.environ.get(ENV_USERNAME)
		if not username:
			raise LibrusMissingEnvVarError(ENV_USERNAME)
		password = os.environ.get(ENV_PASSWORD)
		if not password:
			raise LibrusMissingEnvVarError(ENV_PASSWORD)
		return await cls._authenticate(username, password)

	@classmethod
	async def create(cls, username: str, password: str) -> "LibrusClient":
		"""Create a client with explicit credentials.

		Raises:
			LibrusAuthError: Authentication failed
			LibrusConnectionError: A network error occurred
		"""
		return await cls._authenticate(username, password)

	@staticmethod
	def builder() -> ClientBuilder:
		"""Start configuring a client."""
		return ClientBuilder()

	@classmethod
	async def _authenticate(
		cls,
		username: str,
		password: str,
		session: Optional[aiohttp.ClientSession] = None,
		timeout: float = DEFAULT_TIMEOUT,
		user_agent: Optional[str] = None,
	) -> "LibrusClient":
		own_session = session is None
		client_timeout = aiohttp.ClientTimeout(total=timeout)
		if own_session:
			try:
				session = aiohttp.ClientSession(timeout=client_timeout)
			except (TypeError, ValueError, RuntimeError) as e:
				raise LibrusHttpClientError(f"failed to build HTTP client: {e}") from e

		headers = DEFAULT_HEADERS.copy()
		if user_agent:
			headers["User-Agent"] = user_agent

		auth = LibrusAuth(session, headers=headers, timeout=client_timeout)
		try:
			await auth.login(username, password)
		except Exception:
			if own_session:
				await session.close()
			raise

		return cls(session, auth, own_session=own_session)

	async def refresh_session(self) -> bool:
		"""Log in again with the stored credentials.

		Safe to call from several tasks at once; only one login runs.
		"""
		return await self.auth.refresh()

	async def _get(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> str:
		"""GET a URL and return the body text.

		Raises:
			LibrusAPIError: Non-2xx status, with status and body
			LibrusConnectionError: Network-level failure
		"""
		request_headers = self.auth.headers.copy()
		if headers:
			request_headers.update(headers)

		_LOGGER.debug(f"GET {url} params={params}")
		try:
			async with self._session.get(url, headers=request_headers, params=params, **self.auth.request_kwargs()) as resp:
				text = await resp.text(errors="replace")
				if not 200 <= resp.status < 300:
					_LOGGER.warning(f"Request to {url} failed: HTTP {resp.status}")
					raise LibrusAPIError(resp.status, text)
				return text
		except (aiohttp.ClientError, asyncio.TimeoutError) as e:
			raise LibrusConnectionError(f"request failed: {e}") from e

	async def _get_api(self, endpoint: str, params: Optional[dict] = None) -> str:
		return await self._get(
			f"{SYNERGIA_API_BASE}{endpoint}",
			params=params,
			headers={"Content-Type": "application/json"},
		)

	async def _get_messages_api(self, endpoint: str, params: Optional[dict] = None) -> str:
		await self.auth.ensure_messages_session()
		return await self._get(f"{MESSAGES_API_BASE}{endpoint}", params=params)

	def _decode(self, text: str, parser: Callable[[Any], T]) -> T:
		"""Decode a JSON body and hand it to a parser.

		Raises:
			LibrusDataError: Body is not JSON or does not have the expected shape
		"""
		try:
			data = json.loads(text)
		except (ValueError, RecursionError) as e:
			_LOGGER.warning(f"Response is not valid JSON: {text[:200]}...")
			raise LibrusDataError(str(e), body=text) from e

		try:
			return parser(data)
		except KeyError as e:
			raise LibrusDataError(f"missing field {e}", body=text) from e
		except (TypeError, ValueError, AttributeError) as e:
			raise LibrusDataError(str(e), body=text) from e

	# Synergia API

	async def me(self) -> Me:
		"""Get account, profile and class of the logged in user."""
		return self._decode(await self._get_api("Me"), parsers.parse_me)

	async def grades(self) -> List[Grade]:
		"""Get all grades of the student."""
		return self._decode(await self._get_api("Grades"), parsers.parse_grades)

	async def grade_category(self, category_id: Identifier) -> GradeCategory:
		"""Get a grade category by ID.

		Args:
			category_id: ``Grade.category.id``
		"""
		text = await self._get_api(f"Grades/Categories/{_path_id(category_id)}")
		return self._decode(text, parsers.parse_grade_category)

	async def grade_comment(self, comment_id: Identifier) -> Optional[GradeComment]:
		"""Get a grade comment by ID, or None if the service has none."""
		text = await self._get_api(f"Grades/Comments/{_path_id(comment_id)}")
		return self._decode(text, parsers.parse_grade_comment)

	async def lesson(self, lesson_id: Identifier) -> Lesson:
		"""Get a lesson (teacher, subject, class) by ID."""
		return self._decode(await self._get_api(f"Lessons/{_path_id(lesson_id)}"), parsers.parse_lesson)

	async def subject(self, subject_id: Identifier) -> Optional[Subject]:
		"""Get a subject by ID."""
		return self._decode(await self._get_api(f"Subjects/{_path_id(subject_id)}"), parsers.parse_subject)

	async def attendances(self) -> List[Attendance]:
		"""Get all attendance records."""
		return self._decode(await self._get_api("Attendances/"), parsers.parse_attendances)

	async def attendance_types(self) -> List[AttendanceType]:
		"""Get all attendance types (present, absent, late...)."""
		return self._decode(await self._get_api("Attendances/Types/"), parsers.parse_attendance_types)

	async def homeworks(self) -> List[Homework]:
		"""Get all homework assignments."""
		return self._decode(await self._get_api("HomeWorks/"), parsers.parse_homeworks)

	async def school_notices(self) -> List[SchoolNotice]:
		"""Get school notices (announcements)."""
		return self._decode(await self._get_api("SchoolNotices"), parsers.parse_school_notices)

	async def user(self, user_id: Identifier) -> Optional[User]:
		"""Get a user (teacher, student, parent) by ID."""
		return self._decode(await self._get_api(f"Users/{_path_id(user_id)}"), parsers.parse_user)

	async def current_user(self) -> Optional[User]:
		"""Get details of the logged in user."""
		return self._decode(await self._get_api("Users"), parsers.parse_user)

	async def timetable(self, week_start: Optional[Union[date, datetime, str]] = None) -> Timetable:
		"""Get the timetable for one week.

		Args:
			week_start: Monday of the requested week. Defaults to the current
				week as chosen by the service.
		"""
		params = None
		if week_start is not None:
			if isinstance(week_start, (date, datetime)):
				week_start = week_start.strftime("%Y-%m-%d")
			params = {"weekStart": week_start}
		return self._decode(await self._get_api("Timetables", params=params), parsers.parse_timetable)

	# Messages API

	async def unread_counts(self) -> UnreadCounts:
		"""Get unread message counts for all folders."""
		text = await self._get_messages_api("inbox/unreadMessagesCount")
		return self._decode(text, parsers.parse_unread_counts)

	async def inbox_messages(self, page: int = 1, limit: int = 10) -> List[InboxMessage]:
		"""Get received messages.

		Args:
			page: Page number, starting at 1
			limit: Messages per page

		Returns:
			At most ``limit`` messages
		"""
		return await self._get_paged("inbox/messages", page, limit, parsers.parse_inbox_messages)

	async def outbox_messages(self, page: int = 1, limit: int = 10) -> List[OutboxMessage]:
		"""Get sent messages.

		Args:
			page: Page number, starting at 1
			limit: Messages per page

		Returns:
			At most ``limit`` messages
		"""
		return await self._get_paged("outbox/messages", page, limit, parsers.parse_outbox_messages)

	async def _get_paged(self, endpoint: str, page: int, limit: int, parser: Callable[[Any], List[T]]) -> List[T]:
		if page < 1:
			raise ValueError("page must be 1 or greater")
		if limit < 1:
			raise ValueError("limit must be 1 or greater")
		text = await self._get_messages_api(endpoint, params={"page": page, "limit": limit})
		items = self._decode(text, parser)
		if len(items) > limit:
			_LOGGER.debug(f"{endpoint} returned {len(items)} items for limit {limit}; truncating")
			items = items[:limit]
		return items

	async def message(self, message_id: Identifier) -> MessageDetail:
		"""Get a full message including body and attachments."""
		text = await self._get_messages_api(f"inbox/messages/{_path_id(message_id)}")
		return self._decode(text, parsers.parse_message_detail)

	async def attachment(self, attachment_id: Identifier, message_id: Identifier) -> bytes:
		"""Download an attachment.

		Args:
			attachment_id: ``Attachment.id`` from a MessageDetail
			message_id: ID of the message holding the attachment

		Returns:
			Raw file content
		"""
		await self.auth.ensure_messages_session()
		url = f"{MESSAGES_API_BASE}attachments/{_path_id(attachment_id)}/messages/{_path_id(message_id)}"
		_LOGGER.debug(f"GET {url}")
		try:
			async with self._session.get(url, headers=self.auth.headers, **self.auth.request_kwargs()) as resp:
				if not 200 <= resp.status < 300:
					body = await resp.text(errors="replace")
					_LOGGER.warning(f"Attachment download failed: HTTP {resp.status}")
					raise LibrusAPIError(resp.status, body)
				return await resp.read()
		except (aiohttp.ClientError, asyncio.TimeoutError) as e:
			raise LibrusConnectionError(f"request failed: {e}") from e

	# Helpers

	decode_message_content = staticmethod(decode_message_content)
	notice_content_to_text = staticmethod(notice_content_to_text)
