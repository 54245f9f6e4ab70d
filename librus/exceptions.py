"""Custom exceptions for the Librus client."""

from typing import Optional


class LibrusError(Exception):
	"""Base exception for Librus errors."""
	pass


class LibrusAuthError(LibrusError):
	"""Authentication failed."""
	pass


class LibrusConfigError(LibrusError):
	"""Client configuration is incomplete."""
	pass


class LibrusMissingEnvVarError(LibrusConfigError):
	"""A required environment variable is not set."""

	def __init__(self, var_name: str):
		super().__init__(f"environment variable `{var_name}` is not set")
		self.var_name = var_name


class LibrusMissingCredentialsError(LibrusConfigError):
	"""A required credential was not given to the builder."""

	def __init__(self, field: str):
		super().__init__(f"missing required credential: {field}")
		self.field = field


class LibrusHttpClientError(LibrusError):
	"""The HTTP session could not be constructed."""
	pass


class LibrusConnectionError(LibrusError):
	"""Connection to Librus failed."""
	pass


class LibrusAPIError(LibrusError):
	"""API returned a non-success status.

	Attributes:
		status: HTTP status code
		body: Response body, verbatim
	"""

	def __init__(self, status: int, body: str):
		super().__init__(f"API error (status {status}): {body}")
		self.status = status
		self.body = body


class LibrusDataError(LibrusError):
	"""Response body could not be parsed.

	Attributes:
		body: The raw response body that failed to parse
	"""

	def __init__(self, message: str, body: Optional[str] = None):
		super().__init__(f"failed to parse response: {message}")
		self.body = body
