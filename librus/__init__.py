"""Librus Synergia Python library package."""

from .client import LibrusClient, ClientBuilder
from .exceptions import (
	LibrusError,
	LibrusAuthError,
	LibrusConfigError,
	LibrusMissingEnvVarError,
	LibrusMissingCredentialsError,
	LibrusHttpClientError,
	LibrusConnectionError,
	LibrusAPIError,
	LibrusDataError,
)
from .utils import decode_message_content, notice_content_to_text

__version__ = "1.0.0"
__all__ = [
	"LibrusClient",
	"ClientBuilder",
	"LibrusError",
	"LibrusAuthError",
	"LibrusConfigError",
	"LibrusMissingEnvVarError",
	"LibrusMissingCredentialsError",
	"LibrusHttpClientError",
	"LibrusConnectionError",
	"LibrusAPIError",
	"LibrusDataError",
	"decode_message_content",
	"notice_content_to_text",
	"auth",
	"client",
	"exceptions",
	"models",
	"parsers",
	"utils",
]
