"""Value normalisers and text helpers for Librus payloads."""

import base64
import binascii
import html
import logging
from typing import Any, Optional

_LOGGER = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "t"}
_FALSE_STRINGS = {"false", "0", "no", "f", ""}


def parse_id(value: Any) -> Optional[str]:
	"""Normalise an identifier that may arrive as a number or a string.

	Librus sends the same identifier as ``123`` on some endpoints and as
	``"123"`` on others. Both become ``"123"``. Strings only lose surrounding
	whitespace; otherwise they are kept as they are, so non-numeric
	identifiers survive and ``"0123"`` or ``"123.0"`` are not treated as
	the number 123.

	Args:
		value: Raw identifier from the payload

	Returns:
		Identifier string, or None if the value is missing
	"""
	if value is None:
		return None
	if isinstance(value, bool):
		raise ValueError(f"Boolean is not a valid identifier: {value!r}")
	if isinstance(value, int):
		return str(value)
	if isinstance(value, float):
		if not value.is_integer():
			raise ValueError(f"Non-integral numeric identifier: {value!r}")
		return str(int(value))
	if isinstance(value, str):
		return value.strip()
	raise ValueError(f"Unsupported identifier type: {type(value).__name__}")


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
	"""Parse an integer that may arrive as a number or a numeric string."""
	if value is None or value == "":
		return default
	if isinstance(value, bool):
		return int(value)
	if isinstance(value, int):
		return value
	if isinstance(value, float):
		return int(value)
	if isinstance(value, str):
		return int(value.strip())
	raise ValueError(f"Unsupported integer type: {type(value).__name__}")


def parse_bool(value: Any, default: bool = False) -> bool:
	"""Parse a boolean that may arrive as a bool, number or string."""
	if value is None:
		return default
	if isinstance(value, bool):
		return value
	if isinstance(value, (int, float)):
		return value != 0
	if isinstance(value, str):
		lowered = value.strip().lower()
		if lowered in _TRUE_STRINGS:
			return True
		if lowered in _FALSE_STRINGS:
			return False
	raise ValueError(f"Unsupported boolean value: {value!r}")


def parse_optional_str(value: Any) -> Optional[str]:
	"""Return value as a string, keeping None."""
	if value is None:
		return None
	return str(value)


def decode_message_content(content: str) -> Optional[str]:
	"""Decode base64-encoded message content to text.

	Message bodies from the messaging API are base64-encoded UTF-8.

	Args:
		content: The base64-encoded content string

	Returns:
		Decoded text, or None if the content is not valid base64 UTF-8
	"""
	if content is None:
		return None
	try:
		raw = base64.b64decode(content, validate=True)
		return raw.decode("utf-8")
	except (binascii.Error, ValueError) as e:
		_LOGGER.debug(f"Could not decode message content: {e}")
		return None


def notice_content_to_text(content: str) -> str:
	"""Turn HTML notice content into readable text.

	Removes tags, decodes entities and trims surrounding whitespace.

	Args:
		content: HTML content from a school notice

	Returns:
		Plain text
	"""
	if not content:
		return ""

	out = []
	in_tag = False
	for ch in content:
		if ch == "<":
			in_tag = True
		elif ch == ">":
			in_tag = False
		elif not in_tag:
			out.append(ch)

	text = "".join(out).replace("&nbsp;", " ")
	return html.unescape(text).strip()
