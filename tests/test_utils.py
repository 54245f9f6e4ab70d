#!/usr/bin/env python3
"""Tests for the value normalisers and text helpers."""

import base64

import pytest

from librus.utils import (
	decode_message_content, notice_content_to_text, parse_bool, parse_id, parse_int
)


@pytest.mark.parametrize("raw", [123, "123", 123.0, " 123 "])
def test_numeric_and_string_ids_normalise_to_same_value(raw):
	assert parse_id(raw) == "123"


def test_non_numeric_id_is_kept_verbatim():
	assert parse_id("t2841") == "t2841"


@pytest.mark.parametrize("raw", ["0123", "123.0"])
def test_numeric_looking_strings_are_not_renumbered(raw):
	assert parse_id(raw) == raw


def test_missing_id_stays_none():
	assert parse_id(None) is None


def test_large_numeric_id_keeps_every_digit():
	assert parse_id(12345678901234567890) == "12345678901234567890"


def test_fractional_id_is_rejected():
	with pytest.raises(ValueError):
		parse_id(12.5)


def test_parse_int_accepts_numeric_strings():
	assert parse_int("7") == 7
	assert parse_int(7) == 7
	assert parse_int(None) is None
	assert parse_int("", default=0) == 0


@pytest.mark.parametrize("raw,expected", [
	(True, True), (False, False), ("true", True), ("false", False),
	("1", True), ("0", False), (1, True), (0, False), (None, False),
])
def test_parse_bool_tolerates_wire_variants(raw, expected):
	assert parse_bool(raw) is expected


def test_parse_bool_rejects_garbage():
	with pytest.raises(ValueError):
		parse_bool("maybe")


def test_decode_message_content():
	encoded = base64.b64encode("Hello, World!".encode()).decode()
	assert decode_message_content(encoded) == "Hello, World!"


def test_decode_message_content_keeps_polish_characters():
	encoded = base64.b64encode("Zażółć gęślą jaźń".encode("utf-8")).decode()
	assert decode_message_content(encoded) == "Zażółć gęślą jaźń"


def test_decode_invalid_content():
	assert decode_message_content("not valid base64!!!") is None


def test_decode_non_utf8_content():
	encoded = base64.b64encode(b"\xff\xfe\xfa").decode()
	assert decode_message_content(encoded) is None


def test_notice_content_to_text():
	html = "<p>Hello&nbsp;<b>World</b> &amp; friends</p>"
	assert notice_content_to_text(html) == "Hello World & friends"


def test_notice_content_to_text_keeps_character_order():
	html = '<div class="x"><span>Ala</span> ma <i>kota</i>, a kot ma <a href="#">Alę</a></div>'
	text = notice_content_to_text(html)
	assert "<" not in text and ">" not in text
	assert text == "Ala ma kota, a kot ma Alę"


def test_notice_content_entities():
	assert notice_content_to_text("&lt;b&gt; &quot;quoted&quot; &#39;single&#39;") == "<b> \"quoted\" 'single'"


def test_notice_content_plain_text_is_unchanged():
	assert notice_content_to_text("  Zebranie rodziców  ") == "Zebranie rodziców"
	assert notice_content_to_text("") == ""


def test_package_exports_every_public_module():
	import librus

	for name in librus.__all__:
		assert hasattr(librus, name)
	for module in ("auth", "client", "exceptions", "models", "parsers", "utils"):
		assert module in librus.__all__
