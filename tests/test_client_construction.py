#!/usr/bin/env python3
"""Tests for the three ways of building an authenticated client."""

from unittest.mock import patch

import aiohttp
import pytest

from fakes import HANDSHAKE_URLS, login_session
from librus import (
	LibrusAuthError, LibrusClient, LibrusConnectionError, LibrusHttpClientError,
	LibrusMissingCredentialsError, LibrusMissingEnvVarError
)
from librus.auth import AUTH_TEST_URL, AUTH_URL


@pytest.fixture
def env_credentials(monkeypatch):
	monkeypatch.setenv("LIBRUS_USERNAME", "1234567u")
	monkeypatch.setenv("LIBRUS_PASSWORD", "secret")


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["LIBRUS_USERNAME", "LIBRUS_PASSWORD"])
async def test_from_env_missing_variable_fails_before_network(monkeypatch, env_credentials, missing):
	monkeypatch.delenv(missing)
	with patch("librus.client.aiohttp.ClientSession") as session_cls:
		with pytest.raises(LibrusMissingEnvVarError) as err:
			await LibrusClient.from_env()
	assert err.value.var_name == missing
	session_cls.assert_not_called()


@pytest.mark.asyncio
async def test_builder_missing_username_fails_before_network():
	session = login_session()
	with pytest.raises(LibrusMissingCredentialsError) as err:
		await LibrusClient.builder().password("secret").session(session).build()
	assert err.value.field == "username"
	session.get.assert_not_called()
	session.post.assert_not_called()


@pytest.mark.asyncio
async def test_builder_missing_password_fails_before_network():
	session = login_session()
	with pytest.raises(LibrusMissingCredentialsError) as err:
		await LibrusClient.builder().username("1234567u").session(session).build()
	assert err.value.field == "password"
	session.get.assert_not_called()


@pytest.mark.asyncio
async def test_missing_credentials_are_not_auth_errors(monkeypatch):
	monkeypatch.delenv("LIBRUS_USERNAME", raising=False)
	with pytest.raises(LibrusMissingEnvVarError) as err:
		await LibrusClient.from_env()
	assert not isinstance(err.value, LibrusAuthError)


@pytest.mark.asyncio
async def test_construction_paths_are_equivalent(env_credentials):
	"""from_env, create and builder run the same handshake and end authenticated."""
	sessions = [login_session(), login_session(), login_session()]

	with patch("librus.client.aiohttp.ClientSession", side_effect=sessions[:2]):
		from_env = await LibrusClient.from_env()
		direct = await LibrusClient.create("1234567u", "secret")
	built = await LibrusClient.builder().username("1234567u").password("secret").session(sessions[2]).build()

	for client, session in zip([from_env, direct, built], sessions):
		assert client.authenticated
		assert session.urls("GET") == HANDSHAKE_URLS
		assert session.urls("POST") == [AUTH_URL]
		form = session.post.call_args.kwargs["data"]
		assert form == {"action": "login", "login": "1234567u", "pass": "secret"}


@pytest.mark.asyncio
async def test_rejected_credentials_raise_auth_error_and_close_owned_session():
	session = login_session(token_status=401)
	with patch("librus.client.aiohttp.ClientSession", return_value=session):
		with pytest.raises(LibrusAuthError):
			await LibrusClient.create("1234567u", "wrong")
	session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_network_failure_during_login_is_connection_error():
	session = login_session()
	session.routes[("GET", AUTH_TEST_URL)] = [(0, "", aiohttp.ClientConnectionError("boom"), 0.0)]
	with pytest.raises(LibrusConnectionError) as err:
		await LibrusClient.builder().username("u").password("p").session(session).build()
	assert isinstance(err.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_http_client_construction_failure():
	with patch("librus.client.aiohttp.ClientSession", side_effect=ValueError("bad connector")):
		with pytest.raises(LibrusHttpClientError):
			await LibrusClient.create("u", "p")


@pytest.mark.asyncio
async def test_builder_session_is_not_closed():
	session = login_session()
	async with await LibrusClient.builder().username("u").password("p").session(session).build():
		pass
	session.close.assert_not_awaited()


@pytest.mark.asyncio
async def test_owned_session_closed_on_exit():
	session = login_session()
	with patch("librus.client.aiohttp.ClientSession", return_value=session):
		async with await LibrusClient.create("u", "p") as client:
			assert client.authenticated
	session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_builder_user_agent_is_sent():
	session = login_session()
	await LibrusClient.builder().username("u").password("p").session(session).user_agent("librus-tests/1.0").build()
	headers = session.get.call_args.kwargs["headers"]
	assert headers["User-Agent"] == "librus-tests/1.0"


def test_builder_rejects_non_positive_timeout():
	with pytest.raises(ValueError):
		LibrusClient.builder().timeout(0)
