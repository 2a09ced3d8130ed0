"""Tests for bearer-token actor resolution and request provenance."""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from src.api.deps import client_ip
from src.models.enums import UserRole
from src.security.auth import decode_access_token, get_optional_actor


class TestDecodeAccessToken:
    def test_valid_token(self, token_factory):
        user_id = uuid.uuid4()

        actor = decode_access_token(token_factory(str(user_id), role="MANAGER"))

        assert actor.user_id == user_id
        assert actor.role is UserRole.MANAGER

    def test_expired_token(self, token_factory):
        token = token_factory(str(uuid.uuid4()), expires_in=timedelta(minutes=-5))

        with pytest.raises(HTTPException) as exc:
            decode_access_token(token)

        assert exc.value.status_code == 401
        assert exc.value.detail == "Access token has expired"

    def test_garbage_token(self):
        with pytest.raises(HTTPException) as exc:
            decode_access_token("abc.def.ghi")

        assert exc.value.status_code == 401
        assert exc.value.detail == "Invalid access token"

    def test_non_uuid_subject(self, token_factory):
        with pytest.raises(HTTPException) as exc:
            decode_access_token(token_factory("42"))

        assert exc.value.status_code == 401

    def test_unknown_role(self, token_factory):
        with pytest.raises(HTTPException) as exc:
            decode_access_token(token_factory(str(uuid.uuid4()), role="ROOT"))

        assert exc.value.status_code == 401

    def test_secret_not_configured(self, token_factory):
        token = token_factory(str(uuid.uuid4()))

        with patch("src.security.auth.settings") as mock:
            mock.security.jwt_secret = ""
            with pytest.raises(HTTPException) as exc:
                decode_access_token(token)

        assert exc.value.status_code == 503


class TestGetOptionalActor:
    @pytest.mark.asyncio()
    async def test_no_credentials_is_system(self):
        assert await get_optional_actor(None) is None

    @pytest.mark.asyncio()
    async def test_credentials_resolved(self, token_factory):
        user_id = uuid.uuid4()
        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token_factory(str(user_id)))

        actor = await get_optional_actor(creds)

        assert actor is not None
        assert actor.user_id == user_id


def _request(headers: dict[str, str], peer: str | None = "192.0.2.1"):
    request = MagicMock()
    request.headers = {k.lower(): v for k, v in headers.items()}
    request.client = MagicMock(host=peer) if peer else None
    return request


class TestClientIp:
    def test_first_forwarded_hop(self):
        assert client_ip(_request({"X-Forwarded-For": " 198.51.100.4 , 10.0.0.1"})) == "198.51.100.4"

    def test_real_ip(self):
        assert client_ip(_request({"X-Real-IP": "198.51.100.5"})) == "198.51.100.5"

    def test_cloudflare(self):
        assert client_ip(_request({"CF-Connecting-IP": "198.51.100.6"})) == "198.51.100.6"

    def test_socket_peer(self):
        assert client_ip(_request({})) == "192.0.2.1"

    def test_unknown(self):
        assert client_ip(_request({}, peer=None)) is None
