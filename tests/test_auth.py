"""Unit tests for API key authentication."""

import logging
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from app.core.auth import parse_api_keys, validate_api_key, verify_api_key
from app.core.errors import AuthenticationAppError


class TestParseAPIKeys:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("checkout-key", {"checkout-key"}),
            ("k1,k2,k3", {"k1", "k2", "k3"}),
            ("k1 , k2  ,  k3", {"k1", "k2", "k3"}),
            ("k1,k2,k1", {"k1", "k2"}),
            (None, set()),
            ("", set()),
            ("   ,  ,  ", set()),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert parse_api_keys(raw) == expected


class TestValidateAPIKey:
    @patch("app.core.auth.settings")
    def test_bypassed_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False

        validate_api_key("any-random-key")
        validate_api_key("")

    @pytest.mark.parametrize("configured", [None, "", " , "])
    def test_raises_when_no_keys_configured(self, configured) -> None:
        with patch("app.core.auth.settings") as mock_settings:
            mock_settings.app.api_key_required = True
            mock_settings.app.api_keys = configured

            with pytest.raises(AuthenticationAppError) as exc_info:
                validate_api_key("some-key")

        assert exc_info.value.code == "api_keys_not_configured"
        assert "no valid keys are configured" in exc_info.value.message

    @patch("app.core.auth.settings")
    def test_accepts_any_configured_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = " checkout-key , dashboard-key "

        validate_api_key("checkout-key")
        validate_api_key("dashboard-key")

    @pytest.mark.parametrize("provided", ["wrong-key", "", " checkout-key "])
    def test_rejects_unknown_key(self, provided: str) -> None:
        with patch("app.core.auth.settings") as mock_settings:
            mock_settings.app.api_key_required = True
            mock_settings.app.api_keys = "checkout-key"

            with pytest.raises(AuthenticationAppError) as exc_info:
                validate_api_key(provided)

        assert exc_info.value.code == "invalid_api_key"
        assert exc_info.value.message == "Invalid or missing API key"

    @patch("app.core.auth.settings")
    def test_rejected_key_is_logged_as_hash(self, mock_settings, caplog) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "checkout-key"

        with caplog.at_level(logging.WARNING, logger="app.core.auth"):
            with pytest.raises(AuthenticationAppError):
                validate_api_key("leaked-secret")

        assert "leaked-secret" not in caplog.text
        assert len(caplog.records[-1].api_key_hash) == 16


class TestVerifyAPIKeyDependency:
    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_bypassed_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False

        await verify_api_key(x_api_key=None)

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_missing_header_is_403(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "checkout-key"

        with pytest.raises(HTTPException) as exc_info:
            await verify_api_key(x_api_key=None)

        assert exc_info.value.status_code == 403
        assert "Missing API key" in exc_info.value.detail

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_invalid_key_is_403(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "checkout-key"

        with pytest.raises(HTTPException) as exc_info:
            await verify_api_key(x_api_key="wrong-key")

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Invalid or missing API key"

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_valid_key_passes(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "checkout-key,dashboard-key"

        await verify_api_key(x_api_key="dashboard-key")

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_unconfigured_keys_is_403(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = None

        with pytest.raises(HTTPException) as exc_info:
            await verify_api_key(x_api_key="some-key")

        assert exc_info.value.status_code == 403
        assert "no valid keys are configured" in exc_info.value.detail
