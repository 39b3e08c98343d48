"""Tests for the Supabase-backed profile store and settings provider.

Uses ``httpx.MockTransport`` so no network access is needed.
"""

import json

import httpx
import pytest

from app.adapters.app_settings.supabase import (
    SupabaseAppSettingsProvider,
    normalize_level_capacities,
)
from app.adapters.profiles.supabase import SupabaseProfileStore
from app.adapters.supabase.client import SupabaseRestClient, parse_content_range_total
from app.core.errors import DataStoreAppError
from app.schemas.network import LevelCapacity


def _client(handler) -> SupabaseRestClient:
    return SupabaseRestClient(
        "https://project.supabase.co/",
        "service-role-key",
        transport=httpx.MockTransport(handler),
    )


class TestProfileStore:
    @pytest.mark.asyncio
    async def test_get_sponsor_id_queries_profile_by_id(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"referred_by": "sponsor-1"}])

        store = SupabaseProfileStore(_client(handler))

        assert await store.get_sponsor_id("user-1") == "sponsor-1"

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/profiles"
        assert request.url.params["id"] == "eq.user-1"
        assert request.url.params["select"] == "referred_by"
        assert request.headers["apikey"] == "service-role-key"
        assert request.headers["authorization"] == "Bearer service-role-key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rows", [[], [{"referred_by": None}], [{"referred_by": ""}]])
    async def test_get_sponsor_id_returns_none_without_sponsor(self, rows) -> None:
        store = SupabaseProfileStore(_client(lambda request: httpx.Response(200, json=rows)))

        assert await store.get_sponsor_id("user-1") is None

    @pytest.mark.asyncio
    async def test_count_uses_exact_count_and_exclusion(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, headers={"Content-Range": "*/4"})

        store = SupabaseProfileStore(_client(handler), table="members")

        count = await store.count_direct_referrals("sponsor-1", exclude_id="user-1")

        assert count == 4
        request = seen[0]
        assert request.method == "HEAD"
        assert request.url.path == "/rest/v1/members"
        assert request.url.params["referred_by"] == "eq.sponsor-1"
        assert request.url.params["id"] == "neq.user-1"
        assert request.headers["prefer"] == "count=exact"

    @pytest.mark.asyncio
    async def test_count_without_exclusion(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(206, headers={"Content-Range": "0-0/12"})

        store = SupabaseProfileStore(_client(handler))

        assert await store.count_direct_referrals("sponsor-1") == 12
        assert "id" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_http_error_status_raises_data_store_error(self) -> None:
        store = SupabaseProfileStore(_client(lambda request: httpx.Response(503)))

        with pytest.raises(DataStoreAppError) as exc_info:
            await store.get_sponsor_id("user-1")

        assert exc_info.value.code == "data_store_error"
        assert exc_info.value.details["http_status"] == 503

    @pytest.mark.asyncio
    async def test_transport_error_raises_data_store_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        store = SupabaseProfileStore(_client(handler))

        with pytest.raises(DataStoreAppError) as exc_info:
            await store.count_direct_referrals("sponsor-1")

        assert exc_info.value.code == "data_store_unavailable"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestContentRange:
    @pytest.mark.parametrize(("header", "expected"), [("*/0", 0), ("0-24/3573", 3573)])
    def test_parses_total(self, header: str, expected: int) -> None:
        assert parse_content_range_total(header) == expected

    @pytest.mark.parametrize("header", [None, "", "0-24", "0-24/*"])
    def test_rejects_missing_total(self, header) -> None:
        with pytest.raises(DataStoreAppError):
            parse_content_range_total(header)


class TestNormalizeLevelCapacities:
    def test_accepts_both_key_styles_and_sorts(self) -> None:
        raw = [
            {"level": 2, "max_members": 25},
            {"level": "1", "maxMembers": 5},
        ]

        assert normalize_level_capacities(raw) == [
            LevelCapacity(level=1, max_members=5),
            LevelCapacity(level=2, max_members=25),
        ]

    def test_drops_invalid_entries(self) -> None:
        raw = [
            "not-an-object",
            None,
            {"level": 0, "maxMembers": 3},
            {"level": "abc", "maxMembers": 3},
            {"level": 3},
            {"level": 4, "maxMembers": -2},
        ]

        assert normalize_level_capacities(raw) == [
            LevelCapacity(level=3, max_members=0),
            LevelCapacity(level=4, max_members=0),
        ]

    def test_non_list_uses_defaults(self) -> None:
        result = normalize_level_capacities({"level": 1})

        assert result[0] == LevelCapacity(level=1, max_members=5)
        assert [entry.level for entry in result] == [1, 2, 3, 4, 5]


class TestSupabaseAppSettingsProvider:
    @pytest.mark.asyncio
    async def test_reads_and_normalizes_row(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/rest/v1/app_settings"
            body = [{"max_members_per_level": [{"level": 1, "max_members": 7}]}]
            return httpx.Response(200, content=json.dumps(body))

        provider = SupabaseAppSettingsProvider(_client(handler))

        result = await provider.get_app_settings()

        assert result.capacity_for_level(1) == LevelCapacity(level=1, max_members=7)
        assert result.capacity_for_level(2) is None

    @pytest.mark.asyncio
    async def test_missing_row_uses_defaults(self) -> None:
        provider = SupabaseAppSettingsProvider(_client(lambda request: httpx.Response(200, json=[])))

        result = await provider.get_app_settings()

        assert result.capacity_for_level(1).max_members == 5

    @pytest.mark.asyncio
    async def test_non_list_payload_raises(self) -> None:
        provider = SupabaseAppSettingsProvider(
            _client(lambda request: httpx.Response(200, json={"unexpected": True}))
        )

        with pytest.raises(DataStoreAppError):
            await provider.get_app_settings()
