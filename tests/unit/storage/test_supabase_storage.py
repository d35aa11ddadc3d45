"""Tests for notepix/storage/supabase.py against a mocked Storage API."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import BUCKET, ENDPOINT, PNG_BYTES, make_config, make_service
from notepix.models import ImageFile, OperationResult, UploadFailure, UploadSuccess
from notepix.storage import StorageService, SupabaseStorageService

PUBLIC = f"{ENDPOINT}/storage/v1/object/public/{BUCKET}"


def _image() -> ImageFile:
    return ImageFile.create(name="cat.png", mime_type="image/png", data=PNG_BYTES)


def _ok(req: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"Key": f"{BUCKET}/x"})


# =========================================================================
# URL helpers
# =========================================================================


class TestPublicUrl:
    def test_default_endpoint(self):
        service = SupabaseStorageService(make_config())
        assert service.public_url("2024/06/15/a.png") == f"{PUBLIC}/2024/06/15/a.png"

    def test_trailing_slash_on_endpoint(self):
        service = SupabaseStorageService(make_config(url=ENDPOINT + "/"))
        assert service.public_url("a.png") == f"{PUBLIC}/a.png"

    def test_custom_domain(self):
        service = SupabaseStorageService(make_config(public_base_url="https://img.example.com/"))
        assert (
            service.public_url("a.png")
            == f"https://img.example.com/storage/v1/object/public/{BUCKET}/a.png"
        )

    def test_path_is_quoted(self):
        service = SupabaseStorageService(make_config())
        assert service.public_url("dir/a b.png") == f"{PUBLIC}/dir/a%20b.png"


class TestExtractPathFromUrl:
    def setup_method(self):
        self.service = SupabaseStorageService(make_config())

    def test_matching_bucket_returns_path(self):
        assert self.service.extract_path_from_url(f"{PUBLIC}/2024/06/15/a.png") == "2024/06/15/a.png"

    def test_other_bucket_returns_none(self):
        url = f"{ENDPOINT}/storage/v1/object/public/other-bucket/2024/06/15/a.png"
        assert self.service.extract_path_from_url(url) is None

    def test_bucket_prefix_is_not_enough(self):
        url = f"{ENDPOINT}/storage/v1/object/public/{BUCKET}-archive/a.png"
        assert self.service.extract_path_from_url(url) is None

    def test_unconfigured_host_returns_none(self):
        url = f"https://img.example.com/storage/v1/object/public/{BUCKET}/a.png"
        assert self.service.extract_path_from_url(url) is None

    def test_configured_custom_domain_returns_path(self):
        service = SupabaseStorageService(make_config(public_base_url="https://img.example.com"))
        url = f"https://img.example.com/storage/v1/object/public/{BUCKET}/a.png"
        assert service.extract_path_from_url(url) == "a.png"
        assert service.extract_path_from_url(f"{PUBLIC}/a.png") == "a.png"

    def test_custom_domain_with_path_prefix(self):
        service = SupabaseStorageService(make_config(public_base_url="https://cdn.example.com/assets/"))
        url = service.public_url("2024/a.png")
        assert url == f"https://cdn.example.com/assets/storage/v1/object/public/{BUCKET}/2024/a.png"
        assert service.extract_path_from_url(url) == "2024/a.png"
        bare = f"https://cdn.example.com/storage/v1/object/public/{BUCKET}/2024/a.png"
        assert service.extract_path_from_url(bare) is None

    @pytest.mark.parametrize(
        "url",
        [
            f"https://evil.example/storage/v1/object/public/{BUCKET}/2024/06/15/a.png",
            f"https://proj.supabase.co.evil.example/storage/v1/object/public/{BUCKET}/a.png",
            f"https://evil.example/x?next={PUBLIC}/a.png",
            f"https://evil.example/{PUBLIC}/a.png",
            f"http://proj.supabase.co/storage/v1/object/public/{BUCKET}/a.png",
            f"https://proj.supabase.co:8443/storage/v1/object/public/{BUCKET}/a.png",
        ],
    )
    def test_foreign_or_lookalike_host_returns_none(self, url):
        assert self.service.extract_path_from_url(url) is None

    def test_malformed_public_base_url_never_raises(self):
        service = SupabaseStorageService(make_config(public_base_url="http://[::1"))
        assert service.extract_path_from_url(f"{PUBLIC}/a.png") == "a.png"
        assert not service.is_supabase_url("https://evil.example/a.png")

    def test_host_compared_case_insensitively(self):
        url = f"HTTPS://PROJ.SUPABASE.CO/storage/v1/object/public/{BUCKET}/a.png"
        assert self.service.extract_path_from_url(url) == "a.png"

    def test_query_and_fragment_are_ignored(self):
        assert self.service.extract_path_from_url(f"{PUBLIC}/a.png?width=200#top") == "a.png"

    def test_inverts_public_url(self):
        path = "dir/a b.png"
        assert self.service.extract_path_from_url(self.service.public_url(path)) == path

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/cat.png",
            f"{ENDPOINT}/storage/v1/object/sign/{BUCKET}/a.png",
            f"{ENDPOINT}/storage/v1/object/public/{BUCKET}/",
            "",
            "not a url at all",
            "http://[::1",
        ],
    )
    def test_foreign_or_malformed_returns_none(self, url):
        assert self.service.extract_path_from_url(url) is None

    def test_non_string_returns_none(self):
        assert self.service.extract_path_from_url(None) is None  # type: ignore[arg-type]


class TestIsSupabaseUrl:
    def setup_method(self):
        self.service = SupabaseStorageService(make_config())

    def test_own_public_url(self):
        assert self.service.is_supabase_url(f"{PUBLIC}/a.png")

    def test_other_host(self):
        assert not self.service.is_supabase_url(
            f"https://other.supabase.co/storage/v1/object/public/{BUCKET}/a.png"
        )

    @pytest.mark.parametrize(
        "url",
        [
            f"https://proj.supabase.co.evil.example/storage/v1/object/public/{BUCKET}/a.png",
            f"https://evil.example/redirect?to={PUBLIC}/a.png",
            f"https://user@evil.example/{ENDPOINT}/storage/v1/object/public/{BUCKET}/a.png",
        ],
    )
    def test_endpoint_embedded_elsewhere_is_not_owned(self, url):
        assert not self.service.is_supabase_url(url)

    def test_own_host_without_public_marker(self):
        assert not self.service.is_supabase_url(f"{ENDPOINT}/rest/v1/items")

    def test_custom_domain_recognised(self):
        service = SupabaseStorageService(make_config(public_base_url="https://img.example.com"))
        assert service.is_supabase_url(
            f"https://img.example.com/storage/v1/object/public/{BUCKET}/a.png"
        )

    @pytest.mark.parametrize("url", ["", "%%%", None, 12])
    def test_malformed_input_is_not_owned(self, url):
        assert self.service.is_supabase_url(url) is False


# =========================================================================
# upload
# =========================================================================


class TestUpload:
    @pytest.mark.asyncio
    async def test_success_returns_public_url(self):
        service = make_service(_ok)
        result = await service.upload(_image(), "2024/06/15/abc.png")
        assert result == UploadSuccess(f"{PUBLIC}/2024/06/15/abc.png")
        await service.aclose()

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen: list[httpx.Request] = []

        def handler(req):
            seen.append(req)
            return _ok(req)

        service = make_service(handler)
        await service.upload(_image(), "2024/06/15/abc.png")
        req = seen[0]
        assert req.method == "POST"
        assert req.url.path == f"/storage/v1/object/{BUCKET}/2024/06/15/abc.png"
        assert req.headers["content-type"] == "image/png"
        assert req.headers["x-upsert"] == "false"
        assert req.headers["cache-control"] == "max-age=3600"
        assert req.headers["apikey"] == "test-key-abcd1234"
        assert req.content == PNG_BYTES
        await service.aclose()

    @pytest.mark.asyncio
    async def test_conflict_is_failure_not_retry(self):
        calls = []

        def handler(req):
            calls.append(req)
            return httpx.Response(
                400,
                json={"statusCode": "409", "error": "Duplicate", "message": "The resource already exists"},
            )

        service = make_service(handler)
        result = await service.upload(_image(), "a.png")
        assert result == UploadFailure("Upload failed: The resource already exists")
        assert len(calls) == 1
        await service.aclose()

    @pytest.mark.asyncio
    async def test_auth_failure(self):
        service = make_service(lambda req: httpx.Response(401, json={"message": "Invalid JWT"}))
        result = await service.upload(_image(), "a.png")
        assert isinstance(result, UploadFailure)
        assert result.error == "Upload failed: Invalid JWT"
        await service.aclose()

    @pytest.mark.asyncio
    async def test_quota_failure(self):
        service = make_service(
            lambda req: httpx.Response(413, json={"message": "Payload too large"})
        )
        result = await service.upload(_image(), "a.png")
        assert result == UploadFailure("Upload failed: Payload too large")
        await service.aclose()

    @pytest.mark.asyncio
    async def test_network_failure_never_raises(self):
        def handler(req):
            raise httpx.ConnectError("name resolution failed", request=req)

        service = make_service(handler)
        result = await service.upload(_image(), "a.png")
        assert isinstance(result, UploadFailure)
        assert "name resolution failed" in result.error
        await service.aclose()

    @pytest.mark.asyncio
    async def test_metrics(self):
        metrics = MagicMock()
        service = make_service(_ok, metrics=metrics)
        await service.upload(_image(), "a.png")
        names = [c.args[0] for c in metrics.increment.call_args_list]
        assert "notepix.upload_success_total" in names
        await service.aclose()


# =========================================================================
# delete
# =========================================================================


class TestDelete:
    @pytest.mark.asyncio
    async def test_success(self):
        seen: list[httpx.Request] = []

        def handler(req):
            seen.append(req)
            return httpx.Response(200, json=[{"name": "2024/06/15/a.png"}])

        service = make_service(handler)
        result = await service.delete("2024/06/15/a.png")
        assert result == OperationResult(True, "Image deleted successfully")
        assert seen[0].method == "DELETE"
        assert seen[0].url.path == f"/storage/v1/object/{BUCKET}"
        assert json.loads(seen[0].content) == {"prefixes": ["2024/06/15/a.png"]}
        await service.aclose()

    @pytest.mark.asyncio
    async def test_nothing_deleted_is_not_found(self):
        service = make_service(lambda req: httpx.Response(200, json=[]))
        result = await service.delete("missing.png")
        assert result == OperationResult(False, "Delete failed: object not found: missing.png")
        await service.aclose()

    @pytest.mark.asyncio
    async def test_permission_denied(self):
        service = make_service(
            lambda req: httpx.Response(403, json={"message": "new row violates row-level security policy"})
        )
        result = await service.delete("a.png")
        assert result.success is False
        assert result.message == "Delete failed: new row violates row-level security policy"
        await service.aclose()

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(req):
            raise httpx.ReadTimeout("timed out", request=req)

        service = make_service(handler)
        result = await service.delete("a.png")
        assert result.success is False
        assert result.message.startswith("Delete failed: ")
        await service.aclose()


# =========================================================================
# test_connection
# =========================================================================


class TestTestConnection:
    @pytest.mark.asyncio
    async def test_success_uses_bucket_lookup(self):
        seen: list[httpx.Request] = []

        def handler(req):
            seen.append(req)
            return httpx.Response(200, json={"id": BUCKET, "name": BUCKET, "public": True})

        service = make_service(handler)
        assert await service.test_connection() == OperationResult(True, "Connection successful")
        assert seen[0].method == "GET"
        assert seen[0].url.path == f"/storage/v1/bucket/{BUCKET}"
        await service.aclose()

    @pytest.mark.asyncio
    async def test_missing_bucket_404(self):
        service = make_service(lambda req: httpx.Response(404, json={"message": "Bucket not found"}))
        assert await service.test_connection() == OperationResult(False, f'Bucket "{BUCKET}" not found')
        await service.aclose()

    @pytest.mark.asyncio
    async def test_missing_bucket_signalled_in_body(self):
        service = make_service(
            lambda req: httpx.Response(400, json={"statusCode": "400", "message": "The bucket does not exist"})
        )
        result = await service.test_connection()
        assert result.message == f'Bucket "{BUCKET}" not found'
        await service.aclose()

    @pytest.mark.asyncio
    async def test_generic_failure(self):
        service = make_service(lambda req: httpx.Response(401, json={"message": "Invalid JWT"}))
        assert await service.test_connection() == OperationResult(False, "Connection failed: Invalid JWT")
        await service.aclose()

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(req):
            raise httpx.ConnectError("refused", request=req)

        service = make_service(handler)
        result = await service.test_connection()
        assert result == OperationResult(False, "Connection failed: Network error: refused")
        await service.aclose()


class TestProtocolAndLifecycle:
    def test_satisfies_storage_protocol(self):
        assert isinstance(SupabaseStorageService(make_config()), StorageService)

    def test_config_is_kept(self):
        config = make_config()
        service = SupabaseStorageService(config)
        assert service.config is config
        assert service.bucket == BUCKET

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        service = make_service(_ok)
        async with service as s:
            assert s is service
        assert service._transport._client.is_closed
