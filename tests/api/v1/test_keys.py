# tests/api/v1/test_keys.py

import pytest
import httpx
from httpx import AsyncClient
from fastapi import status

from app.core.encryption import decrypt
from app.db.session import unit_of_work
from app.dao.credential.verified_api_key_dao import VerifiedApiKeyDao
from app.models import ServiceName
from app.services.credential.credential_store import CredentialStore

# 将所有测试标记为异步
pytestmark = pytest.mark.asyncio

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models"
SAPLING_URL = "https://api.sapling.ai/api/v1/aidetect"
RESEND_URL = "https://api.resend.com/emails"
APIFY_URL = "https://api.apify.com/v2/acts"


@pytest.fixture
def healthy_vendors(vendor):
    """gemini / resend / apify 接受任何密钥；sapling 拒绝。"""
    vendor.on("POST", GEMINI_URL, httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Hi"}]}}]}))
    vendor.on("POST", RESEND_URL, httpx.Response(200, json={"id": "email_1"}))
    vendor.on("GET", APIFY_URL, httpx.Response(200, json={"data": {"items": []}}))
    vendor.on("POST", SAPLING_URL, httpx.Response(401, json={"msg": "Invalid API key"}))
    return vendor


# ==============================================================================
# 1. POST /api/validate-all-keys
# ==============================================================================

class TestValidateAllKeys:

    async def test_mixed_results_are_aggregated(self, client: AsyncClient, healthy_vendors, free_user, session_factory):
        """[成功路径] 有效和无效的密钥各自独立判定，并且只持久化有效的那部分。"""
        payload = {
            "userId": free_user.id,
            "keys": {
                "gemini": "AIza-gemini-secret",
                "sapling": "sap-bad-secret",
                "resend": {"key": "re_resend_secret", "senderEmail": "hello@acme.io"},
                "apify": "apify_api_secret",
            }
        }

        response = await client.post("/api/validate-all-keys", json=payload)

        # 1. Assert API Response
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert sorted(body["verified"]) == ["apify", "gemini", "resend"]
        assert body["failed"] == [{
            "service": "sapling",
            "error": "Invalid API key",
            "suggestion": "Verify API key and ensure you have an active subscription"
        }]
        assert body["storedInSupabase"] is True
        assert body["summary"] == {"total": 4, "verified": 3, "failed": 1}
        assert [r["service"] for r in body["results"]] == ["gemini", "sapling", "resend", "apify"]
        for result in body["results"]:
            assert "diagnosticCommand" in result
            assert "AIza-gemini-secret" not in (result["diagnosticCommand"] or "")

        # 2. Assert Database State
        async with unit_of_work(session_factory) as session:
            records = await VerifiedApiKeyDao(session).get_for_user(free_user.id)
        stored = {r.service: r for r in records}
        assert set(stored) == {ServiceName.GEMINI, ServiceName.RESEND, ServiceName.APIFY}
        assert stored[ServiceName.RESEND].api_key != "re_resend_secret"  # 密文存储
        assert decrypt(stored[ServiceName.RESEND].api_key) == "re_resend_secret"
        assert stored[ServiceName.RESEND].extra_params == {"senderEmail": "hello@acme.io"}

    async def test_probes_run_concurrently(self, client: AsyncClient, vendor, slow, free_user):
        """[并发] 总耗时约等于最慢的一次调用，而不是各次之和。"""
        import time
        vendor.on("GET", APIFY_URL, slow(0.3))
        vendor.on("GET", "https://api.phantombuster.com/api/v2", slow(0.3))
        vendor.on("GET", "https://api.uploadpost.com/v1/user/profile", slow(0.3))

        started = time.monotonic()
        response = await client.post("/api/validate-all-keys", json={
            "userId": free_user.id,
            "keys": {"apify": "a-secret", "phantom": {"key": "p-secret"}, "uploadPost": "u-secret"}
        })
        elapsed = time.monotonic() - started

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["summary"]["verified"] == 3
        assert elapsed < 0.8

    async def test_unsupported_service_fails_locally(self, client: AsyncClient, vendor, free_user):
        """[边界] 未知服务得到本地失败结果，不发起任何外部调用。"""
        response = await client.post("/api/validate-all-keys", json={
            "userId": free_user.id,
            "keys": {"myspace": "whatever"}
        })

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["failed"][0]["service"] == "myspace"
        assert body["failed"][0]["error"] == "Unsupported service"
        assert body["storedInSupabase"] is False
        assert vendor.calls == []

    @pytest.mark.parametrize("payload", [
        {"keys": {"gemini": "x"}},
        {"userId": "", "keys": {"gemini": "x"}},
        {"userId": "user-1"},
        {"userId": "user-1", "keys": {}},
        {"userId": "user-1", "keys": {"gemini": ""}},
    ])
    async def test_missing_user_or_keys_is_rejected(self, client: AsyncClient, vendor, payload):
        """[失败路径] 缺少 userId 或 keys 时返回 400，且不调用任何外部服务。"""
        response = await client.post("/api/validate-all-keys", json=payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["status"] == "fail"
        assert "Missing userId or keys" in response.json()["message"]
        assert vendor.calls == []

    async def test_storage_failure_keeps_verified(self, client: AsyncClient, healthy_vendors, free_user, monkeypatch):
        """[存储失败] 持久化失败只体现在 storedInSupabase，不降级已验证的结果。"""
        async def broken_save(self, user_id, credentials):
            raise RuntimeError("database unavailable")
        monkeypatch.setattr(CredentialStore, "save_verified", broken_save)

        response = await client.post("/api/validate-all-keys", json={
            "userId": free_user.id,
            "keys": {"apify": "apify_api_secret"}
        })

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["verified"] == ["apify"]
        assert body["storedInSupabase"] is False

    async def test_revalidation_overwrites_previous_record(self, client: AsyncClient, healthy_vendors, free_user, session_factory):
        for secret in ("apify_old", "apify_new"):
            response = await client.post("/api/validate-all-keys", json={"userId": free_user.id, "keys": {"apify": secret}})
            assert response.status_code == status.HTTP_200_OK

        async with unit_of_work(session_factory) as session:
            records = await VerifiedApiKeyDao(session).get_for_user(free_user.id)
        assert len(records) == 1
        assert decrypt(records[0].api_key) == "apify_new"


# ==============================================================================
# 2. POST /api/test-api-key
# ==============================================================================

class TestSingleKey:

    async def test_valid_key(self, client: AsyncClient, healthy_vendors):
        response = await client.post("/api/test-api-key", json={"service": "apify", "apiKey": "apify_api_secret"})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "success"
        assert body["valid"] is True
        assert body["service"] == "apify"
        assert body["message"] == "apify API key is valid and working"

    async def test_legacy_alias_and_aux_params(self, client: AsyncClient, vendor):
        """[兼容] phantombuster 别名映射到 phantom，额外字段作为辅助参数。"""
        vendor.on("GET", "https://api.phantombuster.com/api/v2/agents/fetch", httpx.Response(200, json={"id": "77"}))

        response = await client.post("/api/test-api-key", json={
            "service": "phantombuster", "apiKey": "pb-secret", "phantomId": "77"
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["service"] == "phantom"
        assert vendor.calls[0].url.params["id"] == "77"

    async def test_unsupported_service(self, client: AsyncClient, vendor):
        response = await client.post("/api/test-api-key", json={"service": "myspace", "apiKey": "x"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "not supported" in response.json()["message"]
        assert vendor.calls == []

    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/test-api-key", json={"service": "gemini"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_invalid_key_reports_suggestion(self, client: AsyncClient, healthy_vendors):
        """[失败路径] 无效密钥返回 500，并带回上游错误和排查建议。"""
        response = await client.post("/api/test-api-key", json={"service": "sapling", "apiKey": "sap-bad"})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["status"] == "fail"
        assert body["message"] == "Failed to test API key: Invalid API key"
        assert body["data"]["suggestion"] == "Verify API key and ensure you have an active subscription"
        assert body["data"]["statusCode"] == 401


# ==============================================================================
# 3. GET /api/keys
# ==============================================================================

class TestListVerifiedKeys:

    async def test_lists_services_without_secrets(self, client: AsyncClient, healthy_vendors, free_user, auth_headers_factory):
        await client.post("/api/validate-all-keys", json={
            "userId": free_user.id,
            "keys": {"apify": "apify_api_secret", "resend": {"key": "re_secret", "senderEmail": "hi@acme.io"}}
        })

        response = await client.get("/api/keys", headers=auth_headers_factory(free_user.id))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert [k["service"] for k in data] == ["apify", "resend"]
        assert data[1]["extraParams"] == {"senderEmail": "hi@acme.io"}
        assert all("apiKey" not in k and "api_key" not in k for k in data)
        assert "re_secret" not in response.text

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/keys")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["status"] == "fail"


# ==============================================================================
# 4. GET /api/key-manuals
# ==============================================================================

class TestKeyManuals:

    async def test_every_service_has_a_manual(self, client: AsyncClient, vendor):
        response = await client.get("/api/key-manuals")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert set(body["manuals"]) == {s.value for s in ServiceName}
        assert body["totalServices"] == len(ServiceName)
        assert "lastUpdated" in body
        for manual in body["manuals"].values():
            assert manual["steps"] and manual["keyFormat"] and manual["docsUrl"]
        assert vendor.calls == []

    async def test_manual_matches_registered_endpoint(self, client: AsyncClient):
        """[一致性] testEndpoint / suggestion / extraFields 与注册的探针一致。"""
        manuals = (await client.get("/api/key-manuals")).json()["manuals"]

        assert manuals["apify"]["testEndpoint"] == APIFY_URL
        assert manuals["sapling"]["suggestion"] == "Verify API key and ensure you have an active subscription"
        assert manuals["resend"]["extraFields"][0]["name"] == "senderEmail"
        assert manuals["resend"]["extraFields"][0]["required"] is True
        assert manuals["gemini"]["testEndpoint"].startswith(GEMINI_URL)
        assert "YOUR_API_KEY" not in manuals["gemini"]["testEndpoint"]

    async def test_wrong_method_is_405(self, client: AsyncClient):
        response = await client.post("/api/key-manuals")
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


# ==============================================================================
# 5. GET /api/live-test/{service}
# ==============================================================================

class TestLiveTest:

    async def test_valid_key_reports_timing(self, client: AsyncClient, vendor, slow):
        vendor.on("GET", APIFY_URL, slow(0.05, httpx.Response(200, json={"data": {"items": []}})))

        response = await client.get("/api/live-test/apify", params={"apiKey": "apify_api_secret", "userId": "u-1"})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["service"] == "apify"
        result = body["result"]
        assert result["success"] is True
        assert result["statusCode"] == 200
        assert result["responseTimeMs"] >= 40
        assert result["data"] == {"data": {"items": []}}
        assert "timestamp" in body

    async def test_invalid_key_is_a_result_not_an_error(self, client: AsyncClient, healthy_vendors):
        response = await client.get("/api/live-test/sapling", params={"apiKey": "sap-bad"})

        assert response.status_code == status.HTTP_200_OK
        result = response.json()["result"]
        assert result["success"] is False
        assert result["statusCode"] == 401
        assert result["error"] == "Invalid API key"
        assert result["suggestion"] == "Verify API key and ensure you have an active subscription"
        assert "sap-bad" not in (result["diagnosticCommand"] or "")

    async def test_extra_query_params_become_aux_params(self, client: AsyncClient, vendor):
        vendor.on("GET", "https://api.phantombuster.com/api/v2/agents/fetch", httpx.Response(200, json={"id": "42"}))

        response = await client.get(
            "/api/live-test/phantombuster",
            params={"apiKey": "pb-secret", "userId": "u-1", "phantomId": "42"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["service"] == "phantom"
        assert vendor.calls[0].url.params["id"] == "42"
        assert "userId" not in vendor.calls[0].url.params

    async def test_missing_api_key_is_400(self, client: AsyncClient, vendor):
        response = await client.get("/api/live-test/gemini")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Missing service or apiKey parameter"
        assert vendor.calls == []

    async def test_unsupported_service_is_400(self, client: AsyncClient, vendor):
        response = await client.get("/api/live-test/myspace", params={"apiKey": "x"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"].startswith("Unsupported service: myspace")
        assert vendor.calls == []
