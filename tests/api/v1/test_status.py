# tests/api/v1/test_status.py

import pytest
from httpx import AsyncClient
from fastapi import status

from app.core.config import settings

pytestmark = pytest.mark.asyncio


async def test_status_reports_configuration(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "configured")
    monkeypatch.setattr(settings, "RESEND_API_KEY", None)

    response = await client.get("/api/status")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["backend"] == "operational"
    assert data["apis"]["gemini"] is True
    assert data["apis"]["resend"] is False
    assert data["apis"]["uploadPost"] is True
    assert data["health"] == {"database": True}
    assert data["environment"] == "test"


async def test_status_is_get_only(client: AsyncClient):
    response = await client.post("/api/status")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json()["status"] == "fail"
