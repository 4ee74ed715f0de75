# src/app/engine/publishing/main.py

import asyncio
import logging
from typing import List, Optional

import httpx

from app.services.exceptions import NoSupportedPlatforms, ConfigurationError
from .base import Platform, PublishRequest, PublishResult, UploadSummary, UploadSummaryBuilder

SUPPORTED_PLATFORMS = frozenset(p.value for p in Platform)


def filter_supported_platforms(platforms: List[str]) -> List[str]:
    """
    Keeps supported platform names (case-insensitive, first occurrence wins)
    and drops the rest. An empty result is an error.
    """
    selected: List[str] = []
    dropped: List[str] = []
    for name in platforms:
        normalized = (name or "").strip().lower()
        if normalized in SUPPORTED_PLATFORMS:
            if normalized not in selected:
                selected.append(normalized)
        else:
            dropped.append(name)

    if dropped:
        logging.warning(f"[Publisher] Dropping unsupported platforms: {dropped}")
    if not selected:
        raise NoSupportedPlatforms(
            f"None of the requested platforms is supported. Supported platforms: {sorted(SUPPORTED_PLATFORMS)}"
        )
    return selected


def _parse_upload_body(response: httpx.Response) -> dict:
    """2xx 即视为发布成功；post_id / post_url 只在响应体是 JSON 对象时读取。"""
    try:
        data = response.json() if response.content else {}
    except ValueError:
        logging.warning(f"[Publisher] Upload response from {response.url} is not JSON; treating as success without post details.")
        return {}
    return data if isinstance(data, dict) else {}


class MultiPlatformPublisher:
    """
    Fans one upload call per platform out concurrently and joins all of them.
    Each call has its own upper bound; one platform's failure or timeout never
    cancels or delays its siblings. The publisher does not touch billing.
    """
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 45.0
    ):
        self.http_client = http_client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def publish(self, request: PublishRequest) -> UploadSummary:
        if not self.is_configured:
            raise ConfigurationError("UPLOAD_POST_API_KEY not configured")

        platforms = filter_supported_platforms(request.platforms)
        builder = UploadSummaryBuilder(platforms)

        # [关键] 每个任务自行捕获异常并返回结果，gather 只是一个等待全部完成的屏障
        results = await asyncio.gather(
            *(self._publish_guarded(platform, request) for platform in platforms),
            return_exceptions=True
        )
        for platform, result in zip(platforms, results):
            if isinstance(result, BaseException):
                logging.error(f"[Publisher] Unexpected failure escaped '{platform}' upload: {result!r}")
                result = PublishResult(platform=platform, success=False, error=str(result), status="failed")
            builder.add(result)

        summary = builder.build()
        logging.info(
            f"[Publisher] Upload for owner {request.owner_id} finished: "
            f"{summary.summary.successful}/{summary.summary.total} platforms succeeded ({summary.status.value})."
        )
        return summary

    async def _publish_guarded(self, platform: str, request: PublishRequest) -> PublishResult:
        try:
            return await asyncio.wait_for(self._publish_one(platform, request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logging.warning(f"[Publisher] {platform} upload timed out after {self.timeout}s.")
            return PublishResult(
                platform=platform, success=False, status="failed",
                error=f"{platform} upload failed: timed out after {self.timeout:g} seconds"
            )
        except httpx.HTTPStatusError as e:
            logging.warning(f"[Publisher] {platform} upload rejected with HTTP {e.response.status_code}.")
            return PublishResult(
                platform=platform, success=False, status="failed",
                error=f"{platform} upload failed: HTTP {e.response.status_code} {e.response.text[:200]}".strip()
            )
        except httpx.RequestError as e:
            logging.warning(f"[Publisher] {platform} upload failed at network level: {e!r}")
            return PublishResult(
                platform=platform, success=False, status="failed",
                error=f"{platform} upload failed: {e}"
            )
        except Exception as e:
            logging.error(f"[Publisher] Unexpected error uploading to {platform}: {e}", exc_info=True)
            return PublishResult(
                platform=platform, success=False, status="failed",
                error=f"{platform} upload failed: {e}"
            )

    async def _publish_one(self, platform: str, request: PublishRequest) -> PublishResult:
        response = await self.http_client.post(
            f"{self.base_url}/upload/{platform}",
            json={
                "file_url": str(request.content_url),
                "caption": request.caption,
                "user_id": request.owner_id,
                "auto_publish": True
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout
        )
        response.raise_for_status()
        data = _parse_upload_body(response)
        return PublishResult(
            platform=platform,
            success=True,
            post_id=str(data["post_id"]) if data.get("post_id") is not None else None,
            url=data.get("post_url"),
            status="published"
        )
