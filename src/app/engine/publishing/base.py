# src/app/engine/publishing/base.py

import enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from pydantic.alias_generators import to_camel

class Platform(str, enum.Enum):
    """Publish targets supported by the upload service."""
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"

class UploadStatus(str, enum.Enum):
    ALL_SUCCESSFUL = "all_successful"
    PARTIAL_SUCCESS = "partial_success"
    ALL_FAILED = "all_failed"

class PublishRequest(BaseModel):
    """发布请求：不可变输入，结果由 UploadSummaryBuilder 单独累积。"""
    model_config = ConfigDict(frozen=True)

    content_url: HttpUrl
    caption: str
    platforms: List[str] = Field(..., min_length=1)
    owner_id: str

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PublishResult(_CamelModel):
    platform: str
    success: bool
    post_id: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None
    status: str

class UploadCounts(_CamelModel):
    total: int
    successful: int
    failed: int

class UploadSummary(_CamelModel):
    success: bool
    status: UploadStatus
    platforms: List[str]
    platform_results: Dict[str, PublishResult]
    summary: UploadCounts


class UploadSummaryBuilder:
    """
    Accumulates per-platform results as they settle, in any order, keyed by
    platform name, and produces the aggregate summary.
    """
    def __init__(self, platforms: List[str]):
        self._platforms = list(platforms)
        self._results: Dict[str, PublishResult] = {}

    def add(self, result: PublishResult) -> None:
        self._results[result.platform] = result

    def build(self) -> UploadSummary:
        missing = [p for p in self._platforms if p not in self._results]
        if missing:
            raise RuntimeError(f"Publish results missing for platforms: {missing}")

        successful = sum(1 for r in self._results.values() if r.success)
        total = len(self._platforms)
        failed = total - successful

        if successful == total:
            status = UploadStatus.ALL_SUCCESSFUL
        elif successful == 0:
            status = UploadStatus.ALL_FAILED
        else:
            status = UploadStatus.PARTIAL_SUCCESS

        return UploadSummary(
            success=successful > 0,
            status=status,
            platforms=self._platforms,
            platform_results={p: self._results[p] for p in self._platforms},
            summary=UploadCounts(total=total, successful=successful, failed=failed)
        )
