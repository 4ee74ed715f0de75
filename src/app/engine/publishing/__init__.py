# src/app/engine/publishing/__init__.py
from .main import MultiPlatformPublisher, filter_supported_platforms, SUPPORTED_PLATFORMS
from .base import (
    Platform,
    PublishRequest,
    PublishResult,
    UploadCounts,
    UploadStatus,
    UploadSummary,
    UploadSummaryBuilder
)
