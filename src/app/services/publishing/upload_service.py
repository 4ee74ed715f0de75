# src/app/services/publishing/upload_service.py

import logging

from app.core.config import settings
from app.core.context import AppContext
from app.engine.publishing import MultiPlatformPublisher, PublishRequest, UploadSummary, filter_supported_platforms
from app.schemas.publishing.upload_schemas import UploadContentRequest
from app.services.billing.credits_ledger import CreditsLedger
from app.services.exceptions import AuthenticationError, ConfigurationError, InsufficientCreditsError

CONTENT_UPLOAD_OPERATION = "content_upload"


class ContentUploadService:
    """
    Credit-gated multi-platform publishing.
    Order is fixed: authenticate, validate, debit, then publish.
    """
    def __init__(self, context: AppContext):
        self.context = context
        self.ledger = CreditsLedger(context.session_factory)
        self.publisher = MultiPlatformPublisher(
            http_client=context.http_client,
            api_key=settings.UPLOAD_POST_API_KEY,
            base_url=str(settings.UPLOAD_POST_API_URL),
            timeout=settings.PUBLISH_TIMEOUT_SECONDS
        )

    async def upload(self, data: UploadContentRequest) -> UploadSummary:
        actor_id = self.context.actor_id
        if data.user_id != actor_id:
            raise AuthenticationError("Token identity does not match userId.")

        # [关键] 配置和输入错误必须在扣费之前暴露
        if not self.publisher.is_configured:
            raise ConfigurationError("UPLOAD_POST_API_KEY not configured")
        platforms = filter_supported_platforms(data.platforms)

        cost = settings.CONTENT_UPLOAD_COST
        if not await self.ledger.try_debit(actor_id, cost, CONTENT_UPLOAD_OPERATION):
            raise InsufficientCreditsError(f"Insufficient credits: content upload requires {cost} credits.")

        request = PublishRequest(
            content_url=data.file_url,
            caption=data.description,
            platforms=platforms,
            owner_id=actor_id
        )
        logging.info(f"[ContentUploadService] User {actor_id} publishing to {platforms}.")
        # 扣费已提交；发布失败不退款
        return await self.publisher.publish(request)
