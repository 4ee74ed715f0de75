# src/app/services/system/status_service.py

import logging
from datetime import datetime, timezone
from sqlalchemy import text

from app.core.config import settings
from app.core.context import AppContext
from app.db.session import unit_of_work
from app.schemas.system.status_schemas import StatusRead


class StatusService:
    def __init__(self, context: AppContext):
        self.context = context

    async def get_status(self) -> StatusRead:
        """Reports which platform-level service keys are configured and whether the database answers."""
        apis = {
            "gemini": bool(settings.GEMINI_API_KEY),
            "undetectable": bool(settings.UNDETECTABLE_API_KEY),
            "sapling": bool(settings.SAPLING_API_KEY),
            "resend": bool(settings.RESEND_API_KEY),
            "apify": bool(settings.APIFY_API_KEY),
            "phantombuster": bool(settings.PHANTOMBUSTER_API_KEY),
            "languagetool": bool(settings.LANGUAGETOOL_API_KEY),
            "uploadPost": bool(settings.UPLOAD_POST_API_KEY),
        }
        return StatusRead(
            backend="operational",
            apis=apis,
            health={"database": await self._database_healthy()},
            timestamp=datetime.now(timezone.utc),
            environment=settings.APP_ENV
        )

    async def _database_healthy(self) -> bool:
        try:
            async with unit_of_work(self.context.session_factory) as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logging.warning(f"[StatusService] Database health check failed: {e}")
            return False
