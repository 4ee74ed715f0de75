# src/app/dao/billing/api_usage_dao.py
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDao
from app.models import ApiUsage

class ApiUsageDao(BaseDao[ApiUsage]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(ApiUsage, db_session)

    async def append(self, user_id: str, service: str, credits_used: int, success: bool) -> ApiUsage:
        """Appends an audit entry. Entries are never updated afterwards."""
        return await self.add(ApiUsage(
            user_id=user_id,
            service=service,
            credits_used=credits_used,
            success=success
        ))
