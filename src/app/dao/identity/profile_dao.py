# app/dao/identity/profile_dao.py
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDao
from app.models import Profile

class ProfileDao(BaseDao[Profile]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Profile, db_session)

    async def get_by_id(self, user_id: str, for_update: bool = False) -> Optional[Profile]:
        """Finds a profile by its user id, optionally taking a row lock."""
        return await self.get_by_pk(user_id, for_update=for_update)

    async def debit_credits(self, user_id: str, amount: int) -> bool:
        """
        Compare-and-swap debit: the balance check is part of the UPDATE itself,
        so a stale read elsewhere can never push the balance below zero.
        Returns False when the guarded row did not match.
        """
        rowcount = await self.update_where(
            where=[Profile.id == user_id, Profile.credits >= amount],
            values={
                "credits": Profile.credits - amount,
                "updated_at": datetime.utcnow()
            }
        )
        return rowcount == 1
