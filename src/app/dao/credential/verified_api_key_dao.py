# src/app/dao/credential/verified_api_key_dao.py

from datetime import datetime
from typing import List, Dict, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite
from app.dao.base_dao import BaseDao
from app.models import VerifiedApiKey, ServiceName, CredentialStatus

# 两种方言的 insert() 都提供 on_conflict_do_update
_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

class VerifiedApiKeyDao(BaseDao[VerifiedApiKey]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(VerifiedApiKey, db_session)

    async def upsert(
        self,
        user_id: str,
        service: ServiceName,
        encrypted_key: str,
        extra_params: Optional[Dict[str, Any]] = None,
        status: CredentialStatus = CredentialStatus.VERIFIED,
        tested_at: Optional[datetime] = None
    ) -> None:
        """
        Insert-or-overwrite keyed by (user_id, service). Last write wins;
        no history is kept.
        """
        dialect_name = self.db_session.bind.dialect.name
        insert_fn = _DIALECT_INSERTS.get(dialect_name)
        if insert_fn is None:
            raise NotImplementedError(f"Upsert is not supported for dialect '{dialect_name}'.")

        values = {
            "user_id": user_id,
            "service": service,
            "api_key": encrypted_key,
            "status": status,
            "tested_at": tested_at or datetime.utcnow(),
            "extra_params": extra_params or {},
        }
        stmt = insert_fn(VerifiedApiKey).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "service"],
            set_={
                "api_key": stmt.excluded.api_key,
                "status": stmt.excluded.status,
                "tested_at": stmt.excluded.tested_at,
                "extra_params": stmt.excluded.extra_params,
            }
        )
        await self.db_session.execute(stmt)

    async def get_for_user(self, user_id: str) -> List[VerifiedApiKey]:
        """Gets all stored credentials of a user, ordered by service name."""
        return await self.get_list(where={"user_id": user_id}, order=[VerifiedApiKey.service.asc()])

    async def get_for_user_and_service(self, user_id: str, service: ServiceName) -> Optional[VerifiedApiKey]:
        return await self.get_one(where={"user_id": user_id, "service": service})
