# src/app/services/credential/credential_store.py

import logging
from typing import List, Tuple
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.encryption import encrypt
from app.db.session import unit_of_work
from app.models import ServiceName
from app.dao.credential.verified_api_key_dao import VerifiedApiKeyDao
from app.engine.verification import CredentialPayload, get_probe_spec
from app.schemas.credential.api_key_schemas import VerifiedKeyRead


class CredentialStore:
    """
    Persists verified credentials. Secrets are encrypted before they reach
    the DAO; the auxiliary params stored are limited to the ones the
    service's probe declares.
    """
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def save_verified(self, user_id: str, credentials: List[Tuple[ServiceName, CredentialPayload]]) -> None:
        """Upserts every credential in one transaction. Errors propagate."""
        if not credentials:
            return
        async with unit_of_work(self.session_factory) as session:
            dao = VerifiedApiKeyDao(session)
            for service, payload in credentials:
                aux_fields = get_probe_spec(service).aux_fields
                await dao.upsert(
                    user_id=user_id,
                    service=service,
                    encrypted_key=encrypt(payload.secret),
                    extra_params={name: payload.aux_params[name] for name in aux_fields if name in payload.aux_params}
                )
        logging.info(f"[CredentialStore] Stored {len(credentials)} verified keys for user {user_id}.")

    async def list_for_user(self, user_id: str) -> List[VerifiedKeyRead]:
        async with unit_of_work(self.session_factory) as session:
            records = await VerifiedApiKeyDao(session).get_for_user(user_id)
            return [
                VerifiedKeyRead(
                    service=record.service.value,
                    status=record.status.value,
                    tested_at=record.tested_at,
                    extra_params=record.extra_params
                )
                for record in records
            ]
