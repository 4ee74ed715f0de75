# src/app/services/billing/credits_ledger.py

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.session import unit_of_work
from app.models import PlanTier
from app.dao.identity.profile_dao import ProfileDao
from app.dao.billing.api_usage_dao import ApiUsageDao
from app.schemas.billing.credits_schemas import CreditBalanceRead, MAX_CREDIT_AMOUNT
from app.services.exceptions import UserNotFound, InvalidAmountError


class CreditsLedger:
    """
    The per-user credits balance and its append-only usage audit.

    Every debit runs in its own short transaction and is committed before the
    caller starts the paid work. A debit is never refunded, even when the work
    that follows it fails.
    """
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def try_debit(self, user_id: str, amount: int, operation: str = "credits") -> bool:
        """
        Authorizes and applies a debit of `amount` credits.

        :return: True if the operation may proceed. False when a free-plan
                 balance is too low or the update could not be applied.
        :raises InvalidAmountError: amount is not a positive integer in the INTEGER column range.
        :raises UserNotFound: no credit account exists for user_id.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError("Invalid amount: credits to debit must be a positive integer.")
        if amount > MAX_CREDIT_AMOUNT:
            raise InvalidAmountError(f"Invalid amount: credits to debit must not exceed {MAX_CREDIT_AMOUNT}.")

        try:
            async with unit_of_work(self.session_factory) as session:
                return await self._debit_in_transaction(session, user_id, amount, operation)
        except SQLAlchemyError as e:
            logging.error(f"[CreditsLedger] Debit of {amount} for user {user_id} failed at database level: {e}", exc_info=True)
            return False

    async def _debit_in_transaction(self, session: AsyncSession, user_id: str, amount: int, operation: str) -> bool:
        profile_dao = ProfileDao(session)
        usage_dao = ApiUsageDao(session)

        # [关键] 行级锁：同一用户的并发扣费在此串行化
        profile = await profile_dao.get_by_id(user_id, for_update=True)
        if profile is None:
            raise UserNotFound(f"User {user_id} not found.")

        if profile.plan.is_unlimited:
            await usage_dao.append(user_id, operation, credits_used=amount, success=True)
            logging.info(f"[CreditsLedger] User {user_id} on '{profile.plan.value}' plan: '{operation}' authorized without debit.")
            return True

        if profile.credits < amount:
            logging.info(f"[CreditsLedger] User {user_id} has {profile.credits} credits, '{operation}' needs {amount}. Denied.")
            return False

        # 余额条件写在 UPDATE 里；没有行级锁的方言也不会被扣成负数
        if not await profile_dao.debit_credits(user_id, amount):
            logging.warning(f"[CreditsLedger] Guarded debit for user {user_id} matched no row. Denied.")
            return False

        await usage_dao.append(user_id, operation, credits_used=amount, success=True)
        logging.info(f"[CreditsLedger] Debited {amount} credits from user {user_id} for '{operation}' (balance now {profile.credits - amount}).")
        return True

    async def get_balance(self, user_id: str) -> CreditBalanceRead:
        async with unit_of_work(self.session_factory) as session:
            profile = await ProfileDao(session).get_by_id(user_id)
            if profile is None:
                raise UserNotFound(f"User {user_id} not found.")
            return CreditBalanceRead(
                credits=profile.credits,
                plan=profile.plan.value,
                unlimited=profile.plan.is_unlimited
            )
