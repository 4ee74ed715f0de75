# src/app/api/v1/credits.py

from fastapi import APIRouter
from app.core.context import AppContext
from app.api.dependencies.context import AuthContextDep
from app.schemas.common import JsonResponse, MsgResponse
from app.schemas.billing.credits_schemas import CreditBalanceRead, UseCreditsRequest
from app.services.billing.credits_ledger import CreditsLedger
from app.services.exceptions import InsufficientCreditsError

router = APIRouter()

@router.get("/get", response_model=JsonResponse[CreditBalanceRead], summary="Get the caller's credit balance")
async def get_credits(context: AppContext = AuthContextDep):
    ledger = CreditsLedger(context.session_factory)
    balance = await ledger.get_balance(context.actor_id)
    return JsonResponse(data=balance)

@router.post("/use", response_model=MsgResponse, summary="Debit credits from the caller")
async def use_credits(body: UseCreditsRequest, context: AppContext = AuthContextDep):
    ledger = CreditsLedger(context.session_factory)
    if not await ledger.try_debit(context.actor_id, body.amount):
        raise InsufficientCreditsError("Insufficient credits")
    return MsgResponse(message="Credits deducted successfully")
