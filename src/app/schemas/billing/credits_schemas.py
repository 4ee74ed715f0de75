# src/app/schemas/billing/credits_schemas.py

from pydantic import BaseModel, Field

# profiles.credits 是 32 位 INTEGER 列
MAX_CREDIT_AMOUNT = 2**31 - 1

class UseCreditsRequest(BaseModel):
    amount: int = Field(..., le=MAX_CREDIT_AMOUNT, description="Number of credits to debit. Must be positive.")

class CreditBalanceRead(BaseModel):
    credits: int
    plan: str
    unlimited: bool
