# tollgate/schemas/transaction.py
from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional


class TransactionOut(BaseModel):
    id: int
    timestamp: datetime
    vehicle_id: str
    payment_method: str      # rfid | anpr-billing
    amount: Decimal
    balance_remaining: Decimal

    class Config:
        from_attributes = True


class TollErrorOut(BaseModel):
    id: int
    timestamp: datetime
    message: str

    class Config:
        from_attributes = True


class TollResultOut(BaseModel):
    outcome: str             # accepted | rejected-unregistered | rejected-insufficient-funds
    vehicle_id: str
    payment_method: str
    amount: Optional[Decimal]
    balance: Optional[Decimal]
    reason: Optional[str]
    fallback_rate_applied: bool

    @classmethod
    def from_result(cls, result) -> "TollResultOut":
        return cls(
            outcome=result.outcome.value,
            vehicle_id=result.vehicle_id,
            payment_method=result.payment_method.value,
            amount=result.amount,
            balance=result.balance,
            reason=result.reason,
            fallback_rate_applied=result.fallback_rate_applied,
        )
