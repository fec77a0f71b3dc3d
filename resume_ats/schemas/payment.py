"""
Схемы для покупки кредитов.
"""
from datetime import datetime

from pydantic import Field

from resume_ats.schemas.resume import CamelModel


class CreditPackage(CamelModel):
    id: str
    label: str
    credits: int
    amount: int = Field(description="Сумма в минимальных единицах валюты (сатанг)")
    currency: str


class CheckoutRequest(CamelModel):
    package_id: str = Field(min_length=1)


class CheckoutSession(CamelModel):
    checkout_url: str
    session_id: str


class CreditTransaction(CamelModel):
    """Запись журнала: списание (delta < 0), возврат или пополнение."""

    id: str
    action: str
    delta: int
    balance_after: int | None = None
    refunded: bool = False
    created_at: datetime


class CreditHistory(CamelModel):
    balance: int
    transactions: list[CreditTransaction]
