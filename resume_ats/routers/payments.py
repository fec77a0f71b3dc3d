"""
Кредиты и оплата: пакеты, Stripe Checkout, webhook, история баланса.

Webhook без JWT, подлинность проверяется подписью Stripe-Signature.
"""
import logging

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from resume_ats.core.config import settings
from resume_ats.core.security import get_current_user
from resume_ats.schemas.common import ErrorResponse, SuccessResponse
from resume_ats.schemas.payment import (
    CheckoutRequest,
    CheckoutSession,
    CreditHistory,
    CreditPackage,
    CreditTransaction,
)
from resume_ats.services import payments as payment_service
from resume_ats.services.credits import list_transactions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/packages", response_model=SuccessResponse[list[CreditPackage]])
async def packages():
    """Доступные пакеты кредитов."""
    return SuccessResponse(data=payment_service.list_packages())


@router.get("/transactions", response_model=SuccessResponse[CreditHistory])
async def transactions(
    current_user: dict = Depends(get_current_user),
):
    """Баланс и последние записи журнала кредитов."""
    items = [
        CreditTransaction(
            id=str(doc["_id"]),
            action=doc["action"],
            delta=doc["delta"],
            balance_after=doc.get("balance_after"),
            refunded=doc.get("refunded", False),
            created_at=doc["created_at"],
        )
        for doc in list_transactions(current_user["_id"])
    ]
    return SuccessResponse(data=CreditHistory(balance=int(current_user.get("credits", 0)), transactions=items))


@router.post(
    "/checkout",
    response_model=SuccessResponse[CheckoutSession],
    responses={400: {"model": ErrorResponse}, 501: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def checkout(
    data: CheckoutRequest,
    current_user: dict = Depends(get_current_user),
):
    """Создать Stripe Checkout Session для пакета кредитов."""
    if not payment_service.stripe_configured():
        raise HTTPException(501, detail="Payments not configured")
    try:
        session = payment_service.create_checkout_session(current_user, data.package_id)
    except KeyError:
        raise HTTPException(400, detail={"error": "unknown_package", "message": f"Unknown package: {data.package_id}"})
    except stripe.StripeError as exc:
        logger.warning("Stripe checkout failed for user %s: %s", current_user["_id"], exc)
        raise HTTPException(502, detail={"error": "payment_provider_error", "message": "Could not create checkout session"})
    return SuccessResponse(data=session)


@router.post(
    "/webhook",
    response_model=SuccessResponse[dict],
    responses={400: {"model": ErrorResponse}, 501: {"model": ErrorResponse}},
)
async def webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
):
    """Webhook Stripe: начисление кредитов за оплаченную checkout-сессию."""
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise HTTPException(501, detail="Payments not configured")
    payload = await request.body()
    try:
        event = payment_service.verify_event(payload, stripe_signature)
    except payment_service.WebhookVerificationError as exc:
        logger.warning("Stripe webhook rejected: %s", exc)
        raise HTTPException(400, detail={"error": "invalid_signature", "message": "Invalid webhook signature"})

    balance = payment_service.handle_event(event)
    return SuccessResponse(data={"received": True, "credited": balance is not None})
