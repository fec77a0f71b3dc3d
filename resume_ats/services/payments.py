"""
Покупка кредитов через Stripe Checkout.

Количество кредитов кладётся в metadata сессии при её создании и читается
обратно из webhook. Таблица сумма -> кредиты — только запасной вариант для
сессий без metadata; неизвестная сумма ничего не начисляет.
"""
import json
import logging

import stripe
from bson import ObjectId
from bson.errors import InvalidId

from resume_ats.core.config import settings
from resume_ats.schemas.payment import CheckoutSession, CreditPackage
from resume_ats.services.credits import grant

logger = logging.getLogger(__name__)

CURRENCY = "thb"

# Суммы в сатангах (1 THB = 100)
CREDIT_PACKAGES: dict[str, dict] = {
    "credits_25": {"label": "25 Credits Package", "credits": 25, "amount": 9900},
    "credits_60": {"label": "60 Credits Package", "credits": 60, "amount": 19900},
}

AMOUNT_TO_CREDITS = {p["amount"]: p["credits"] for p in CREDIT_PACKAGES.values()}

CHECKOUT_COMPLETED = "checkout.session.completed"
# Отложенные методы оплаты: сессия завершена раньше, чем пришли деньги
ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"
CREDIT_EVENTS = {CHECKOUT_COMPLETED, ASYNC_PAYMENT_SUCCEEDED}

# Старые события (повтор перехваченного запроса) отклоняются
SIGNATURE_TOLERANCE_S = 300


class WebhookVerificationError(Exception):
    """Подпись webhook не прошла проверку."""


def stripe_configured() -> bool:
    return bool(settings.STRIPE_SECRET_KEY)


def list_packages() -> list[CreditPackage]:
    return [
        CreditPackage(id=pid, label=p["label"], credits=p["credits"], amount=p["amount"], currency=CURRENCY)
        for pid, p in CREDIT_PACKAGES.items()
    ]


def create_checkout_session(user: dict, package_id: str) -> CheckoutSession:
    """Создать Checkout Session. KeyError — неизвестный пакет, stripe.StripeError — сбой Stripe."""
    package = CREDIT_PACKAGES[package_id]
    user_id = str(user["_id"])
    session = stripe.checkout.Session.create(
        api_key=settings.STRIPE_SECRET_KEY,
        mode="payment",
        payment_method_types=["card"],
        line_items=[
            {
                "price_data": {
                    "currency": CURRENCY,
                    "unit_amount": package["amount"],
                    "product_data": {
                        "name": package["label"],
                        "description": f"{package['credits']} credit pack",
                    },
                },
                "quantity": 1,
            }
        ],
        client_reference_id=user_id,
        customer_email=user.get("email"),
        success_url=settings.PAYMENT_SUCCESS_URL,
        cancel_url=settings.PAYMENT_CANCEL_URL,
        metadata={
            "user_id": user_id,
            "package_id": package_id,
            "credits": str(package["credits"]),
        },
    )
    logger.info("Checkout session %s created for user %s, package %s", session.id, user_id, package_id)
    return CheckoutSession(checkout_url=session.url, session_id=session.id)


def verify_event(payload: bytes, signature: str | None) -> dict:
    """Проверить подпись Stripe-Signature и вернуть событие как dict."""
    if not signature:
        raise WebhookVerificationError("No signature")
    try:
        text = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            text, signature, settings.STRIPE_WEBHOOK_SECRET, tolerance=SIGNATURE_TOLERANCE_S
        )
        event = json.loads(text)
    except (stripe.SignatureVerificationError, ValueError) as exc:
        raise WebhookVerificationError(str(exc)) from exc
    if not isinstance(event, dict):
        raise WebhookVerificationError("Malformed event")
    return event


def credits_for_session(session: dict) -> int:
    """Кредиты из metadata; без metadata — по сумме оплаты; иначе 0."""
    metadata = session.get("metadata") or {}
    try:
        credits = int(metadata.get("credits") or 0)
    except (TypeError, ValueError):
        credits = 0
    if credits > 0:
        return credits
    return AMOUNT_TO_CREDITS.get(session.get("amount_total") or 0, 0)


def handle_event(event: dict) -> int | None:
    """Обработать событие. Возвращает новый баланс, если кредиты начислены."""
    event_type = event.get("type")
    if event_type not in CREDIT_EVENTS:
        logger.info("Unhandled Stripe event type: %s", event_type)
        return None

    session = (event.get("data") or {}).get("object") or {}
    if session.get("payment_status") != "paid":
        logger.info("Checkout session %s not paid yet (%s)", session.get("id"), session.get("payment_status"))
        return None
    metadata = session.get("metadata") or {}
    user_ref = session.get("client_reference_id") or metadata.get("user_id")
    try:
        user_id = ObjectId(user_ref)
    except (InvalidId, TypeError):
        logger.error("Checkout session %s has no valid user reference: %r", session.get("id"), user_ref)
        return None

    credits = credits_for_session(session)
    if credits <= 0:
        logger.error(
            "Checkout session %s: unrecognized amount %s, no credits granted to user %s",
            session.get("id"), session.get("amount_total"), user_id,
        )
        return None

    return grant(
        user_id,
        credits,
        "stripe_credit_pack",
        meta={"package_id": metadata.get("package_id"), "amount_total": session.get("amount_total")},
        stripe_session_id=session.get("id"),
    )
