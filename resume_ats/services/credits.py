"""
Кредиты: журнал изменений баланса и жизненный цикл платной AI-операции.

Баланс хранится в users.credits и меняется только здесь:
- try_debit — атомарное условное списание (credits >= amount), баланс не уходит в минус
  даже при параллельных запросах одного пользователя;
- grant — пополнение (оплата, возврат);
- refund — идемпотентный возврат конкретного списания.
Каждое изменение пишется в credit_transactions.

CreditGate — один автомат для всех AI-операций:
AUTHENTICATING -> BALANCE_CHECK -> [DEDUCTING] -> CALLING_EXTERNAL -> FINALIZING -> DONE
                                                   при ошибке: [REFUNDING] -> FAILED
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from resume_ats.core.config import settings
from resume_ats.core.database import get_transactions_collection, get_users_collection
from resume_ats.core.errors import InsufficientCredits, RefundFailed, Unauthorized

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Operation(str, Enum):
    ENHANCE = "enhance"
    JOB_MATCH = "job_match"
    TRANSLATE = "translate"


OPERATION_COSTS: dict[Operation, int] = {
    Operation.ENHANCE: 1,
    Operation.JOB_MATCH: 1,
    Operation.TRANSLATE: 5,
}


class ChargeMode(str, Enum):
    POST = "post"  # списание после успешного ответа
    RESERVE = "reserve"  # списание до вызова, возврат при ошибке


class OperationState(str, Enum):
    AUTHENTICATING = "authenticating"
    BALANCE_CHECK = "balance_check"
    DEDUCTING = "deducting"
    CALLING_EXTERNAL = "calling_external"
    FINALIZING = "finalizing"
    DONE = "done"
    REFUNDING = "refunding"
    FAILED = "failed"


@dataclass(frozen=True)
class Debit:
    transaction_id: ObjectId
    balance: int


@dataclass(frozen=True)
class GatedResult(Generic[T]):
    value: T
    credits_remaining: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _record(user_id: ObjectId, action: str, delta: int, balance_after: int, meta: dict | None = None) -> ObjectId:
    doc = {
        "user_id": user_id,
        "action": action,
        "delta": delta,
        "balance_after": balance_after,
        "meta": meta or {},
        "refunded": False,
        "created_at": _now(),
    }
    return get_transactions_collection().insert_one(doc).inserted_id


# ==================== Журнал ====================


def get_balance(user_id: ObjectId) -> int | None:
    """Текущий баланс или None, если пользователя нет."""
    doc = get_users_collection().find_one({"_id": user_id}, {"credits": 1})
    if doc is None:
        return None
    return int(doc.get("credits", 0))


def try_debit(user_id: ObjectId, amount: int, action: str, meta: dict | None = None) -> Debit | None:
    """Списать amount, только если баланс >= amount. None — кредитов не хватило."""
    updated = get_users_collection().find_one_and_update(
        {"_id": user_id, "credits": {"$gte": amount}},
        {"$inc": {"credits": -amount}},
        projection={"credits": 1},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        return None
    balance = int(updated["credits"])
    tx_id = _record(user_id, action, -amount, balance, meta)
    logger.info("Debited %s credit(s) from user %s for %s, balance %s", amount, user_id, action, balance)
    return Debit(transaction_id=tx_id, balance=balance)


def grant(
    user_id: ObjectId,
    amount: int,
    action: str,
    meta: dict | None = None,
    stripe_session_id: str | None = None,
) -> int | None:
    """
    Начислить amount. С stripe_session_id — не более одного раза на сессию.
    Возвращает новый баланс или None, если ничего не начислено (повтор, нет пользователя).
    """
    transactions = get_transactions_collection()
    claim_id = None
    if stripe_session_id:
        claim = transactions.update_one(
            {"stripe_session_id": stripe_session_id},
            {
                "$setOnInsert": {
                    "user_id": user_id,
                    "action": action,
                    "delta": amount,
                    "balance_after": None,
                    "meta": meta or {},
                    "refunded": False,
                    "created_at": _now(),
                }
            },
            upsert=True,
        )
        if claim.upserted_id is None:
            logger.info("Stripe session %s already credited, skipping", stripe_session_id)
            return None
        claim_id = claim.upserted_id

    try:
        updated = get_users_collection().find_one_and_update(
            {"_id": user_id},
            {"$inc": {"credits": amount}},
            projection={"credits": 1},
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError:
        # Снять захват сессии, чтобы повторная доставка webhook начислила кредиты
        if claim_id is not None:
            transactions.delete_one({"_id": claim_id})
        raise
    if updated is None:
        if claim_id is not None:
            transactions.delete_one({"_id": claim_id})
        logger.error("Cannot grant %s credit(s): user %s not found", amount, user_id)
        return None

    balance = int(updated["credits"])
    if claim_id is not None:
        transactions.update_one({"_id": claim_id}, {"$set": {"balance_after": balance}})
    else:
        _record(user_id, action, amount, balance, meta)
    logger.info("Granted %s credit(s) to user %s (%s), balance %s", amount, user_id, action, balance)
    return balance


def refund(transaction_id: ObjectId) -> int | None:
    """
    Вернуть списание transaction_id. Идемпотентно: повторный вызов ничего не меняет
    и возвращает None. Ошибки БД пробрасываются (PyMongoError).
    """
    transactions = get_transactions_collection()
    tx = transactions.find_one_and_update(
        {"_id": transaction_id, "refunded": False, "delta": {"$lt": 0}},
        {"$set": {"refunded": True, "refunded_at": _now()}},
    )
    if tx is None:
        return None

    amount = -int(tx["delta"])
    try:
        updated = get_users_collection().find_one_and_update(
            {"_id": tx["user_id"]},
            {"$inc": {"credits": amount}},
            projection={"credits": 1},
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError:
        # Снять отметку, чтобы возврат можно было повторить
        transactions.update_one({"_id": transaction_id}, {"$set": {"refunded": False}})
        raise
    balance = int(updated["credits"]) if updated else 0
    _record(tx["user_id"], "refund", amount, balance, {"transaction_id": str(transaction_id), "action": tx["action"]})
    logger.info("Refunded %s credit(s) to user %s, balance %s", amount, tx["user_id"], balance)
    return balance


def list_transactions(user_id: ObjectId, limit: int = 20) -> list[dict[str, Any]]:
    cursor = get_transactions_collection().find({"user_id": user_id}).sort("created_at", -1).limit(limit)
    return list(cursor)


# ==================== Жизненный цикл операции ====================


def current_charge_mode() -> ChargeMode:
    return ChargeMode(settings.CREDIT_CHARGE_MODE.strip().lower())


class CreditGate:
    """Проводит одну AI-операцию через проверку, списание и (при необходимости) возврат."""

    def __init__(self, user: dict | None, operation: Operation, mode: ChargeMode | None = None):
        self.user = user
        self.operation = operation
        self.cost = OPERATION_COSTS[operation]
        self.mode = mode or current_charge_mode()
        self.state = OperationState.AUTHENTICATING

    def _move(self, state: OperationState) -> None:
        logger.debug("%s for user %s: %s -> %s", self.operation.value, self._user_id, self.state.value, state.value)
        self.state = state

    @property
    def _user_id(self):
        return self.user["_id"] if self.user else None

    def _fail(self, exc: Exception) -> Exception:
        self.state = OperationState.FAILED
        return exc

    def _insufficient(self, user_id: ObjectId) -> InsufficientCredits:
        return self._fail(InsufficientCredits(self.cost, get_balance(user_id)))

    def _refund(self, debit: Debit, cause: BaseException) -> None:
        self._move(OperationState.REFUNDING)
        try:
            refund(debit.transaction_id)
        except PyMongoError as exc:
            logger.critical(
                "REFUND FAILED: user %s was charged %s credit(s) for failed %s (transaction %s): %s",
                self._user_id, self.cost, self.operation.value, debit.transaction_id, exc,
            )
            raise self._fail(RefundFailed(str(self._user_id), self.cost, cause)) from exc

    async def run(self, call: Callable[[], Awaitable[T]]) -> GatedResult[T]:
        if self.user is None:
            raise self._fail(Unauthorized())
        user_id = self.user["_id"]

        self._move(OperationState.BALANCE_CHECK)
        balance = get_balance(user_id)
        if balance is None:
            raise self._fail(Unauthorized())
        if balance < self.cost:
            raise self._fail(InsufficientCredits(self.cost, balance))

        reservation = None
        if self.mode == ChargeMode.RESERVE:
            self._move(OperationState.DEDUCTING)
            reservation = try_debit(user_id, self.cost, self.operation.value)
            if reservation is None:
                raise self._insufficient(user_id)

        self._move(OperationState.CALLING_EXTERNAL)
        try:
            value = await call()
        except BaseException as exc:
            # CancelledError тоже: зарезервированные кредиты возвращаются всегда
            logger.warning("%s failed for user %s: %r", self.operation.value, user_id, exc)
            if reservation is not None:
                self._refund(reservation, exc)
            self.state = OperationState.FAILED
            raise

        self._move(OperationState.FINALIZING)
        if reservation is None:
            debit = try_debit(user_id, self.cost, self.operation.value)
            if debit is None:
                # Параллельный запрос успел потратить кредиты между проверкой и списанием
                raise self._insufficient(user_id)
            remaining = debit.balance
        else:
            remaining = reservation.balance

        self._move(OperationState.DONE)
        logger.info(
            "%s completed for user %s, credits remaining: %s", self.operation.value, user_id, remaining
        )
        return GatedResult(value=value, credits_remaining=remaining)
