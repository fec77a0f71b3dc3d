"""
Rate limit по IP: ограничение числа запросов с одного клиента за окно времени.

Общий лимит — RATE_LIMIT (например, "100/minute"), для /ai/* — отдельное,
более строгое окно AI_RATE_LIMIT: каждый такой запрос стоит кредитов и
обращается к внешнему сервису. Webhook Stripe не ограничивается.
При превышении — 429 и структурированный ответ ErrorResponse.
"""
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from resume_ats.core.config import settings
from resume_ats.schemas.common import ErrorResponse

AI_PREFIX = "/ai/"
EXEMPT_PATHS = {"/payments/webhook"}


def _get_client_ip(request: Request) -> str:
    """IP клиента: X-Forwarded-For (первый) или request.client.host."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class FixedWindow:
    """Счётчик запросов по ключу в фиксированном окне."""

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        # key -> (count, window_start)
        self._storage: dict[str, tuple[int, float]] = {}
        self._last_sweep = 0.0

    def _sweep(self, now: float) -> None:
        """Удалить ключи с истёкшим окном, не чаще раза за окно."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        expired = [k for k, (_, start) in self._storage.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._storage[key]

    def hit(self, key: str, now: float) -> bool:
        """Засчитать запрос. False — лимит превышен."""
        self._sweep(now)
        count, start = self._storage.get(key, (0, now))
        if now - start >= self.window_seconds:
            count, start = 0, now
        count += 1
        self._storage[key] = (count, start)
        return count <= self.max_requests


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware: счётчик запросов по IP, при превышении лимита — 429."""

    def __init__(self, app, key_func: Callable[[Request], str] | None = None):
        super().__init__(app)
        self.key_func = key_func or _get_client_ip
        self.general = FixedWindow(*settings.rate_limit_parsed())
        self.ai = FixedWindow(*settings.ai_rate_limit_parsed())

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in EXEMPT_PATHS:
            return await call_next(request)

        window = self.ai if path.startswith(AI_PREFIX) else self.general
        if not window.hit(self.key_func(request), time.monotonic()):
            body = ErrorResponse(
                error="rate_limit_exceeded",
                message=f"Too many requests. Limit: {window.max_requests} per {window.window_seconds}s.",
            )
            return JSONResponse(status_code=429, content=body.model_dump())
        return await call_next(request)
