"""
Точка входа FastAPI.

lifespan: подключение/отключение MongoDB при старте/остановке.
CORS, rate limit, exception handlers (структурированные ответы), подключение роутеров
(health, auth, resumes, ai, payments, uploads).
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resume_ats.core.config import settings
from resume_ats.core.database import connect_to_mongo, close_mongo_connection
from resume_ats.core.errors import AppError, InsufficientCredits, RefundFailed
from resume_ats.middleware.rate_limit import RateLimitMiddleware
from resume_ats.routers import ai, auth, health, payments, resumes, uploads
from resume_ats.schemas.common import ErrorResponse, SuccessResponse

# Логирование
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл: при старте — подключение к Mongo, при остановке — отключение."""
    logger.info("Starting up: connecting to MongoDB...")
    connect_to_mongo()
    yield
    logger.info("Shutting down: closing MongoDB...")
    close_mongo_connection()


app = FastAPI(
    title="ResumeATS-Builder API",
    description="Резюме, шаблоны и экспорт, AI-операции за кредиты. Структурированные ответы: success, data / error, message.",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS — список origins из конфига (добавляем первым, выполняется после rate limit)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Rate limit по IP — выполняется первым (RATE_LIMIT и AI_RATE_LIMIT из config)
app.add_middleware(RateLimitMiddleware)


# Обработчик неожиданных исключений — структурированный ответ
@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s: %s", request.url.path, exc)
    body = ErrorResponse(error="internal_server_error", message="An unexpected error occurred")
    return JSONResponse(status_code=500, content=body.model_dump())


# Доменные ошибки: код, статус и сообщение берутся из самой ошибки
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    details = None
    if isinstance(exc, InsufficientCredits):
        details = {"required": exc.required, "balance": exc.balance}
    elif isinstance(exc, RefundFailed):
        # Баланс и результат вызова разошлись, нужен ручной разбор
        logger.critical("RefundFailed on %s: user %s, amount %s", request.url.path, exc.user_id, exc.amount)
        details = {"amount": exc.amount}
    body = ErrorResponse(error=exc.code, message=exc.message, details=details)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)


# Обработчик HTTPException — структурированный ответ
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail and "message" in detail:
        body = ErrorResponse(error=detail["error"], message=detail["message"])
    else:
        body = ErrorResponse(error="request_failed", message=str(detail) if detail else "Request failed")
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


# Обработчик валидации (422) — структурированный ответ
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    msg = "; ".join(f"{e.get('loc', [])}: {e.get('msg', '')}" for e in errors[:3])
    body = ErrorResponse(error="validation_error", message=msg or "Validation failed")
    return JSONResponse(status_code=422, content=body.model_dump())


# Корень и документация — структурированный ответ
@app.get("/", response_model=SuccessResponse[dict])
def root():
    return SuccessResponse(data={"message": "ResumeATS-Builder API", "docs": "/docs", "health": "/health"})


# Роутеры
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(resumes.router)
app.include_router(ai.router)
app.include_router(payments.router)
app.include_router(uploads.router)
