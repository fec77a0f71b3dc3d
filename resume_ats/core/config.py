"""
Конфигурация приложения из переменных окружения.

Один класс Settings (pydantic-settings), все секреты и настройки читаются из .env.
В коде используем только settings.*, не os.getenv.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

_WINDOWS = {
    "second": 1, "sec": 1, "s": 1,
    "minute": 60, "min": 60, "m": 60,
    "hour": 3600, "h": 3600,
}


def _parse_rate(raw: str, default: tuple[int, int]) -> tuple[int, int]:
    """'100/minute' -> (100, 60). При ошибке формата — default."""
    s = raw.strip().lower().replace(" ", "")
    if "/" not in s:
        return default
    part, window = s.split("/", 1)
    try:
        max_req = int(part)
    except ValueError:
        return default
    return max_req, _WINDOWS.get(window, 60)


class Settings(BaseSettings):
    """Настройки из env."""

    # MongoDB: пользователи (с балансом кредитов), резюме, журнал транзакций
    MONGO_URI: str = ""
    MONGO_DB_NAME: str = "resume_ats"

    # CORS: список origin через запятую в .env
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Rate limit: общий и отдельный (строже) для /ai/*
    RATE_LIMIT: str = "100/minute"
    AI_RATE_LIMIT: str = "10/minute"

    # Логирование
    LOG_LEVEL: str = "INFO"

    # JWT
    JWT_SECRET: str = "change-me-in-production"
    JWT_REFRESH_SECRET: str = "change-me-too"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24  # 1 день
    JWT_REFRESH_EXPIRE_DAYS: int = 30

    # Генерация текста: OpenAI-совместимый chat/completions (по умолчанию OpenRouter)
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://openrouter.ai/api/v1"
    AI_MODEL: str = "meta-llama/llama-3.1-8b-instruct:free"
    AI_TIMEOUT_S: float = 60.0
    AI_APP_URL: str = "https://resume-ats-builder.com"
    AI_APP_TITLE: str = "ResumeATS-Builder"

    # Кредиты: "post" списывает после успешного ответа, "reserve" до вызова с возвратом
    CREDIT_CHARGE_MODE: str = "post"
    SIGNUP_CREDITS: int = 5

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    PAYMENT_SUCCESS_URL: str = "http://localhost:5173/payment-success"
    PAYMENT_CANCEL_URL: str = "http://localhost:5173/payment-canceled"

    # Публичный адрес фронтенда: ссылки вида {PUBLIC_ORIGIN}/resume/{id} в QR-коде
    PUBLIC_ORIGIN: str = "http://localhost:5173"

    # S3 / MinIO для фото профиля
    S3_ENDPOINT: str = ""
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_REGION: str = "us-east-1"
    S3_BUCKET: str = "resume-ats"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def cors_list(self) -> list[str]:
        """CORS origins как список для CORSMiddleware."""
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]

    def rate_limit_parsed(self) -> tuple[int, int]:
        """RATE_LIMIT разобрать в (max_requests, window_seconds). Пример: '100/minute' -> (100, 60)."""
        return _parse_rate(self.RATE_LIMIT, (100, 60))

    def ai_rate_limit_parsed(self) -> tuple[int, int]:
        """AI_RATE_LIMIT в (max_requests, window_seconds)."""
        return _parse_rate(self.AI_RATE_LIMIT, (10, 60))


# Глобальный экземпляр — импортируй: from resume_ats.core.config import settings
settings = Settings()
