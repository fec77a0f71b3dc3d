"""
Health check: жив ли сервис, доступна ли БД, настроены ли внешние сервисы.

Эндпоинт для оркестраторов (Docker, k8s) и мониторинга.
"""
from fastapi import APIRouter
from pymongo.errors import PyMongoError

from resume_ats.core.config import settings
from resume_ats.core.database import get_client
from resume_ats.core.storage import storage_configured
from resume_ats.schemas.common import SuccessResponse
from resume_ats.services.payments import stripe_configured

router = APIRouter(tags=["health"])


@router.get("/health", response_model=SuccessResponse[dict])
def health():
    """Проверка живости сервиса и MongoDB."""
    try:
        get_client().admin.command("ping")
        mongo = "connected"
    except (PyMongoError, RuntimeError):
        mongo = "disconnected"
    return SuccessResponse(
        data={
            "status": "ok",
            "mongo": mongo,
            "ai": "configured" if settings.AI_API_KEY else "not_configured",
            "payments": "configured" if stripe_configured() else "not_configured",
            "storage": "configured" if storage_configured() else "not_configured",
        }
    )
