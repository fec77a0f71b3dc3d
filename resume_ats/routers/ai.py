"""
AI-эндпоинты: улучшение секции, сравнение с вакансией, перевод резюме.

Все требуют JWT. Стоимость и списание — в services.credits.CreditGate,
ошибки (402, 502, 503) превращает в ErrorResponse обработчик AppError в main.py.
"""
from fastapi import APIRouter, Depends

from resume_ats.core.security import get_current_user
from resume_ats.schemas.ai import (
    EnhanceRequest,
    EnhanceResult,
    JobMatchRequest,
    JobMatchResult,
    TranslateRequest,
    TranslateResult,
)
from resume_ats.schemas.common import ErrorResponse, SuccessResponse
from resume_ats.services import ai as ai_service
from resume_ats.services.generation import GenerationClient, get_generation_client

router = APIRouter(prefix="/ai", tags=["ai"])

AI_RESPONSES = {
    401: {"model": ErrorResponse},
    402: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post("/enhance", response_model=SuccessResponse[EnhanceResult], responses=AI_RESPONSES)
async def enhance(
    data: EnhanceRequest,
    current_user: dict = Depends(get_current_user),
    client: GenerationClient = Depends(get_generation_client),
):
    """Переписать секцию резюме под ATS (1 кредит)."""
    result = await ai_service.enhance(client, current_user, data.text, data.section)
    return SuccessResponse(data=result)


@router.post("/job-match", response_model=SuccessResponse[JobMatchResult], responses=AI_RESPONSES)
async def job_match(
    data: JobMatchRequest,
    current_user: dict = Depends(get_current_user),
    client: GenerationClient = Depends(get_generation_client),
):
    """Анализ соответствия вакансии и MATCH_SCORE (1 кредит)."""
    result = await ai_service.job_match(client, current_user, data.resume_data, data.job_description)
    return SuccessResponse(data=result)


@router.post("/translate", response_model=SuccessResponse[TranslateResult], responses=AI_RESPONSES)
async def translate(
    data: TranslateRequest,
    current_user: dict = Depends(get_current_user),
    client: GenerationClient = Depends(get_generation_client),
):
    """Перевести резюме целиком, структура сохраняется (5 кредитов)."""
    result = await ai_service.translate(client, current_user, data.resume_data, data.target_language)
    return SuccessResponse(data=result)
