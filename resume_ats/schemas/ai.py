"""
Схемы AI-операций: улучшение текста, сравнение с вакансией, перевод.

Каждый ответ содержит creditsRemaining — баланс после операции.
"""
from pydantic import Field

from resume_ats.schemas.resume import CamelModel, ResumeDocument


class EnhanceRequest(CamelModel):
    text: str = Field(min_length=1, max_length=5000, pattern=r"\S")
    section: str = Field(min_length=1, max_length=100, pattern=r"\S")


class EnhanceResult(CamelModel):
    enhanced_text: str
    credits_remaining: int


class JobMatchRequest(CamelModel):
    resume_data: ResumeDocument
    job_description: str = Field(min_length=1, max_length=20000, pattern=r"\S")


class JobMatchResult(CamelModel):
    analysis: str
    matching_score: int | None = None
    credits_remaining: int


class TranslateRequest(CamelModel):
    resume_data: ResumeDocument
    target_language: str = Field(min_length=1, max_length=64, pattern=r"\S")


class TranslateResult(CamelModel):
    translated_resume_data: ResumeDocument
    target_language: str
    credits_remaining: int
