# schemas — Pydantic-модели для запроса/ответа API и структура резюме.
from resume_ats.schemas.common import ErrorResponse, SuccessResponse
from resume_ats.schemas.resume import ResumeDocument, TemplateName, TemplateSelection

__all__ = ["SuccessResponse", "ErrorResponse", "ResumeDocument", "TemplateName", "TemplateSelection"]
