"""
AI-операции над резюме. Каждая проходит через CreditGate:
enhance и job_match стоят 1 кредит, translate — 5.
"""
import json
import re

from pydantic import ValidationError

from resume_ats.core.errors import ResponseParseError
from resume_ats.schemas.ai import EnhanceResult, JobMatchResult, TranslateResult
from resume_ats.schemas.resume import ResumeDocument
from resume_ats.services.credits import CreditGate, Operation
from resume_ats.services.generation import GenerationClient
from resume_ats.services.prompts import enhance_prompt, job_match_prompt, translate_prompt

MATCH_SCORE_RE = re.compile(r"MATCH_SCORE:\s*(\d{1,3})\s*%", re.IGNORECASE)
# Модель иногда оборачивает JSON в текст или ```json, берём внешний блок {...}
JSON_BLOCK_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_match_score(analysis: str) -> int | None:
    """MATCH_SCORE: NN% -> NN (0..100) или None."""
    match = MATCH_SCORE_RE.search(analysis)
    if not match:
        return None
    return max(0, min(100, int(match.group(1))))


def parse_translation(text: str, source: ResumeDocument) -> ResumeDocument:
    """Ответ модели -> ResumeDocument. Не JSON или не та структура -> ResponseParseError."""
    block = JSON_BLOCK_RE.search(text)
    raw = block.group(0) if block else text
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ResponseParseError("Failed to parse translated data") from exc
    if not isinstance(data, dict):
        raise ResponseParseError("Translated data is not a JSON object")
    try:
        translated = ResumeDocument.model_validate(data)
    except ValidationError as exc:
        raise ResponseParseError("Translated data does not match the resume structure") from exc

    # id записей, дата рождения и фото не переводятся, берём из исходника
    for target, original in zip(translated.work_experience, source.work_experience):
        target.id = original.id
    for target, original in zip(translated.education, source.education):
        target.id = original.id
    info, original_info = translated.personal_info, source.personal_info
    info.birth_date = original_info.birth_date
    info.age = original_info.age
    info.profile_image_ref = original_info.profile_image_ref
    return translated


async def enhance(client: GenerationClient, user: dict, text: str, section: str) -> EnhanceResult:
    gate = CreditGate(user, Operation.ENHANCE)
    result = await gate.run(
        lambda: client.complete(enhance_prompt(text, section), max_tokens=500, temperature=0.7)
    )
    return EnhanceResult(enhanced_text=result.value.strip(), credits_remaining=result.credits_remaining)


async def job_match(
    client: GenerationClient, user: dict, resume_data: ResumeDocument, job_description: str
) -> JobMatchResult:
    prompt = job_match_prompt(resume_data.model_dump(by_alias=True), job_description)
    gate = CreditGate(user, Operation.JOB_MATCH)
    result = await gate.run(lambda: client.complete(prompt, max_tokens=800, temperature=0.3))
    return JobMatchResult(
        analysis=result.value,
        matching_score=parse_match_score(result.value),
        credits_remaining=result.credits_remaining,
    )


async def translate(
    client: GenerationClient, user: dict, resume_data: ResumeDocument, target_language: str
) -> TranslateResult:
    prompt = translate_prompt(resume_data.model_dump(by_alias=True), target_language)

    async def call() -> ResumeDocument:
        text = await client.complete(prompt, max_tokens=2000, temperature=0.2)
        return parse_translation(text, resume_data)

    gate = CreditGate(user, Operation.TRANSLATE)
    result = await gate.run(call)
    return TranslateResult(
        translated_resume_data=result.value,
        target_language=target_language.strip(),
        credits_remaining=result.credits_remaining,
    )
