"""
Клиент генерации текста: OpenAI-совместимый chat/completions (OpenRouter по умолчанию).

Один запрос, без повторов. Ошибки:
- не 2xx, таймаут или сетевой сбой -> UpstreamUnavailable;
- в ответе нет текста первого сообщения -> UpstreamEmptyResponse.
"""
import logging

import httpx

from resume_ats.core.config import settings
from resume_ats.core.errors import UpstreamEmptyResponse, UpstreamUnavailable

logger = logging.getLogger(__name__)


def first_message_content(data: dict) -> str | None:
    """choices[0].message.content или None."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str) or not content.strip():
        return None
    return content


class GenerationClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.AI_API_KEY
        self._base_url = base_url or settings.AI_BASE_URL
        self._model = model or settings.AI_MODEL
        self._timeout = timeout_s or settings.AI_TIMEOUT_S
        self._transport = transport

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """Отправить prompt одним сообщением user, вернуть текст ответа."""
        if not self._api_key:
            logger.error("AI_API_KEY is not configured")
            raise UpstreamUnavailable("AI service is not configured")

        payload = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": settings.AI_APP_URL,
            "X-Title": settings.AI_APP_TITLE,
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post("/chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("AI backend request failed: %s", exc)
            raise UpstreamUnavailable() from exc

        if not response.is_success:
            logger.warning("AI backend returned %s: %s", response.status_code, response.text[:500])
            raise UpstreamUnavailable()

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamEmptyResponse() from exc

        content = first_message_content(data)
        if content is None:
            raise UpstreamEmptyResponse()
        return content


def get_generation_client() -> GenerationClient:
    """Dependency для роутеров (в тестах подменяется через dependency_overrides)."""
    return GenerationClient()
