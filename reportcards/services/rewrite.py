import logging
from typing import Any

import httpx

from reportcards.core.config import Settings, get_settings
from reportcards.schemas.rewrite import PROVIDERS

logger = logging.getLogger(__name__)


class RewriteError(Exception):
    """A rewrite that did not produce text.

    ``status_code`` follows the HTTP contract of the rewrite endpoint; ``retriable`` tells
    the caller whether asking again later can succeed.
    """

    def __init__(self, message: str, status_code: int = 500, *, retriable: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retriable = retriable


def build_system_prompt(school_name: str, style_guide: str | None = None, student_name: str | None = None) -> str:
    style_section = f"Writing Style Guide:\n{style_guide}\n\n" if style_guide else ""
    name_section = ""
    if student_name:
        name_section = (
            f"\n\nThe student's name is: {student_name}. Use their name naturally in your rewrite, "
            "typically once at the start or mid-sentence, then use pronouns or implicit subjects for "
            "subsequent sentences. NEVER use placeholders like [Student Name] or [Student's Name]."
        )
    return (
        f"You are a professional education report writer for {school_name}.\n"
        "Your job is to completely REWRITE the teacher's comment following the school's writing style.\n\n"
        f"{style_section}"
        "IMPORTANT Rules:\n"
        "- Do NOT keep the original text - write a completely NEW version\n"
        "- Convey the same meaning and observations but in polished, professional language\n"
        "- Use encouraging, growth-oriented language\n"
        "- Keep similar length to the original (don't make it much longer)\n"
        '- Write in third person (e.g., "The student..." or use the student\'s name if provided)\n'
        "- Be specific and constructive\n"
        f"- Avoid generic phrases - make it personal to the observation{name_section}"
    )


def build_user_prompt(text: str) -> str:
    return f'Please rewrite this teacher\'s comment:\n\n"{text}"'


class RewriteClient:
    """Sends teacher text to one of the supported chat-completion providers."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = httpx.AsyncClient(timeout=self.settings.rewrite_timeout_seconds, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def rewrite(
        self,
        text: str | None,
        *,
        style_guide: str | None = None,
        student_name: str | None = None,
        provider: str | None = None,
        api_key: str | None = None,
    ) -> str:
        if not text or not text.strip():
            raise RewriteError("Text is required", 400)

        selected = provider or "lovable"
        if selected not in PROVIDERS:
            raise RewriteError(f"Invalid provider: {selected}", 400)
        if not api_key:
            # custom providers need the caller's key; without one the school gateway answers
            selected = "lovable"

        system_prompt = build_system_prompt(self.settings.rewrite_school_name, style_guide, student_name)
        url, headers, params, body = self._build_request(selected, api_key, system_prompt, build_user_prompt(text))
        logger.info("Rewriting with provider %s", selected)

        try:
            response = await self._client.post(url, headers=headers, params=params, json=body)
        except httpx.RequestError as exc:
            logger.error("Rewrite request to %s failed: %s", selected, exc)
            raise RewriteError(f"AI API request failed: {exc}", 500) from exc

        if response.status_code == 429:
            raise RewriteError("Rate limit exceeded. Please try again later.", 429, retriable=True)
        if response.status_code == 402:
            raise RewriteError("Payment required. Please add credits to your workspace.", 402)
        if response.is_error:
            logger.error("Rewrite provider %s answered %s: %s", selected, response.status_code, response.text)
            raise RewriteError(f"AI API error: {response.status_code} - {response.text}", 500)

        try:
            rewritten = self._parse(selected, response.json())
        except ValueError as exc:
            raise RewriteError(f"Unexpected AI response: {response.text}", 500) from exc
        if not rewritten:
            raise RewriteError("No response from AI", 500)
        return rewritten

    def _build_request(
        self, provider: str, api_key: str | None, system_prompt: str, user_prompt: str
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        settings = self.settings
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        if provider == "lovable":
            if not settings.lovable_api_key:
                raise RewriteError("LOVABLE_API_KEY is not configured", 500)
            headers = {"Authorization": f"Bearer {settings.lovable_api_key}", "Content-Type": "application/json"}
            return settings.lovable_api_url, headers, {}, {"model": settings.lovable_model, "messages": messages}

        if provider == "openai":
            headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
            body = {"model": settings.openai_model, "messages": messages, "max_tokens": settings.rewrite_max_tokens}
            return settings.openai_api_url, headers, {}, body

        if provider == "google":
            url = settings.google_api_url_template.format(model=settings.google_model)
            body = {"contents": [{"parts": [{"text": f"{system_prompt}\n\n{user_prompt}"}]}]}
            return url, {"Content-Type": "application/json"}, {"key": api_key or ""}, body

        headers = {
            "x-api-key": api_key or "",
            "anthropic-version": settings.anthropic_version,
            "Content-Type": "application/json",
        }
        body = {
            "model": settings.anthropic_model,
            "max_tokens": settings.rewrite_max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        return settings.anthropic_api_url, headers, {}, body

    @staticmethod
    def _parse(provider: str, data: Any) -> str:
        try:
            if provider == "google":
                return data["candidates"][0]["content"]["parts"][0]["text"] or ""
            if provider == "anthropic":
                return data["content"][0]["text"] or ""
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""
