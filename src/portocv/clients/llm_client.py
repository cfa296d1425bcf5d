"""Gemini API wrapper bound to a single API key."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from google import genai
from google.genai import types

from portocv.models.request import GenerationRequest

logger = logging.getLogger(__name__)

# Résumé content is never blocked by safety filters.
SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)
SAFETY_SETTINGS = [
    types.SafetySetting(category=c, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for c in SAFETY_CATEGORIES
]


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Gemini client. Retries live in the invoker, not here."""

    def __init__(self, api_key: str, timeout: float | None = None):
        kwargs: dict = {"api_key": api_key}
        if timeout is not None:
            kwargs["http_options"] = types.HttpOptions(timeout=int(timeout * 1000))
        self.client = genai.Client(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    @staticmethod
    def build_contents(request: GenerationRequest) -> list[types.Content]:
        parts = [types.Part.from_text(text=request.prompt)]
        if request.attachment is not None:
            parts.append(
                types.Part.from_bytes(
                    data=base64.b64decode(request.attachment.data),
                    mime_type=request.attachment.mime_type,
                )
            )
        return [types.Content(role="user", parts=parts)]

    @staticmethod
    def build_config(request: GenerationRequest) -> types.GenerateContentConfig:
        kwargs: dict = {"safety_settings": SAFETY_SETTINGS}
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.response_schema is not None:
            kwargs["response_mime_type"] = "application/json"
            kwargs["response_schema"] = request.response_schema
        return types.GenerateContentConfig(**kwargs)

    async def generate(self, request: GenerationRequest) -> LLMResponse:
        """Send one request and return the text response with usage."""
        logger.debug("LLM call: use_case=%s model=%s", request.use_case.value, request.model)
        response = await self.client.aio.models.generate_content(
            model=request.model,
            contents=self.build_contents(request),
            config=self.build_config(request),
        )
        usage = response.usage_metadata
        input_tokens = (usage.prompt_token_count if usage else None) or 0
        output_tokens = (usage.candidates_token_count if usage else None) or 0
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((request.model, input_tokens, output_tokens))
        return LLMResponse(
            text=response.text or "",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
