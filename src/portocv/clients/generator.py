"""Send a GenerationRequest through the invoker and validate the answer."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from portocv.clients.invoker import ResilientInvoker
from portocv.clients.llm_client import LLMClient, LLMResponse
from portocv.errors import GenerationFailed
from portocv.models.request import GenerationRequest
from portocv.utils.json_parser import extract_json

logger = logging.getLogger(__name__)


def parse_response(request: GenerationRequest, text: str) -> Any:
    """Validate raw response text against the request's schema.

    Empty, unparseable or schema-violating payloads raise GenerationFailed.
    """
    use_case = request.use_case.value
    if not text or not text.strip():
        raise GenerationFailed(use_case, "The response was empty.")
    if request.response_schema is None:
        return text.strip()
    try:
        data = extract_json(text)
    except ValueError as exc:
        raise GenerationFailed(use_case, "The response was not valid JSON.") from exc
    try:
        return TypeAdapter(request.response_schema).validate_python(data)
    except ValidationError as exc:
        logger.warning("Schema violation in %s: %s", use_case, exc)
        raise GenerationFailed(use_case, "The response did not match the expected shape.") from exc


class ContentGenerator:
    """Shared entry point used by every pipeline agent."""

    def __init__(self, invoker: ResilientInvoker):
        self.invoker = invoker

    async def run(self, request: GenerationRequest) -> Any:
        logger.info("Running %s on %s", request.use_case.value, request.model)

        async def _call(client: LLMClient) -> LLMResponse:
            return await client.generate(request)

        response = await self.invoker.invoke(_call)
        return parse_response(request, response.text)
