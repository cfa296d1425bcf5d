"""Agent 2: Portfolio Critic - quick quality check of a generated portfolio."""

from __future__ import annotations

import json

from portocv.clients.generator import ContentGenerator
from portocv.models.portfolio import PortfolioData, QAFeedback
from portocv.models.request import GenerationRequest, UseCase

MAX_CRITIQUE_CHARS = 4000


def build_critique_request(portfolio: PortfolioData, *, model: str) -> GenerationRequest:
    data = json.dumps(portfolio.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False)
    prompt = (
        "Critique this portfolio build. Score it from 0 to 100, list concrete "
        "improvement suggestions, and give one paragraph of UX insight.\n"
        f"Data: {data[:MAX_CRITIQUE_CHARS]}"
    )
    return GenerationRequest(
        use_case=UseCase.CRITIQUE,
        prompt=prompt,
        model=model,
        response_schema=QAFeedback,
    )


class PortfolioCritic:
    def __init__(self, generator: ContentGenerator, model: str = "gemini-3-flash-preview"):
        self.generator = generator
        self.model = model

    async def review(self, portfolio: PortfolioData) -> QAFeedback:
        return await self.generator.run(build_critique_request(portfolio, model=self.model))
