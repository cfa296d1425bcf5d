"""Agent 3: CV Writer - builds a structured UK-style CV from a résumé."""

from __future__ import annotations

import logging

from portocv.clients.generator import ContentGenerator
from portocv.models.cv import CVData
from portocv.models.request import GenerationRequest, ResumeInput, UseCase

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 15000

SYSTEM_PROMPT = """\
Act as a senior UK recruitment consultant. Rewrite the candidate's resume as a UK-standard CV.

RULES:
1. Use British English spelling and conventions throughout (e.g. "organised", "programme", "CV").
2. Write like a human professional. Avoid phrasing that reads as AI-generated: no "spearheaded", \
"leveraged", "delve", "tapestry", "dynamic results-driven", "passionate about", no em dashes, \
no rule-of-three filler lists.
3. Only use facts present in the resume. Never invent employers, dates, qualifications or metrics.
4. Experience is reverse-chronological. Each role gets concise bullet responsibilities that start \
with a verb.
5. contactInfo is a single line: "Location | Phone | Email | LinkedIn" (omit missing parts).
6. references defaults to "Available upon request".
7. LENGTH: {length_rule}
{portfolio_rule}
OUTPUT: Strict JSON only."""

LENGTH_RULES = {
    1: "The CV must fit on ONE A4 page: at most 3 roles, 3-4 bullets each, a 3-line profile.",
    2: "The CV must fit on TWO A4 pages: up to 5 roles, 4-6 bullets each, a 4-5 line profile.",
}


def build_cv_request(
    resume: ResumeInput,
    *,
    model: str,
    portfolio_url: str | None = None,
    target_pages: int = 1,
) -> GenerationRequest:
    if target_pages not in LENGTH_RULES:
        raise ValueError(f"target_pages must be 1 or 2, got {target_pages}")
    portfolio_rule = ""
    if portfolio_url and portfolio_url.strip():
        portfolio_rule = (
            f"8. Add the portfolio link {portfolio_url.strip()} to contactInfo "
            "and mention it once in the profile.\n"
        )
    prompt = SYSTEM_PROMPT.format(
        length_rule=LENGTH_RULES[target_pages],
        portfolio_rule=portfolio_rule,
    )
    if resume.text is not None:
        prompt += f"\n\nResume Data Content: {resume.text[:MAX_RESUME_CHARS]}"
    return GenerationRequest(
        use_case=UseCase.CV_GENERATION,
        prompt=prompt,
        model=model,
        temperature=0.4,
        response_schema=CVData,
        attachment=resume.attachment,
    )


class CVWriter:
    def __init__(self, generator: ContentGenerator, model: str = "gemini-3-pro-preview"):
        self.generator = generator
        self.model = model

    async def generate(
        self,
        resume: ResumeInput,
        portfolio_url: str | None = None,
        target_pages: int = 1,
    ) -> CVData:
        """Generate a structured CV."""
        logger.info("Generating %d-page CV", target_pages)
        request = build_cv_request(
            resume,
            model=self.model,
            portfolio_url=portfolio_url,
            target_pages=target_pages,
        )
        return await self.generator.run(request)
