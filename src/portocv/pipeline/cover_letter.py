"""Agent 6: Cover Letter - short application email body for one posting."""

from __future__ import annotations

from portocv.clients.generator import ContentGenerator
from portocv.models.cv import CVData
from portocv.models.jobs import JobPosting
from portocv.models.request import GenerationRequest, UseCase


def build_cover_letter_request(cv: CVData, posting: JobPosting, *, model: str) -> GenerationRequest:
    company = f" at {posting.company}" if posting.company else ""
    prompt = (
        "Write a short, punchy, professional Cover Letter email body.\n"
        f"JOB: {posting.title}{company}\n"
        f"CANDIDATE: {cv.full_name}\n"
        f"PROFILE: {cv.professional_profile}\n"
        f"KEY SKILLS: {', '.join(cv.core_competencies)}\n"
        "TONE: Enthusiastic, Professional, British English.\n"
        "Return only the email body, no subject line."
    )
    return GenerationRequest(
        use_case=UseCase.COVER_LETTER,
        prompt=prompt,
        model=model,
        temperature=0.7,
    )


class CoverLetterWriter:
    def __init__(self, generator: ContentGenerator, model: str = "gemini-3-pro-preview"):
        self.generator = generator
        self.model = model

    async def draft(self, cv: CVData, posting: JobPosting) -> str:
        return await self.generator.run(build_cover_letter_request(cv, posting, model=self.model))
