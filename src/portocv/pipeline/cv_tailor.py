"""Agent 4: CV Tailor - scores a CV against a job and rewrites it if it qualifies."""

from __future__ import annotations

import json
import logging

from portocv.clients.generator import ContentGenerator
from portocv.errors import GenerationFailed
from portocv.models.cv import CVData, TailoringResponse, TailorResult
from portocv.models.request import GenerationRequest, UseCase

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 60
MAX_REPHRASED_BULLETS = 6

TAILOR_PROMPT = """\
ACT AS A STRICT UK RECRUITER. Compare the candidate CV with the target job.

1. Compute matchScore (0-100) from the overlap of skills, experience and seniority.
2. If matchScore >= {threshold}:
   - Return tailoredCv, a full copy of the CV rewritten for this job.
   - Rewrite professionalProfile towards the job's keywords.
   - Reorder coreCompetencies so the most relevant come first.
   - Rephrase at most {max_bullets} experience bullets to mirror the job's language.
   - Never invent employers, dates, qualifications or metrics.
   - analysis: one or two sentences on why the candidate fits.
3. If matchScore < {threshold}:
   - Omit tailoredCv.
   - analysis must name the disqualifying gap.
Use British English.

TARGET JOB TITLE: {job_title}
TARGET JOB DESCRIPTION:
{job_description}

CANDIDATE CV:
{cv}"""


def build_tailor_request(
    cv: CVData,
    job_description: str,
    job_title: str,
    *,
    model: str,
) -> GenerationRequest:
    prompt = TAILOR_PROMPT.format(
        threshold=MATCH_THRESHOLD,
        max_bullets=MAX_REPHRASED_BULLETS,
        job_title=job_title.strip(),
        job_description=job_description.strip(),
        cv=json.dumps(cv.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False, indent=2),
    )
    return GenerationRequest(
        use_case=UseCase.CV_TAILORING,
        prompt=prompt,
        model=model,
        temperature=0.3,
        response_schema=TailoringResponse,
    )


def apply_tailoring(cv: CVData, response: TailoringResponse) -> TailorResult:
    """Enforce the match threshold on a tailoring response.

    Below the threshold the original CV object is returned untouched. At or
    above it a rewritten CV with a non-empty profile is required.
    """
    if response.match_score < MATCH_THRESHOLD:
        return TailorResult(
            success=False,
            match_score=response.match_score,
            analysis=response.analysis,
            data=cv,
        )
    tailored = response.tailored_cv
    if tailored is None or not tailored.professional_profile.strip():
        raise GenerationFailed(
            UseCase.CV_TAILORING.value,
            f"Score {response.match_score:g} qualifies but no rewritten CV was returned.",
        )
    return TailorResult(
        success=True,
        match_score=response.match_score,
        analysis=response.analysis,
        data=tailored,
    )


class CVTailor:
    def __init__(self, generator: ContentGenerator, model: str = "gemini-3-pro-preview"):
        self.generator = generator
        self.model = model

    async def tailor(self, cv: CVData, job_description: str, job_title: str) -> TailorResult:
        request = build_tailor_request(cv, job_description, job_title, model=self.model)
        response = await self.generator.run(request)
        result = apply_tailoring(cv, response)
        logger.info("Tailoring for %r: score=%g success=%s", job_title, result.match_score, result.success)
        return result
