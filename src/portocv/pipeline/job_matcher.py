"""Agent 5: Job Matcher - bulk-scores postings against a CV."""

from __future__ import annotations

import json
import logging

from portocv.clients.generator import ContentGenerator
from portocv.models.cv import CVData
from portocv.models.jobs import JobMatch, JobPosting
from portocv.models.request import GenerationRequest, UseCase
from portocv.pipeline.cv_tailor import MATCH_THRESHOLD

logger = logging.getLogger(__name__)

MATCH_PROMPT = """\
ACT AS A RECRUITER. Compare this Candidate Summary against these Job Titles.
CANDIDATE: {profile}
SKILLS: {skills}
JOBS: {jobs}
OUTPUT JSON array: [{{ "id": "job_id", "score": number (0-100), "reason": "1 short sentence why" }}]
Score every job exactly once and reuse the given ids."""


def build_match_request(cv: CVData, postings: list[JobPosting], *, model: str) -> GenerationRequest:
    jobs = [{"id": p.id, "title": p.title, "desc": p.description} for p in postings]
    prompt = MATCH_PROMPT.format(
        profile=json.dumps(cv.professional_profile, ensure_ascii=False),
        skills=json.dumps(cv.core_competencies, ensure_ascii=False),
        jobs=json.dumps(jobs, ensure_ascii=False),
    )
    return GenerationRequest(
        use_case=UseCase.JOB_MATCH,
        prompt=prompt,
        model=model,
        temperature=0.2,
        response_schema=list[JobMatch],
    )


def filter_and_rank(
    postings: list[JobPosting],
    matches: list[JobMatch],
    threshold: int = MATCH_THRESHOLD,
) -> list[JobPosting]:
    """Attach scores, keep postings scoring at least ``threshold``, best first.

    Postings without a score count as 0.
    """
    by_id = {m.id: m for m in matches}
    scored = []
    for posting in postings:
        match = by_id.get(posting.id)
        if match is not None:
            posting = posting.model_copy(
                update={"match_score": match.score, "match_reason": match.reason}
            )
        scored.append(posting)
    kept = [p for p in scored if (p.match_score or 0) >= threshold]
    return sorted(kept, key=lambda p: p.match_score or 0, reverse=True)


class JobMatcher:
    def __init__(self, generator: ContentGenerator, model: str = "gemini-3-flash-preview"):
        self.generator = generator
        self.model = model

    async def score(self, cv: CVData, postings: list[JobPosting]) -> list[JobMatch]:
        """Ask the backend for one score per posting."""
        if not postings:
            return []
        logger.info("Scoring %d postings", len(postings))
        return await self.generator.run(build_match_request(cv, postings, model=self.model))

    async def rank(self, cv: CVData, postings: list[JobPosting]) -> list[JobPosting]:
        """Score, then filter and sort."""
        matches = await self.score(cv, postings)
        return filter_and_rank(postings, matches)
