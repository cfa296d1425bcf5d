"""Pydantic models for the UK-style CV and job tailoring."""

from __future__ import annotations

from pydantic import Field

from portocv.models.base import WireModel


class CVExperience(WireModel):
    role: str
    company: str
    location: str
    dates: str
    responsibilities: list[str]


class CVEducation(WireModel):
    degree: str
    institution: str
    dates: str
    details: str | None = None


class CVData(WireModel):
    full_name: str
    contact_info: str  # "Location | Phone | Email | LinkedIn"
    professional_profile: str
    core_competencies: list[str]
    experience: list[CVExperience]
    education: list[CVEducation]
    interests: str | None = None
    references: str


class TailoringResponse(WireModel):
    """Raw answer of the tailoring request."""

    match_score: float = Field(ge=0, le=100)
    analysis: str
    tailored_cv: CVData | None = None


class TailorResult(WireModel):
    success: bool
    match_score: float
    analysis: str
    data: CVData
